"""
RECETRA Backend — FastAPI application entry‑point.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from recetra.config import settings
from recetra.database import Base, SessionLocal, engine
from recetra.lifecycle.errors import ReceiptError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(name)-30s  %(levelname)-5s  %(message)s",
)
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    "NotFound": 404,
    "DuplicateReceiptNumber": 409,
    "IllegalStatusTransition": 409,
    "StatusConflict": 409,
    "ImmutableFieldViolation": 422,
    "InvalidReference": 422,
    "MalformedPayload": 422,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: ensure data dir + tables exist
    os.makedirs(settings.DATA_DIR, exist_ok=True)
    # Import models so Base.metadata knows about them
    import recetra.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready (%s)", settings.DATABASE_URL)

    if settings.SEED_REFERENCE_DATA or settings.SEED_SAMPLE_RECEIPTS:
        from recetra.seed import seed_reference_data, seed_sample_receipts
        db = SessionLocal()
        try:
            if settings.SEED_REFERENCE_DATA:
                seed_reference_data(db)
            if settings.SEED_SAMPLE_RECEIPTS:
                seed_sample_receipts(db)
        finally:
            db.close()

    yield
    logger.info("Shutting down")


app = FastAPI(
    title="RECETRA",
    description="Receipt issuance → QR verification payload → payment/email/SMS status → verification",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ReceiptError)
async def receipt_error_handler(request: Request, exc: ReceiptError):
    status_code = ERROR_STATUS.get(exc.code, 400)
    logger.warning("%s on %s %s: %s", exc.code, request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "code": exc.code})


@app.get("/")
async def root():
    return {"service": "RECETRA", "version": "0.1.0", "status": "running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


# ── Register API routers ─────────────────────────────────────────────────
from recetra.routers.receipts import router as receipts_router  # noqa: E402
from recetra.routers.verification import router as verification_router  # noqa: E402
from recetra.routers.reference import router as reference_router  # noqa: E402

app.include_router(receipts_router, prefix="/api", tags=["Receipts"])
app.include_router(verification_router, prefix="/api", tags=["Verification"])
app.include_router(reference_router, prefix="/api", tags=["Reference Data"])
