"""
Shared pytest fixtures — in‑memory SQLite + FastAPI TestClient.
"""
import os
import tempfile

# Settings are read at import time; keep the app's own engine off disk
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("DATA_DIR", tempfile.gettempdir())
os.environ.setdefault("MOCK_DISPATCH_DELAY_SECONDS", "0")

from datetime import datetime, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from recetra.database import Base, get_db  # noqa: E402
from recetra.models import ReceiptModel  # noqa: E402,F401  register models
from recetra.main import app  # noqa: E402
from recetra.routers.deps import get_gateways  # noqa: E402
from recetra.schemas import Channel, DispatchResult, ReceiptCreate  # noqa: E402
from recetra.seed import seed_reference_data  # noqa: E402

# StaticPool ensures all connections share the same in-memory database
_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_Session = sessionmaker(autocommit=False, autoflush=False, bind=_ENGINE)

FIXED_NOW = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)


def fixed_clock():
    return FIXED_NOW


def make_request(**overrides) -> ReceiptCreate:
    data = dict(
        payer="Juan Dela Cruz",
        payer_email="juan@example.com",
        payer_phone="09171234567",
        amount=Decimal("500"),
        purpose="Annual Membership Fee",
        category="Membership Fee",
        organization="Computer Science Society",
        issued_by="John Encoder",
    )
    data.update(overrides)
    return ReceiptCreate(**data)


class ScriptedGateway:
    """Provider double that replays queued results (or exceptions), then succeeds."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls: list[str] = []

    async def send(self, receipt):
        self.calls.append(receipt.receipt_number)
        result = self.results.pop(0) if self.results else DispatchResult(success=True, reference="REF-OK")
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture(autouse=True)
def _reset_tables():
    Base.metadata.create_all(bind=_ENGINE)
    yield
    Base.metadata.drop_all(bind=_ENGINE)


@pytest.fixture()
def db():
    session = _Session()
    seed_reference_data(session)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def gateways():
    return {
        Channel.PAYMENT: ScriptedGateway(),
        Channel.EMAIL: ScriptedGateway(),
        Channel.SMS: ScriptedGateway(),
    }


@pytest.fixture()
def client(db, gateways):
    def _override():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = _override
    app.dependency_overrides[get_gateways] = lambda: gateways
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
