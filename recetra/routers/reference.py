"""
Reference data endpoints (read-only).

GET /api/organizations
GET /api/categories
GET /api/templates
"""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from recetra.database import get_db
from recetra.lifecycle.errors import InvalidReference
from recetra.models.reference import CategoryModel, OrganizationModel, TemplateModel
from recetra.schemas import (
    CategoryResponse,
    OrganizationResponse,
    ReceiptCreate,
    TemplateResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def check_references(db: Session, req: ReceiptCreate) -> None:
    """Issuance must name an active organization and category (and template, if given)."""
    org = (
        db.query(OrganizationModel)
        .filter(OrganizationModel.name == req.organization, OrganizationModel.is_active == True)  # noqa: E712
        .first()
    )
    if not org:
        raise InvalidReference(f"Unknown or inactive organization: {req.organization}")

    category = (
        db.query(CategoryModel)
        .filter(CategoryModel.name == req.category, CategoryModel.is_active == True)  # noqa: E712
        .first()
    )
    if not category:
        raise InvalidReference(f"Unknown or inactive category: {req.category}")

    if req.template_id is not None:
        template = db.get(TemplateModel, req.template_id)
        if not template or not template.is_active:
            raise InvalidReference(f"Unknown or inactive template: {req.template_id}")


# ── GET /api/organizations ───────────────────────────────────────────────
@router.get("/organizations", response_model=List[OrganizationResponse])
def list_organizations(db: Session = Depends(get_db)):
    rows = (
        db.query(OrganizationModel)
        .filter(OrganizationModel.is_active == True)  # noqa: E712
        .order_by(OrganizationModel.name)
        .all()
    )
    return [OrganizationResponse.model_validate(r, from_attributes=True) for r in rows]


# ── GET /api/categories ──────────────────────────────────────────────────
@router.get("/categories", response_model=List[CategoryResponse])
def list_categories(db: Session = Depends(get_db)):
    rows = (
        db.query(CategoryModel)
        .filter(CategoryModel.is_active == True)  # noqa: E712
        .order_by(CategoryModel.name)
        .all()
    )
    return [CategoryResponse.model_validate(r, from_attributes=True) for r in rows]


# ── GET /api/templates ───────────────────────────────────────────────────
@router.get("/templates", response_model=List[TemplateResponse])
def list_templates(organization: Optional[str] = None, db: Session = Depends(get_db)):
    query = db.query(TemplateModel).filter(TemplateModel.is_active == True)  # noqa: E712
    if organization:
        query = query.filter(TemplateModel.organization == organization)
    rows = query.order_by(TemplateModel.name).all()
    logger.info("Found %d templates", len(rows))
    return [TemplateResponse.model_validate(r, from_attributes=True) for r in rows]
