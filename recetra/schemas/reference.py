"""
Reference data schemas
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class OrganizationResponse(BaseModel):
    id: str
    name: str
    code: str
    description: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None


class CategoryResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    is_active: bool


class TemplateResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    organization: Optional[str] = None
    template_type: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
