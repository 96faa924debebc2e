"""
Reference data consumed when issuing receipts (read-only from the core).
"""
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, String, Text

from recetra.database import Base


class OrganizationModel(Base):
    """Student organization that issues receipts"""
    __tablename__ = "organizations"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    code = Column(String, nullable=False)  # short code, e.g. CSS
    description = Column(Text)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class CategoryModel(Base):
    """Payment category"""
    __tablename__ = "categories"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    description = Column(Text)
    is_active = Column(Boolean, default=True)


class TemplateModel(Base):
    """Receipt layout template"""
    __tablename__ = "receipt_templates"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text)
    organization = Column(String)
    template_type = Column(String)  # Standard, Event, Donation
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
