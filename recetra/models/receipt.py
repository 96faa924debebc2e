"""
SQLAlchemy model for receipt persistence.
"""
from sqlalchemy import Column, DateTime, Numeric, String, Text

from recetra.database import Base


class ReceiptModel(Base):
    __tablename__ = "receipts"

    id = Column(String, primary_key=True)
    receipt_number = Column(String, nullable=False, unique=True, index=True)
    payer = Column(String, nullable=False)
    payer_email = Column(String)
    payer_phone = Column(String)
    amount = Column(Numeric(12, 2), nullable=False)
    purpose = Column(String, nullable=False)
    category = Column(String, nullable=False)
    organization = Column(String, nullable=False, index=True)
    issued_by = Column(String, nullable=False, index=True)
    issued_at = Column(DateTime(timezone=True), nullable=False)
    template_id = Column(String)
    payment_method = Column(String, nullable=False, default="Manual")
    verification_payload = Column(Text, nullable=False)

    # Status fields, the only mutable columns
    payment_status = Column(String, nullable=False, default="pending")
    email_status = Column(String, nullable=False, default="pending")
    sms_status = Column(String, nullable=False, default="pending")
