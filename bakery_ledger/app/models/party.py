"""
Party (supplier / creditor) database model.

Payables side of the ledger.
"""

from sqlalchemy import Column, Integer, String, Text, Numeric, Boolean, DateTime, Enum
from sqlalchemy.sql import func
from bakery_ledger.app.db.session import Base
from bakery_ledger.app.models.ledger_enums import PartyType


class Party(Base):
    """
    Party model.

    Same balance rules as Customer: current_balance is derived from the
    ledger and is never edited directly.
    """
    __tablename__ = "parties"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    name = Column(String(200), nullable=False)
    party_type = Column(Enum(PartyType), default=PartyType.SUPPLIER, nullable=False, index=True)
    contact_person = Column(String(100), nullable=True)
    email = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)
    tax_id = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)

    # Balances
    opening_balance = Column(Numeric(14, 2), nullable=False, default=0)
    current_balance = Column(Numeric(14, 2), nullable=False, default=0)

    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Party(id={self.id}, name='{self.name}', type='{self.party_type.value}')>"
