"""
Ledger Transaction database model.

Append-only record of one debit or credit against a customer or party.
"""

from sqlalchemy import (
    Column, Integer, Numeric, DateTime, Date, Enum, String, Text, Index, CheckConstraint, event
)
from sqlalchemy.sql import func
from bakery_ledger.app.db.session import Base
from bakery_ledger.app.models.ledger_enums import EntityType, TransactionType, PaymentMethod


class LedgerTransaction(Base):
    """
    Ledger Transaction model.

    Immutable: NO updates or deletions. Corrections are new offsetting entries.
    Exactly one of debit_amount / credit_amount is positive.
    The running balance is not stored; it is recomputed from the ordered history.
    """
    __tablename__ = "ledger_transactions"
    __table_args__ = (
        Index("ix_ledger_transactions_entity_order", "entity_type", "entity_id", "transaction_date", "id"),
        CheckConstraint(
            "(debit_amount > 0 AND credit_amount = 0) OR (debit_amount = 0 AND credit_amount > 0)",
            name="ck_ledger_transactions_single_side",
        ),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Owning entity (customer or party id, discriminated by entity_type)
    entity_type = Column(Enum(EntityType), nullable=False)
    entity_id = Column(Integer, nullable=False, index=True)

    # Entry details
    transaction_date = Column(Date, nullable=False)
    description = Column(String(500), nullable=False)
    reference_number = Column(String(100), nullable=True)
    transaction_type = Column(Enum(TransactionType), nullable=False)
    payment_method = Column(Enum(PaymentMethod), nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(String(100), nullable=True)

    # Financials
    debit_amount = Column(Numeric(12, 2), nullable=False, default=0)
    credit_amount = Column(Numeric(12, 2), nullable=False, default=0)

    # Timestamps (Immutable - no updated_at)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return (
            f"<LedgerTransaction(id={self.id}, {self.entity_type.value}={self.entity_id}, "
            f"type='{self.transaction_type.value}', dr={self.debit_amount}, cr={self.credit_amount})>"
        )


class AppendOnlyViolation(RuntimeError):
    """Raised when code attempts to modify or remove a stored ledger transaction."""


@event.listens_for(LedgerTransaction, "before_update")
def _reject_update(mapper, connection, target):
    raise AppendOnlyViolation(f"Ledger transaction {target.id} is immutable and cannot be updated")


@event.listens_for(LedgerTransaction, "before_delete")
def _reject_delete(mapper, connection, target):
    raise AppendOnlyViolation(f"Ledger transaction {target.id} is immutable and cannot be deleted")
