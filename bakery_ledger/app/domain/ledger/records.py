"""
Ledger value types.

Plain immutable shapes passed between the store, the balance calculator,
the service and the exporters. ORM rows never leave the store.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from bakery_ledger.app.models.ledger_enums import EntityType, TransactionType, PaymentMethod


class EntityKey(BaseModel):
    """Identifies one ledger: (entity_type, entity_id)."""
    entity_type: EntityType
    entity_id: int

    class Config:
        frozen = True

    def __str__(self) -> str:
        return f"{self.entity_type.value}:{self.entity_id}"


class NewTransaction(BaseModel):
    """A validated, posted entry waiting to be appended."""
    transaction_date: date
    description: str
    reference_number: Optional[str] = None
    transaction_type: TransactionType
    debit_amount: Decimal
    credit_amount: Decimal
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None

    class Config:
        frozen = True


class StoredRecord(NewTransaction):
    """A transaction as persisted by the ledger store."""
    id: int
    entity_type: EntityType
    entity_id: int
    created_at: Optional[datetime] = None

    class Config:
        frozen = True
        from_attributes = True

    @property
    def key(self) -> EntityKey:
        return EntityKey(entity_type=self.entity_type, entity_id=self.entity_id)

    @property
    def amount(self) -> Decimal:
        """The positive side of the posting."""
        return self.debit_amount if self.debit_amount > 0 else self.credit_amount


class EntityRef(BaseModel):
    """Snapshot of the account holder a ledger belongs to."""
    entity_type: EntityType
    entity_id: int
    name: str
    opening_balance: Decimal
    current_balance: Decimal

    class Config:
        frozen = True


class LedgerLine(BaseModel):
    """One statement row: a stored record and the balance right after it."""
    record: StoredRecord
    running_balance: Decimal

    class Config:
        frozen = True


class LedgerSnapshot(BaseModel):
    """Read-only projection of a whole ledger."""
    entity: EntityRef
    opening_balance: Decimal
    lines: List[LedgerLine]
    current_balance: Decimal
    total_debit: Decimal
    total_credit: Decimal

    class Config:
        frozen = True


class EntitySummary(BaseModel):
    """What callers get back after a write, and what the summary cache stores."""
    entity_type: EntityType
    entity_id: int
    entity_name: str
    opening_balance: Decimal
    current_balance: Decimal
    total_debit: Decimal
    total_credit: Decimal
    transaction_count: int
    balance_side: str
    balance_status: str

    class Config:
        frozen = True
