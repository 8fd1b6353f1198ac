"""
Ledger Schemas.

Request bodies stay loose on value types (amount, transaction_type) so the
ledger service can report every bad field in one field -> message map.
Debit/credit amounts are never accepted from clients.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List, Union
from bakery_ledger.app.models.ledger_enums import EntityType, PaymentStatus


class RecordTransactionRequest(BaseModel):
    """Body of POST /ledger."""
    entity_type: EntityType
    entity_id: int
    transaction_date: Optional[date] = None
    description: Optional[str] = None
    reference_number: Optional[str] = None
    transaction_type: Optional[str] = None
    amount: Optional[Union[Decimal, str]] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[str] = Field(None, max_length=100)

    class Config:
        extra = "forbid"


class RecordPurchaseRequest(BaseModel):
    """Body of POST /parties/{party_id}/purchases."""
    transaction_date: Optional[date] = None
    description: Optional[str] = None
    reference_number: Optional[str] = None
    amount: Optional[Union[Decimal, str]] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    paid_in_full: bool = False
    created_by: Optional[str] = Field(None, max_length=100)

    class Config:
        extra = "forbid"


class OpeningBalanceUpdate(BaseModel):
    opening_balance: Union[Decimal, str]


class LedgerTransactionResponse(BaseModel):
    """One statement line."""
    id: int
    transaction_date: date
    description: str
    reference_number: Optional[str]
    transaction_type: str
    payment_method: Optional[str]
    notes: Optional[str]
    debit_amount: Decimal
    credit_amount: Decimal
    running_balance: Decimal
    created_by: Optional[str]
    created_at: Optional[datetime]


class LedgerResponse(BaseModel):
    entity_type: EntityType
    entity_id: int
    entity_name: str
    opening_balance: Decimal
    current_balance: Decimal
    total_debit: Decimal
    total_credit: Decimal
    balance_side: str
    balance_status: str
    transactions: List[LedgerTransactionResponse]


class SupplierLedgerRowResponse(BaseModel):
    transaction_id: int
    transaction_date: date
    invoice_number: Optional[str]
    items: str
    total_amount: Decimal
    amount_paid: Decimal
    outstanding: Decimal
    running_balance: Decimal
    payment_status: PaymentStatus
    payment_method: Optional[str]

    class Config:
        from_attributes = True


class SupplierLedgerResponse(BaseModel):
    supplier_id: int
    supplier_name: str
    current_balance: Decimal
    total_purchases: Decimal
    total_paid: Decimal
    total_outstanding: Decimal
    transactions: List[SupplierLedgerRowResponse]

    class Config:
        from_attributes = True
