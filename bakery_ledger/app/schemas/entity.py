"""
Customer / Party Schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional
from bakery_ledger.app.models.ledger_enums import EntityType, PartyType


class EntityCreate(BaseModel):
    """Schema for creating a customer or party."""
    name: str = Field(..., min_length=1, max_length=200)
    opening_balance: Decimal = Field(Decimal("0"), ge=Decimal("-999999999.99"), le=Decimal("999999999.99"))
    email: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    # Party only
    party_type: Optional[PartyType] = None
    contact_person: Optional[str] = Field(None, max_length=100)
    tax_id: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class EntityResponse(BaseModel):
    """Schema for displaying a customer or party with its balance badge."""
    id: int
    entity_type: EntityType
    name: str
    email: Optional[str]
    phone: Optional[str]
    party_type: Optional[PartyType] = None
    opening_balance: Decimal
    current_balance: Decimal
    balance_side: str
    balance_status: str
    is_active: bool
    created_at: Optional[datetime]
