"""
Customer / Party API Endpoints.

Minimal account-holder surface the ledger needs: create, read, and the
administrative opening-balance change.
"""

from fastapi import APIRouter, Depends, Path, Body, status
from sqlalchemy.ext.asyncio import AsyncSession

from bakery_ledger.app.db.session import get_db
from bakery_ledger.app.core.dependencies import get_ledger_service
from bakery_ledger.app.models.ledger_enums import EntityType
from bakery_ledger.app.schemas.entity import EntityCreate, EntityResponse
from bakery_ledger.app.schemas.ledger import OpeningBalanceUpdate
from bakery_ledger.app.domain.ledger.balance_calculator import balance_label, money
from bakery_ledger.app.domain.ledger.entities import Entity, create_entity, load_entity
from bakery_ledger.app.domain.ledger.ledger_service import LedgerService
from bakery_ledger.app.domain.ledger.records import EntityKey, EntitySummary

router = APIRouter(prefix="/entities", tags=["Customers & Parties"])


def to_response(entity_type: EntityType, entity: Entity) -> EntityResponse:
    balance = money(entity.current_balance or 0)
    side, label = balance_label(balance, entity_type)
    return EntityResponse(
        id=entity.id,
        entity_type=entity_type,
        name=entity.name,
        email=entity.email,
        phone=entity.phone,
        party_type=getattr(entity, "party_type", None),
        opening_balance=money(entity.opening_balance or 0),
        current_balance=balance,
        balance_side=side,
        balance_status=label,
        is_active=entity.is_active,
        created_at=entity.created_at,
    )


@router.post("/{entity_type}", response_model=EntityResponse, status_code=status.HTTP_201_CREATED)
async def create_account_holder(
    entity_type: EntityType = Path(...),
    payload: EntityCreate = Body(...),
    db: AsyncSession = Depends(get_db)
):
    """Create a customer or party. Its current balance starts at the opening balance."""
    entity = await create_entity(db, entity_type, **payload.model_dump())
    return to_response(entity_type, entity)


@router.get("/{entity_type}/{entity_id}", response_model=EntityResponse)
async def get_account_holder(
    entity_type: EntityType = Path(...),
    entity_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(get_db)
):
    """Fetch a customer or party with its opening and current balance."""
    key = EntityKey(entity_type=entity_type, entity_id=entity_id)
    return to_response(entity_type, await load_entity(db, key))


@router.put("/{entity_type}/{entity_id}/opening-balance", response_model=EntitySummary)
async def change_opening_balance(
    entity_type: EntityType = Path(...),
    entity_id: int = Path(..., gt=0),
    payload: OpeningBalanceUpdate = Body(...),
    service: LedgerService = Depends(get_ledger_service)
):
    """Administrative opening balance change; the current balance is recomputed."""
    key = EntityKey(entity_type=entity_type, entity_id=entity_id)
    return await service.set_opening_balance(key, payload.opening_balance)
