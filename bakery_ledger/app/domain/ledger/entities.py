"""
Customer / party lookup for the ledger engine.

The ledger is keyed by (entity_type, entity_id); this module resolves such
a key to its ORM row. Creating entities belongs to the CRUD layer and is
only exposed here so the API and tests can seed account holders.
"""

from decimal import Decimal
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bakery_ledger.app.core.exceptions import EntityNotFoundError
from bakery_ledger.app.models.customer import Customer
from bakery_ledger.app.models.party import Party
from bakery_ledger.app.models.ledger_enums import EntityType, PartyType
from bakery_ledger.app.domain.ledger.records import EntityKey, EntityRef
from bakery_ledger.app.domain.ledger.balance_calculator import money


Entity = Union[Customer, Party]

ENTITY_MODELS = {
    EntityType.CUSTOMER: Customer,
    EntityType.PARTY: Party,
}


async def load_entity(db: AsyncSession, key: EntityKey, for_update: bool = False) -> Entity:
    """
    Fetch the customer or party behind a ledger key.

    Args:
        for_update: lock the row until the surrounding transaction ends
            (ignored by databases without row locks, e.g. SQLite)

    Raises:
        EntityNotFoundError: if no such entity exists
    """
    model = ENTITY_MODELS[key.entity_type]
    query = select(model).where(model.id == key.entity_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)

    result = await db.execute(query)
    entity = result.scalar_one_or_none()
    if entity is None:
        raise EntityNotFoundError(key.entity_type.value, key.entity_id)
    return entity


def entity_ref(key: EntityKey, entity: Entity) -> EntityRef:
    return EntityRef(
        entity_type=key.entity_type,
        entity_id=entity.id,
        name=entity.name,
        opening_balance=money(entity.opening_balance or 0),
        current_balance=money(entity.current_balance or 0),
    )


async def create_entity(
    db: AsyncSession,
    entity_type: EntityType,
    name: str,
    opening_balance: Decimal = Decimal("0"),
    party_type: Optional[PartyType] = None,
    **contact
) -> Entity:
    """
    Create a customer or party whose current balance starts at its opening balance.

    `contact` carries the optional contact columns of the target model
    (email, phone, address, contact_person, tax_id, notes).
    """
    model = ENTITY_MODELS[entity_type]
    opening = money(opening_balance)
    fields = {k: v for k, v in contact.items() if v is not None and hasattr(model, k)}
    if entity_type == EntityType.PARTY:
        fields["party_type"] = party_type or PartyType.SUPPLIER

    entity = model(name=name.strip(), opening_balance=opening, current_balance=opening, **fields)
    db.add(entity)
    await db.commit()
    await db.refresh(entity)
    return entity
