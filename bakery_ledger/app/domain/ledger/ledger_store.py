"""
Ledger Store.

Append-only log of transactions per (entity_type, entity_id). There is no
update or delete: balances are a fold over an immutable sequence, so no
retroactive patching is ever needed.
"""

import logging
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bakery_ledger.app.core.exceptions import PersistenceError
from bakery_ledger.app.models.ledger_transaction import LedgerTransaction
from bakery_ledger.app.models.ledger_enums import EntityType
from bakery_ledger.app.domain.ledger.records import EntityKey, NewTransaction, StoredRecord

logger = logging.getLogger("bakery_ledger.store")


class LedgerStore:
    """
    Persistence for ledger transactions over an async session.

    append() only flushes; the caller owns the transaction boundary and
    calls commit() once the entity's balance has been refreshed too.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def append(self, key: EntityKey, txn: NewTransaction) -> StoredRecord:
        """
        Add a transaction to the entity's ledger and assign its id.

        Raises:
            PersistenceError: if the database rejects the insert
        """
        row = LedgerTransaction(
            entity_type=key.entity_type,
            entity_id=key.entity_id,
            **txn.model_dump()
        )
        self.db.add(row)
        try:
            await self.db.flush()
            await self.db.refresh(row)
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Ledger append failed for %s: %s", key, exc)
            raise PersistenceError(details={"entity": str(key)}) from exc

        return StoredRecord.model_validate(row)

    async def list(self, key: EntityKey) -> List[StoredRecord]:
        """All transactions of one entity in canonical order (date, then insertion)."""
        query = (
            select(LedgerTransaction)
            .where(
                LedgerTransaction.entity_type == key.entity_type,
                LedgerTransaction.entity_id == key.entity_id,
            )
            .order_by(LedgerTransaction.transaction_date, LedgerTransaction.id)
        )
        result = await self.db.execute(query)
        return [StoredRecord.model_validate(row) for row in result.scalars().all()]

    async def list_all(self, entity_type: Optional[EntityType] = None) -> List[StoredRecord]:
        """Every transaction, grouped by entity and in canonical order within each."""
        query = select(LedgerTransaction).order_by(
            LedgerTransaction.entity_type,
            LedgerTransaction.entity_id,
            LedgerTransaction.transaction_date,
            LedgerTransaction.id,
        )
        if entity_type is not None:
            query = query.where(LedgerTransaction.entity_type == entity_type)

        result = await self.db.execute(query)
        return [StoredRecord.model_validate(row) for row in result.scalars().all()]

    async def count(self, key: EntityKey) -> int:
        result = await self.db.execute(
            select(func.count(LedgerTransaction.id)).where(
                LedgerTransaction.entity_type == key.entity_type,
                LedgerTransaction.entity_id == key.entity_id,
            )
        )
        return result.scalar()

    async def commit(self) -> None:
        """
        Make pending appends durable.

        Raises:
            PersistenceError: after rolling back, if the commit fails
        """
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Ledger commit failed: %s", exc)
            raise PersistenceError() from exc

    async def rollback(self) -> None:
        await self.db.rollback()
