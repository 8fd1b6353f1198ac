"""
FastAPI dependencies for the ledger engine.

Each request gets its own database session; the Redis client and the
per-entity lock registry are process-wide.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bakery_ledger.app.db.session import get_db
from bakery_ledger.app.services.summary_cache import SummaryCache, get_redis
from bakery_ledger.app.domain.ledger.ledger_service import LedgerService
from bakery_ledger.app.domain.ledger.supplier_ledger import SupplierLedgerAggregator


async def get_summary_cache(redis_client=Depends(get_redis)) -> SummaryCache:
    return SummaryCache(client=redis_client)


async def get_ledger_service(
    db: AsyncSession = Depends(get_db),
    cache: SummaryCache = Depends(get_summary_cache)
) -> LedgerService:
    return LedgerService(db, cache=cache)


async def get_supplier_aggregator(db: AsyncSession = Depends(get_db)) -> SupplierLedgerAggregator:
    return SupplierLedgerAggregator(db)
