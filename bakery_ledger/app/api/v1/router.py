"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from bakery_ledger.app.api.v1.endpoints import entities, ledger, supplier_ledgers

router = APIRouter()

# Customers and parties (account holders)
router.include_router(entities.router)

# Customer / party ledgers
router.include_router(ledger.router)

# Supplier ledger aggregation
router.include_router(supplier_ledgers.router)
