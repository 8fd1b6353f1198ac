"""
Supplier Ledger API Endpoints.

Read-only purchase/payment view over party ledgers.
"""

from typing import List

from fastapi import APIRouter, Depends, Path

from bakery_ledger.app.core.dependencies import get_supplier_aggregator
from bakery_ledger.app.schemas.ledger import SupplierLedgerResponse
from bakery_ledger.app.domain.ledger.supplier_ledger import SupplierLedgerAggregator
from bakery_ledger.app.domain.ledger.statement_exporter import export_supplier_ledger_csv, statement_filename
from bakery_ledger.app.api.v1.endpoints.ledger import csv_download

router = APIRouter(prefix="/supplier-ledgers", tags=["Supplier Ledgers"])


@router.get("", response_model=List[SupplierLedgerResponse])
async def list_supplier_ledgers(
    aggregator: SupplierLedgerAggregator = Depends(get_supplier_aggregator)
):
    """Every supplier with purchases, with totals and per-purchase payment status."""
    return await aggregator.get_supplier_ledgers()


@router.get("/{party_id}", response_model=SupplierLedgerResponse)
async def get_supplier_ledger(
    party_id: int = Path(..., gt=0),
    aggregator: SupplierLedgerAggregator = Depends(get_supplier_aggregator)
):
    return await aggregator.get_supplier_ledger(party_id)


@router.get("/{party_id}/export")
async def export_supplier_ledger(
    party_id: int = Path(..., gt=0),
    aggregator: SupplierLedgerAggregator = Depends(get_supplier_aggregator)
):
    """Download the supplier statement as {supplier name}_ledger.csv."""
    ledger = await aggregator.get_supplier_ledger(party_id)
    return csv_download(export_supplier_ledger_csv(ledger), statement_filename(ledger.supplier_name))
