"""
Ledger API Endpoints.

Record transactions, read statements and export them as CSV for
customer and party ledgers.
"""

from urllib.parse import quote

from fastapi import APIRouter, Depends, Path, Body, status
from fastapi.responses import Response

from bakery_ledger.app.core.dependencies import get_ledger_service
from bakery_ledger.app.models.ledger_enums import EntityType
from bakery_ledger.app.schemas.ledger import (
    RecordTransactionRequest, RecordPurchaseRequest, LedgerResponse, LedgerTransactionResponse
)
from bakery_ledger.app.domain.ledger.balance_calculator import balance_label
from bakery_ledger.app.domain.ledger.ledger_service import LedgerService
from bakery_ledger.app.domain.ledger.records import EntityKey, EntitySummary, LedgerSnapshot
from bakery_ledger.app.domain.ledger.statement_exporter import export_ledger_csv, statement_filename

router = APIRouter(tags=["Ledger"])


def csv_download(content: bytes, filename: str) -> Response:
    """CSV attachment; non-ASCII names are carried in the RFC 5987 filename* parameter."""
    fallback = filename.encode("ascii", "replace").decode("ascii").replace('"', "'")
    disposition = f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": disposition},
    )


def to_ledger_response(snapshot: LedgerSnapshot) -> LedgerResponse:
    side, label = balance_label(snapshot.current_balance, snapshot.entity.entity_type)
    return LedgerResponse(
        entity_type=snapshot.entity.entity_type,
        entity_id=snapshot.entity.entity_id,
        entity_name=snapshot.entity.name,
        opening_balance=snapshot.opening_balance,
        current_balance=snapshot.current_balance,
        total_debit=snapshot.total_debit,
        total_credit=snapshot.total_credit,
        balance_side=side,
        balance_status=label,
        transactions=[
            LedgerTransactionResponse(
                id=line.record.id,
                transaction_date=line.record.transaction_date,
                description=line.record.description,
                reference_number=line.record.reference_number,
                transaction_type=line.record.transaction_type.value,
                payment_method=line.record.payment_method.value if line.record.payment_method else None,
                notes=line.record.notes,
                debit_amount=line.record.debit_amount,
                credit_amount=line.record.credit_amount,
                running_balance=line.running_balance,
                created_by=line.record.created_by,
                created_at=line.record.created_at,
            )
            for line in snapshot.lines
        ],
    )


@router.post("/ledger", response_model=EntitySummary, status_code=status.HTTP_201_CREATED)
async def record_transaction(
    payload: RecordTransactionRequest = Body(...),
    service: LedgerService = Depends(get_ledger_service)
):
    """
    Record one ledger transaction.

    The debit/credit side is derived from transaction_type; returns the
    entity's refreshed summary.
    """
    key = EntityKey(entity_type=payload.entity_type, entity_id=payload.entity_id)
    return await service.record_transaction(
        key,
        transaction_date=payload.transaction_date,
        description=payload.description,
        transaction_type=payload.transaction_type,
        amount=payload.amount,
        reference_number=payload.reference_number,
        payment_method=payload.payment_method,
        notes=payload.notes,
        created_by=payload.created_by,
    )


@router.post("/parties/{party_id}/purchases", response_model=EntitySummary, status_code=status.HTTP_201_CREATED)
async def record_purchase(
    party_id: int = Path(..., gt=0),
    payload: RecordPurchaseRequest = Body(...),
    service: LedgerService = Depends(get_ledger_service)
):
    """Record a purchase from a party, optionally settled in full on the spot."""
    return await service.record_purchase(party_id, **payload.model_dump())


@router.get("/ledger/{entity_type}/{entity_id}", response_model=LedgerResponse)
async def get_ledger(
    entity_type: EntityType = Path(...),
    entity_id: int = Path(..., gt=0),
    service: LedgerService = Depends(get_ledger_service)
):
    """Full statement: opening balance, ordered transactions with running balances."""
    key = EntityKey(entity_type=entity_type, entity_id=entity_id)
    return to_ledger_response(await service.get_ledger(key))


@router.get("/ledger/{entity_type}/{entity_id}/summary", response_model=EntitySummary)
async def get_summary(
    entity_type: EntityType = Path(...),
    entity_id: int = Path(..., gt=0),
    service: LedgerService = Depends(get_ledger_service)
):
    key = EntityKey(entity_type=entity_type, entity_id=entity_id)
    return await service.get_summary(key)


@router.get("/ledger/{entity_type}/{entity_id}/export")
async def export_ledger(
    entity_type: EntityType = Path(...),
    entity_id: int = Path(..., gt=0),
    service: LedgerService = Depends(get_ledger_service)
):
    """Download the statement as {entity name}_ledger.csv."""
    key = EntityKey(entity_type=entity_type, entity_id=entity_id)
    snapshot = await service.get_ledger(key)
    return csv_download(export_ledger_csv(snapshot), statement_filename(snapshot.entity.name))


@router.post("/ledger/{entity_type}/{entity_id}/rebuild", response_model=EntitySummary)
async def rebuild_balance(
    entity_type: EntityType = Path(...),
    entity_id: int = Path(..., gt=0),
    service: LedgerService = Depends(get_ledger_service)
):
    """Recompute the stored current balance from the ledger history."""
    key = EntityKey(entity_type=entity_type, entity_id=entity_id)
    return await service.rebuild_balance(key)
