"""
Supplier ledger aggregation.

Reporting view over party ledgers: one row per purchase with how much of it
has been paid. Everything is derived from the ledger store on each call;
nothing here is persisted.

Payments are matched to purchases first-in-first-out: credit postings
(payment_sent, adjustment_credit) settle the oldest open debit postings in
canonical order. A credit carrying a reference number is applied to the
debits with the same reference before the oldest-first pass. A positive
opening balance counts as the oldest debt, a negative one as an advance.
Every party type is included, since purchases can be recorded against any party.

A purchase is Paid when nothing is outstanding, Partial when part of it
is, and Due when none of it has been paid.
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bakery_ledger.app.core.exceptions import EntityNotFoundError
from bakery_ledger.app.models.party import Party
from bakery_ledger.app.models.ledger_enums import EntityType, PaymentStatus, TransactionType
from bakery_ledger.app.domain.ledger.balance_calculator import compute_balances, money
from bakery_ledger.app.domain.ledger.ledger_store import LedgerStore
from bakery_ledger.app.domain.ledger.records import EntityKey, StoredRecord


ZERO = Decimal("0.00")


class SupplierLedgerRow(BaseModel):
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
        frozen = True


class SupplierLedger(BaseModel):
    supplier_id: int
    supplier_name: str
    current_balance: Decimal
    total_purchases: Decimal
    total_paid: Decimal
    total_outstanding: Decimal
    transactions: List[SupplierLedgerRow]

    class Config:
        frozen = True


def payment_status(total: Decimal, paid: Decimal) -> PaymentStatus:
    if paid >= total:
        return PaymentStatus.PAID
    if paid > 0:
        return PaymentStatus.PARTIAL
    return PaymentStatus.DUE


def allocate_payments(ordered: List[StoredRecord], opening_balance: Decimal = ZERO) -> Dict[int, Decimal]:
    """
    Match credits to debits, same reference first and then oldest-first.

    A positive opening balance is the oldest open debt and is settled
    before any posting; a negative one is an advance held for later debits.

    Returns:
        transaction id -> amount settled, for every debit posting
    """
    paid: Dict[int, Decimal] = {}
    open_debits: List[StoredRecord] = []
    carried_debt = max(opening_balance, ZERO)
    unapplied = max(-opening_balance, ZERO)

    for record in ordered:
        if record.debit_amount > 0:
            paid[record.id] = ZERO
            open_debits.append(record)
            # Advance payments made before this purchase settle it immediately
            if unapplied > 0:
                applied = min(unapplied, record.debit_amount)
                paid[record.id] = applied
                unapplied -= applied
            continue

        credit = record.credit_amount
        # A payment quoting an invoice reference settles that invoice first
        if record.reference_number:
            for debit in open_debits:
                if credit <= 0:
                    break
                if debit.reference_number == record.reference_number:
                    applied = min(credit, debit.debit_amount - paid[debit.id])
                    paid[debit.id] += applied
                    credit -= applied

        if carried_debt > 0 and credit > 0:
            applied = min(credit, carried_debt)
            carried_debt -= applied
            credit -= applied

        while credit > 0 and open_debits:
            head = open_debits[0]
            remaining = head.debit_amount - paid[head.id]
            if remaining <= 0:
                open_debits.pop(0)
                continue
            applied = min(credit, remaining)
            paid[head.id] += applied
            credit -= applied
        unapplied += credit

    return paid


def build_supplier_ledger(party: Party, ordered: List[StoredRecord]) -> SupplierLedger:
    """Aggregate one party's canonical-order history into the supplier view."""
    opening = money(party.opening_balance or 0)
    computation = compute_balances(opening, ordered)
    paid = allocate_payments(ordered, opening)

    rows = []
    total_purchases = ZERO
    total_paid = ZERO
    for record, balance in zip(ordered, computation.running_balances):
        if record.transaction_type != TransactionType.PURCHASE:
            continue
        total = record.debit_amount
        amount_paid = paid.get(record.id, ZERO)
        rows.append(SupplierLedgerRow(
            transaction_id=record.id,
            transaction_date=record.transaction_date,
            invoice_number=record.reference_number,
            items=record.description,
            total_amount=total,
            amount_paid=amount_paid,
            outstanding=total - amount_paid,
            running_balance=balance,
            payment_status=payment_status(total, amount_paid),
            payment_method=record.payment_method.value if record.payment_method else None,
        ))
        total_purchases += total
        total_paid += amount_paid

    return SupplierLedger(
        supplier_id=party.id,
        supplier_name=party.name,
        current_balance=computation.final_balance,
        total_purchases=total_purchases,
        total_paid=total_paid,
        total_outstanding=total_purchases - total_paid,
        transactions=rows,
    )


class SupplierLedgerAggregator:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = LedgerStore(db)

    async def get_supplier_ledgers(self) -> List[SupplierLedger]:
        """Every party that has at least one purchase, ordered by name."""
        result = await self.db.execute(select(Party).order_by(Party.name, Party.id))
        suppliers = result.scalars().all()

        by_party: Dict[int, List[StoredRecord]] = defaultdict(list)
        for record in await self.store.list_all(EntityType.PARTY):
            by_party[record.entity_id].append(record)

        ledgers = []
        for party in suppliers:
            ledger = build_supplier_ledger(party, by_party.get(party.id, []))
            if ledger.transactions:
                ledgers.append(ledger)
        return ledgers

    async def get_supplier_ledger(self, party_id: int) -> SupplierLedger:
        """
        Supplier view of one party.

        Raises:
            EntityNotFoundError: if the party does not exist
        """
        party = await self.db.get(Party, party_id)
        if party is None:
            raise EntityNotFoundError(EntityType.PARTY.value, party_id)

        key = EntityKey(entity_type=EntityType.PARTY, entity_id=party_id)
        return build_supplier_ledger(party, await self.store.list(key))
