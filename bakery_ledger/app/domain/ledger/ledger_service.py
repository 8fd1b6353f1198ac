"""
Ledger Service (Domain Logic).

Records transactions against customer and party ledgers and keeps each
entity's materialized balance equal to the fold of its history.

Write flow:
1. Validate the submission (no lock, no I/O)
2. Take the per-entity lock and lock the entity row
3. Load the full history and check it against the stored balance
4. Resolve the posting side and append
5. Recompute the fold, refresh current_balance, commit once
6. Refresh the summary cache
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Callable, Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bakery_ledger.app.core.exceptions import InvariantViolation, LedgerValidationError
from bakery_ledger.app.core.locks import EntityLockRegistry, ledger_locks
from bakery_ledger.app.core.observability import log_context
from bakery_ledger.app.models.ledger_enums import EntityType, TransactionType
from bakery_ledger.app.services.summary_cache import SummaryCache
from bakery_ledger.app.domain.ledger.balance_calculator import (
    BalanceComputation, compute_balances, balance_label, money
)
from bakery_ledger.app.domain.ledger.entities import Entity, load_entity, entity_ref
from bakery_ledger.app.domain.ledger.ledger_store import LedgerStore
from bakery_ledger.app.domain.ledger.posting_rules import resolve_posting
from bakery_ledger.app.domain.ledger.records import (
    EntityKey, EntitySummary, LedgerLine, LedgerSnapshot, NewTransaction, StoredRecord
)
from bakery_ledger.app.domain.ledger.validators import (
    MAX_AMOUNT, ValidatedTransaction, validate_transaction
)

logger = logging.getLogger("bakery_ledger.ledger")


def canonical_order(records: Iterable[StoredRecord]) -> List[StoredRecord]:
    """Transaction date ascending, insertion order (id) as tie-break."""
    return sorted(records, key=lambda r: (r.transaction_date, r.id))


def build_summary(key: EntityKey, entity: Entity, computation: BalanceComputation, count: int) -> EntitySummary:
    side, status = balance_label(computation.final_balance, key.entity_type)
    return EntitySummary(
        entity_type=key.entity_type,
        entity_id=key.entity_id,
        entity_name=entity.name,
        opening_balance=money(entity.opening_balance or 0),
        current_balance=computation.final_balance,
        total_debit=computation.total_debit,
        total_credit=computation.total_credit,
        transaction_count=count,
        balance_side=side,
        balance_status=status,
    )


class LedgerService:
    """
    Single parameterized ledger engine for customers and parties.

    Only the posting-rule table distinguishes the two entity types; the
    balance, summary and export paths are shared.
    """

    def __init__(
        self,
        db: AsyncSession,
        cache: Optional[SummaryCache] = None,
        locks: Optional[EntityLockRegistry] = None,
        clock: Optional[Callable[[], date]] = None
    ):
        self.db = db
        self.store = LedgerStore(db)
        self.cache = cache if cache is not None else SummaryCache()
        self.locks = locks if locks is not None else ledger_locks
        self.clock = clock or date.today

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def record_transaction(
        self,
        key: EntityKey,
        transaction_date: Optional[date],
        description: Optional[str],
        transaction_type,
        amount,
        reference_number: Optional[str] = None,
        payment_method=None,
        notes: Optional[str] = None,
        created_by: Optional[str] = None
    ) -> EntitySummary:
        """
        Validate, post and append one transaction, then return the refreshed summary.

        Raises:
            LedgerValidationError: bad input; nothing was written
            EntityNotFoundError: the key does not resolve to an entity
            PersistenceError: the store rejected the write; nothing was committed
            InvariantViolation: stored history contradicts the stored balance
        """
        validated = validate_transaction(
            entity_type=key.entity_type,
            transaction_type=transaction_type,
            amount=amount,
            description=description,
            transaction_date=transaction_date,
            today=self.clock(),
            reference_number=reference_number,
            payment_method=payment_method,
            notes=notes,
        )
        posting = self._post(key, validated, created_by)

        async with self.locks.hold(key):
            summary = await self._append_and_refresh(key, [posting])

        await self.cache.put(summary)
        return summary

    async def record_purchase(
        self,
        party_id: int,
        transaction_date: Optional[date],
        description: Optional[str],
        amount,
        reference_number: Optional[str] = None,
        payment_method=None,
        notes: Optional[str] = None,
        paid_in_full: bool = False,
        created_by: Optional[str] = None
    ) -> EntitySummary:
        """
        Record a purchase from a party.

        With paid_in_full the purchase is settled on the spot: an offsetting
        payment_sent for the same amount and reference is appended in the
        same commit; the payment quotes the purchase reference, so the supplier
        ledger matches it to this purchase.
        """
        key = EntityKey(entity_type=EntityType.PARTY, entity_id=party_id)
        today = self.clock()
        validated = validate_transaction(
            entity_type=key.entity_type,
            transaction_type=TransactionType.PURCHASE,
            amount=amount,
            description=description,
            transaction_date=transaction_date,
            today=today,
            reference_number=reference_number,
            payment_method=payment_method,
            notes=notes,
        )
        postings = [self._post(key, validated, created_by)]

        if paid_in_full:
            payment_text = "Payment for purchase"
            if validated.reference_number:
                payment_text = f"{payment_text} {validated.reference_number}"
            payment = validate_transaction(
                entity_type=key.entity_type,
                transaction_type=TransactionType.PAYMENT_SENT,
                amount=validated.amount,
                description=payment_text,
                transaction_date=validated.transaction_date,
                today=today,
                reference_number=validated.reference_number,
                payment_method=validated.payment_method,
            )
            postings.append(self._post(key, payment, created_by))

        async with self.locks.hold(key):
            summary = await self._append_and_refresh(key, postings)

        await self.cache.put(summary)
        return summary

    async def set_opening_balance(self, key: EntityKey, opening_balance) -> EntitySummary:
        """
        Administrative change of an entity's opening balance.

        Not a transaction: nothing is appended, the fold is recomputed from
        the new starting point and current_balance follows.
        """
        try:
            value = Decimal(str(opening_balance))
        except (InvalidOperation, ValueError):
            raise LedgerValidationError({"opening_balance": "Opening balance must be a valid number"})
        if not value.is_finite() or abs(value) > MAX_AMOUNT:
            raise LedgerValidationError({"opening_balance": "Opening balance is out of range"})
        value = money(value)

        async with self.locks.hold(key):
            entity = await load_entity(self.db, key, for_update=True)
            history = await self.store.list(key)
            await self._check_history(key, entity, history)

            previous = money(entity.opening_balance or 0)
            computation = compute_balances(value, history)
            entity.opening_balance = value
            entity.current_balance = computation.final_balance
            await self.store.commit()

            logger.info(
                "Opening balance changed",
                extra=log_context(entity=str(key), previous=str(previous), opening_balance=str(value))
            )
            summary = build_summary(key, entity, computation, len(history))

        await self.cache.put(summary)
        return summary

    async def rebuild_balance(self, key: EntityKey) -> EntitySummary:
        """
        Recompute and rewrite the materialized balance from the ledger.

        Repair tool for balances changed outside the engine; drift is logged,
        never applied silently.
        """
        async with self.locks.hold(key):
            entity = await load_entity(self.db, key, for_update=True)
            history = await self.store.list(key)
            self._check_postings(key, history)

            computation = compute_balances(entity.opening_balance or 0, history)
            stored = money(entity.current_balance or 0)
            if stored != computation.final_balance:
                logger.warning(
                    "Rebuilt drifted balance",
                    extra=log_context(
                        entity=str(key),
                        stored_balance=str(stored),
                        computed_balance=str(computation.final_balance),
                    )
                )
            entity.current_balance = computation.final_balance
            await self.store.commit()
            summary = build_summary(key, entity, computation, len(history))

        await self.cache.put(summary)
        return summary

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_ledger(self, key: EntityKey) -> LedgerSnapshot:
        """Opening balance, ordered transactions with running balances, and current balance."""
        entity = await load_entity(self.db, key)
        history = await self.store.list(key)
        computation = compute_balances(entity.opening_balance or 0, history)

        stored = money(entity.current_balance or 0)
        if stored != computation.final_balance:
            logger.error(
                "Stored balance disagrees with ledger",
                extra=log_context(
                    entity=str(key),
                    stored_balance=str(stored),
                    computed_balance=str(computation.final_balance),
                )
            )

        return LedgerSnapshot(
            entity=entity_ref(key, entity),
            opening_balance=money(entity.opening_balance or 0),
            lines=[
                LedgerLine(record=record, running_balance=balance)
                for record, balance in zip(history, computation.running_balances)
            ],
            current_balance=computation.final_balance,
            total_debit=computation.total_debit,
            total_credit=computation.total_credit,
        )

    async def get_summary(self, key: EntityKey) -> EntitySummary:
        """
        Current summary, from cache when it still matches the entity row.

        A cached entry is trusted only if its balances and transaction count
        equal what the database holds now.
        """
        entity = await load_entity(self.db, key)
        count = await self.store.count(key)

        cached = await self.cache.get(key)
        if (
            cached is not None
            and cached.transaction_count == count
            and cached.current_balance == money(entity.current_balance or 0)
            and cached.opening_balance == money(entity.opening_balance or 0)
        ):
            return cached

        history = await self.store.list(key)
        summary = build_summary(key, entity, compute_balances(entity.opening_balance or 0, history), len(history))
        await self.cache.put(summary)
        return summary

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _post(self, key: EntityKey, validated: ValidatedTransaction, created_by: Optional[str]) -> NewTransaction:
        debit, credit = resolve_posting(validated.transaction_type, key.entity_type, money(validated.amount))
        return NewTransaction(
            transaction_date=validated.transaction_date,
            description=validated.description,
            reference_number=validated.reference_number,
            transaction_type=validated.transaction_type,
            debit_amount=debit,
            credit_amount=credit,
            payment_method=validated.payment_method,
            notes=validated.notes,
            created_by=created_by,
        )

    async def _append_and_refresh(self, key: EntityKey, postings: List[NewTransaction]) -> EntitySummary:
        """Append postings and refresh the balance in one commit. Caller holds the entity lock."""
        entity = await load_entity(self.db, key, for_update=True)
        history = await self.store.list(key)
        await self._check_history(key, entity, history)

        appended = []
        for posting in postings:
            appended.append(await self.store.append(key, posting))

        ordered = canonical_order(history + appended)
        computation = compute_balances(entity.opening_balance or 0, ordered)
        entity.current_balance = computation.final_balance
        await self.store.commit()

        for record in appended:
            logger.info(
                "Ledger transaction recorded",
                extra=log_context(
                    entity=str(key),
                    transaction_id=record.id,
                    transaction_type=record.transaction_type.value,
                    debit=str(record.debit_amount),
                    credit=str(record.credit_amount),
                    current_balance=str(computation.final_balance),
                )
            )

        return build_summary(key, entity, computation, len(ordered))

    def _check_postings(self, key: EntityKey, history: List[StoredRecord]) -> None:
        for record in history:
            debit, credit = record.debit_amount, record.credit_amount
            if (debit > 0) == (credit > 0) or debit < 0 or credit < 0:
                raise InvariantViolation(
                    f"Ledger transaction {record.id} must have exactly one positive side",
                    details={"entity": str(key), "transaction_id": record.id,
                             "debit": str(debit), "credit": str(credit)}
                )

    async def _check_history(self, key: EntityKey, entity: Entity, history: List[StoredRecord]) -> None:
        """Stored postings must be one-sided and fold to the stored balance."""
        try:
            self._check_postings(key, history)
            computation = compute_balances(entity.opening_balance or 0, history)
            stored = money(entity.current_balance or 0)
            if computation.final_balance != stored:
                raise InvariantViolation(
                    "Stored balance disagrees with the ledger history",
                    details={"entity": str(key), "stored_balance": str(stored),
                             "computed_balance": str(computation.final_balance)}
                )
        except InvariantViolation as exc:
            logger.error("Ledger invariant violated: %s", exc.message, extra=log_context(**exc.details))
            await self.store.rollback()
            raise
