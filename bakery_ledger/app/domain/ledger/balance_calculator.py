"""
Balance Calculator.

Pure fold over an ordered ledger:

    balance = opening_balance
    for each transaction: balance += debit - credit

Sign convention for both customers and parties: positive is "Dr." (the
entity owes), negative is "Cr.", zero is settled. Only the status wording
differs between the two ledger kinds.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Tuple

from pydantic import BaseModel

from bakery_ledger.app.models.ledger_enums import EntityType


CENT = Decimal("0.01")

# entity type -> (positive label, negative label)
_STATUS_LABELS = {
    EntityType.CUSTOMER: ("Due", "Advance"),
    EntityType.PARTY: ("Payable", "Advance"),
}


def money(value) -> Decimal:
    """Coerce to a two-decimal Decimal."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class BalanceComputation(BaseModel):
    running_balances: List[Decimal]
    final_balance: Decimal
    total_debit: Decimal
    total_credit: Decimal

    class Config:
        frozen = True


def compute_balances(opening_balance, ordered_transactions: Iterable) -> BalanceComputation:
    """
    Fold debit/credit postings into running balances.

    Args:
        opening_balance: Balance before the first transaction
        ordered_transactions: Objects exposing debit_amount and credit_amount,
            already in canonical (date, insertion) order

    Returns:
        BalanceComputation with one running balance per transaction and the
        final balance (the opening balance when there are no transactions)
    """
    balance = money(opening_balance)
    total_debit = Decimal("0.00")
    total_credit = Decimal("0.00")
    running: List[Decimal] = []

    for txn in ordered_transactions:
        debit = money(txn.debit_amount or 0)
        credit = money(txn.credit_amount or 0)
        balance = balance + debit - credit
        total_debit += debit
        total_credit += credit
        running.append(balance)

    return BalanceComputation(
        running_balances=running,
        final_balance=balance,
        total_debit=total_debit,
        total_credit=total_credit,
    )


def balance_label(balance: Decimal, entity_type: EntityType) -> Tuple[str, str]:
    """
    UI wording for a balance.

    Returns:
        (side, status): side is "Dr.", "Cr." or "" and status is the
        entity-type specific word ("Due"/"Payable", "Advance", "Settled").
    """
    positive, negative = _STATUS_LABELS[entity_type]
    if balance > 0:
        return "Dr.", positive
    if balance < 0:
        return "Cr.", negative
    return "", "Settled"
