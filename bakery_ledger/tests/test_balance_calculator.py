"""
Balance Calculator Tests.

The fold is pure, so these run without a database.
"""

import random
from decimal import Decimal
from types import SimpleNamespace

import pytest

from bakery_ledger.app.domain.ledger.balance_calculator import compute_balances, balance_label, money
from bakery_ledger.app.models.ledger_enums import EntityType


def txn(debit="0", credit="0"):
    return SimpleNamespace(debit_amount=Decimal(debit), credit_amount=Decimal(credit))


def test_empty_history_keeps_opening_balance():
    result = compute_balances(Decimal("-50"), [])
    assert result.running_balances == []
    assert result.final_balance == Decimal("-50.00")
    assert result.total_debit == Decimal("0")
    assert result.total_credit == Decimal("0")


def test_running_balances_are_prefix_sums():
    result = compute_balances(Decimal("10"), [txn(debit="100"), txn(credit="60"), txn(debit="5.25")])
    assert result.running_balances == [Decimal("110.00"), Decimal("50.00"), Decimal("55.25")]
    assert result.final_balance == Decimal("55.25")
    assert result.total_debit == Decimal("105.25")
    assert result.total_credit == Decimal("60.00")


@pytest.mark.parametrize("seed", range(10))
def test_fold_matches_closed_form(seed):
    """final = opening + sum(debit) - sum(credit), and every step is the prefix sum."""
    rng = random.Random(seed)
    opening = money(Decimal(rng.randint(-100000, 100000)) / 100)
    transactions = []
    for _ in range(rng.randint(0, 40)):
        amount = money(Decimal(rng.randint(1, 10000000)) / 100)
        transactions.append(txn(debit=amount) if rng.random() < 0.5 else txn(credit=amount))

    result = compute_balances(opening, transactions)

    expected = opening
    for txn_, running in zip(transactions, result.running_balances):
        expected = expected + txn_.debit_amount - txn_.credit_amount
        assert running == expected
    assert len(result.running_balances) == len(transactions)
    assert result.final_balance == opening + sum(t.debit_amount for t in transactions) - sum(
        t.credit_amount for t in transactions
    )


def test_recomputing_is_deterministic():
    history = [txn(debit="40"), txn(credit="15.5"), txn(debit="0.01")]
    assert compute_balances(0, history) == compute_balances(0, history)


def test_accepts_plain_numbers_for_opening_balance():
    assert compute_balances(0, [txn(debit="1")]).final_balance == Decimal("1.00")


@pytest.mark.parametrize(
    "balance, entity_type, expected",
    [
        (Decimal("40"), EntityType.CUSTOMER, ("Dr.", "Due")),
        (Decimal("-40"), EntityType.CUSTOMER, ("Cr.", "Advance")),
        (Decimal("0"), EntityType.CUSTOMER, ("", "Settled")),
        (Decimal("150"), EntityType.PARTY, ("Dr.", "Payable")),
        (Decimal("-1"), EntityType.PARTY, ("Cr.", "Advance")),
        (Decimal("0.00"), EntityType.PARTY, ("", "Settled")),
    ],
)
def test_balance_labels(balance, entity_type, expected):
    assert balance_label(balance, entity_type) == expected
