"""
Posting Rule Tests.
"""

from decimal import Decimal

import pytest

from bakery_ledger.app.domain.ledger.posting_rules import (
    POSTING_RULES, allowed_types, is_allowed, resolve_posting
)
from bakery_ledger.app.models.ledger_enums import EntityType, TransactionType


@pytest.mark.parametrize(
    "transaction_type, entity_type, side",
    [
        (TransactionType.SALE, EntityType.CUSTOMER, "debit"),
        (TransactionType.PAYMENT_RECEIVED, EntityType.CUSTOMER, "credit"),
        (TransactionType.PURCHASE, EntityType.PARTY, "debit"),
        (TransactionType.PAYMENT_SENT, EntityType.PARTY, "credit"),
        (TransactionType.ADJUSTMENT_DEBIT, EntityType.CUSTOMER, "debit"),
        (TransactionType.ADJUSTMENT_DEBIT, EntityType.PARTY, "debit"),
        (TransactionType.ADJUSTMENT_CREDIT, EntityType.CUSTOMER, "credit"),
        (TransactionType.ADJUSTMENT_CREDIT, EntityType.PARTY, "credit"),
    ],
)
def test_posting_side_per_type(transaction_type, entity_type, side):
    amount = Decimal("123.45")
    debit, credit = resolve_posting(transaction_type, entity_type, amount)
    if side == "debit":
        assert (debit, credit) == (amount, Decimal("0"))
    else:
        assert (debit, credit) == (Decimal("0"), amount)


def test_exactly_one_side_for_every_allowed_pair():
    for transaction_type in TransactionType:
        for entity_type in EntityType:
            if not is_allowed(transaction_type, entity_type):
                continue
            debit, credit = resolve_posting(transaction_type, entity_type, Decimal("7"))
            assert (debit > 0) != (credit > 0)
            assert debit + credit == Decimal("7")


@pytest.mark.parametrize(
    "transaction_type, entity_type",
    [
        (TransactionType.SALE, EntityType.PARTY),
        (TransactionType.PAYMENT_RECEIVED, EntityType.PARTY),
        (TransactionType.PURCHASE, EntityType.CUSTOMER),
        (TransactionType.PAYMENT_SENT, EntityType.CUSTOMER),
    ],
)
def test_incompatible_pairs_are_rejected(transaction_type, entity_type):
    assert not is_allowed(transaction_type, entity_type)
    with pytest.raises(ValueError):
        resolve_posting(transaction_type, entity_type, Decimal("10"))


def test_non_positive_amount_is_rejected():
    with pytest.raises(ValueError):
        resolve_posting(TransactionType.SALE, EntityType.CUSTOMER, Decimal("0"))


def test_every_type_has_a_rule():
    assert set(POSTING_RULES) == set(TransactionType)


def test_allowed_types_per_entity():
    assert set(allowed_types(EntityType.CUSTOMER)) == {
        TransactionType.SALE,
        TransactionType.PAYMENT_RECEIVED,
        TransactionType.ADJUSTMENT_DEBIT,
        TransactionType.ADJUSTMENT_CREDIT,
    }
    assert set(allowed_types(EntityType.PARTY)) == {
        TransactionType.PURCHASE,
        TransactionType.PAYMENT_SENT,
        TransactionType.ADJUSTMENT_DEBIT,
        TransactionType.ADJUSTMENT_CREDIT,
    }
