"""
Transaction type resolution.

The single place that decides whether a transaction type debits or credits
a ledger. Callers pass a positive amount; the debit/credit pair is always
derived here and never accepted from outside.
"""

from decimal import Decimal
from typing import Dict, FrozenSet, Tuple

from bakery_ledger.app.models.ledger_enums import EntityType, TransactionType, PostingSide


_BOTH = frozenset({EntityType.CUSTOMER, EntityType.PARTY})

# transaction_type -> (posting side, entity types it may be recorded against)
POSTING_RULES: Dict[TransactionType, Tuple[PostingSide, FrozenSet[EntityType]]] = {
    TransactionType.SALE: (PostingSide.DEBIT, frozenset({EntityType.CUSTOMER})),
    TransactionType.PAYMENT_RECEIVED: (PostingSide.CREDIT, frozenset({EntityType.CUSTOMER})),
    TransactionType.PURCHASE: (PostingSide.DEBIT, frozenset({EntityType.PARTY})),
    TransactionType.PAYMENT_SENT: (PostingSide.CREDIT, frozenset({EntityType.PARTY})),
    TransactionType.ADJUSTMENT_DEBIT: (PostingSide.DEBIT, _BOTH),
    TransactionType.ADJUSTMENT_CREDIT: (PostingSide.CREDIT, _BOTH),
}

ZERO = Decimal("0.00")


def is_allowed(transaction_type: TransactionType, entity_type: EntityType) -> bool:
    return entity_type in POSTING_RULES[transaction_type][1]


def allowed_types(entity_type: EntityType) -> list:
    """Transaction types that can be recorded against the given entity type."""
    return [t for t, (_, entities) in POSTING_RULES.items() if entity_type in entities]


def posting_side(transaction_type: TransactionType) -> PostingSide:
    return POSTING_RULES[transaction_type][0]


def resolve_posting(
    transaction_type: TransactionType,
    entity_type: EntityType,
    amount: Decimal
) -> Tuple[Decimal, Decimal]:
    """
    Turn a transaction type and a positive amount into (debit, credit).

    Raises:
        ValueError: if the type is not valid for the entity type or the
            amount is not positive. The ledger service validates both
            before calling, so this only fires on programming errors.
    """
    if not is_allowed(transaction_type, entity_type):
        raise ValueError(
            f"Transaction type '{transaction_type.value}' cannot be posted to a {entity_type.value} ledger"
        )
    if amount <= 0:
        raise ValueError(f"Posting amount must be positive, got {amount}")

    if posting_side(transaction_type) == PostingSide.DEBIT:
        return amount, ZERO
    return ZERO, amount
