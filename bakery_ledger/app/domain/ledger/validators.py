"""
Field validation for ledger submissions.

Every rule runs and all failures are reported together, keyed by field
name, so a form can highlight each bad input at once.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional

from bakery_ledger.app.core.exceptions import LedgerValidationError
from bakery_ledger.app.models.ledger_enums import EntityType, TransactionType, PaymentMethod
from bakery_ledger.app.domain.ledger.posting_rules import is_allowed, allowed_types


MAX_AMOUNT = Decimal("999999999.99")
DESCRIPTION_MIN_LENGTH = 3
DESCRIPTION_MAX_LENGTH = 500
REFERENCE_MAX_LENGTH = 100


def one_year_before(day: date) -> date:
    """Same calendar day one year earlier; Feb 29 falls back to Feb 28."""
    try:
        return day.replace(year=day.year - 1)
    except ValueError:
        return day.replace(year=day.year - 1, day=28)


def _coerce_enum(enum_cls, value):
    if value is None or isinstance(value, enum_cls):
        return value
    return enum_cls(value)


def _coerce_date(value) -> Optional[date]:
    if value is None or value == "":
        return None
    # datetime is a date subclass but does not compare with one
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip())
    raise TypeError(f"Not a date: {value!r}")


def _coerce_amount(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or value is None:
        raise InvalidOperation
    return Decimal(str(value).strip())


class ValidatedTransaction:
    """Normalized inputs produced by validate_transaction."""

    def __init__(self, transaction_type, amount, description, transaction_date,
                 reference_number, payment_method, notes):
        self.transaction_type: TransactionType = transaction_type
        self.amount: Decimal = amount
        self.description: str = description
        self.transaction_date: date = transaction_date
        self.reference_number: Optional[str] = reference_number
        self.payment_method: Optional[PaymentMethod] = payment_method
        self.notes: Optional[str] = notes


def validate_transaction(
    entity_type: EntityType,
    transaction_type,
    amount,
    description: Optional[str],
    transaction_date: Optional[date],
    today: date,
    reference_number: Optional[str] = None,
    payment_method=None,
    notes: Optional[str] = None,
) -> ValidatedTransaction:
    """
    Check a submission against the ledger's business rules.

    Raises:
        LedgerValidationError: with a field -> message map when any rule fails
    """
    errors: Dict[str, str] = {}

    # Transaction type
    txn_type = None
    if transaction_type is None or transaction_type == "":
        errors["transaction_type"] = "Please select a transaction type"
    else:
        try:
            txn_type = _coerce_enum(TransactionType, transaction_type)
        except ValueError:
            errors["transaction_type"] = f"Unknown transaction type '{transaction_type}'"
        else:
            if not is_allowed(txn_type, entity_type):
                permitted = ", ".join(t.value for t in allowed_types(entity_type))
                errors["transaction_type"] = (
                    f"'{txn_type.value}' cannot be recorded against a {entity_type.value}; "
                    f"use one of: {permitted}"
                )

    # Amount
    value = None
    try:
        value = _coerce_amount(amount)
    except (InvalidOperation, ValueError, TypeError):
        errors["amount"] = "Amount is required" if amount in (None, "") else "Amount must be a number"
    else:
        if not value.is_finite() or value <= 0:
            errors["amount"] = "Amount must be a positive number"
        elif value > MAX_AMOUNT:
            errors["amount"] = "Amount is too large"
        elif value != value.quantize(Decimal("0.01")):
            errors["amount"] = "Amount cannot have more than 2 decimal places"

    # Description
    text = (description or "").strip()
    if len(text) < DESCRIPTION_MIN_LENGTH:
        errors["description"] = f"Description must be at least {DESCRIPTION_MIN_LENGTH} characters long"
    elif len(text) > DESCRIPTION_MAX_LENGTH:
        errors["description"] = f"Description is too long (max {DESCRIPTION_MAX_LENGTH} characters)"

    # Transaction date
    try:
        transaction_date = _coerce_date(transaction_date)
    except (TypeError, ValueError):
        errors["transaction_date"] = "Transaction date must be a valid date"
    else:
        if transaction_date is None:
            errors["transaction_date"] = "Transaction date is required"
        elif transaction_date > today:
            errors["transaction_date"] = "Transaction date cannot be in the future"
        elif transaction_date < one_year_before(today):
            errors["transaction_date"] = "Transaction date cannot be more than 1 year ago"

    # Optional fields
    reference = (reference_number or "").strip() or None
    if reference and len(reference) > REFERENCE_MAX_LENGTH:
        errors["reference_number"] = f"Reference number is too long (max {REFERENCE_MAX_LENGTH} characters)"

    method = None
    if payment_method not in (None, ""):
        try:
            method = _coerce_enum(PaymentMethod, payment_method)
        except ValueError:
            errors["payment_method"] = f"Unknown payment method '{payment_method}'"

    if errors:
        raise LedgerValidationError(errors)

    return ValidatedTransaction(
        transaction_type=txn_type,
        amount=value,
        description=text,
        transaction_date=transaction_date,
        reference_number=reference,
        payment_method=method,
        notes=(notes or "").strip() or None,
    )
