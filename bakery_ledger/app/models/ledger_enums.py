"""
Ledger enumerations.
"""

import enum


class EntityType(str, enum.Enum):
    """Kind of account holder a ledger belongs to."""
    CUSTOMER = "customer"  # Receivables side
    PARTY = "party"  # Supplier / creditor, payables side


class TransactionType(str, enum.Enum):
    """Business meaning of a ledger entry. Each one maps to a fixed posting side."""
    SALE = "sale"
    PAYMENT_RECEIVED = "payment_received"
    PURCHASE = "purchase"
    PAYMENT_SENT = "payment_sent"
    ADJUSTMENT_DEBIT = "adjustment_debit"
    ADJUSTMENT_CREDIT = "adjustment_credit"


class PostingSide(str, enum.Enum):
    DEBIT = "debit"  # Entity owes more
    CREDIT = "credit"  # Entity owes less


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    CHEQUE = "cheque"
    CREDIT_CARD = "credit_card"
    UPI = "upi"
    OTHER = "other"


class PartyType(str, enum.Enum):
    SUPPLIER = "supplier"
    CREDITOR = "creditor"
    BOTH = "both"


class PaymentStatus(str, enum.Enum):
    """Settlement state of a purchase in the supplier ledger view."""
    PAID = "Paid"
    PARTIAL = "Partial"
    DUE = "Due"
