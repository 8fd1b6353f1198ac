"""
Statement Exporter.

Formats already computed ledgers as CSV: UTF-8, comma separated, header
row, '"' quoting with embedded quotes doubled, dates as dd/mm/yyyy.
No balances are recomputed here.
"""

import csv
import io
from decimal import Decimal
from typing import Iterable, List

from bakery_ledger.app.domain.ledger.records import LedgerSnapshot
from bakery_ledger.app.domain.ledger.supplier_ledger import SupplierLedger


LEDGER_COLUMNS = ["Date", "Description", "Reference", "Debit", "Credit", "Running Balance"]
SUPPLIER_COLUMNS = [
    "Date", "Invoice#", "Items", "Total Amount", "Amount Paid", "Outstanding", "Running Balance", "Status"
]
DATE_FORMAT = "%d/%m/%Y"


def _amount(value: Decimal) -> str:
    return f"{value:.2f}"


def _render(header: List[str], rows: Iterable[List[str]]) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quotechar='"', quoting=csv.QUOTE_MINIMAL)
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def export_ledger_csv(snapshot: LedgerSnapshot) -> bytes:
    """Customer / party statement: one row per transaction with its running balance."""
    return _render(LEDGER_COLUMNS, (
        [
            line.record.transaction_date.strftime(DATE_FORMAT),
            line.record.description,
            line.record.reference_number or "",
            _amount(line.record.debit_amount),
            _amount(line.record.credit_amount),
            _amount(line.running_balance),
        ]
        for line in snapshot.lines
    ))


def export_supplier_ledger_csv(ledger: SupplierLedger) -> bytes:
    """Supplier statement: one row per purchase with settlement status."""
    return _render(SUPPLIER_COLUMNS, (
        [
            row.transaction_date.strftime(DATE_FORMAT),
            row.invoice_number or "",
            row.items,
            _amount(row.total_amount),
            _amount(row.amount_paid),
            _amount(row.outstanding),
            _amount(row.running_balance),
            row.payment_status.value,
        ]
        for row in ledger.transactions
    ))


def statement_filename(entity_name: str) -> str:
    return f"{entity_name}_ledger.csv"
