import logging
from dataclasses import dataclass
from typing import Iterable

from bukukas import balance
from bukukas.domain import AuxiliaryEntry, CashEntry
from bukukas.summaries import CategoryTotal, totals_by_category

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconciliationSummary:
    opening_balance: int
    total_receipts: int
    managed_funds: int
    total_disbursements: int
    book_balance: int
    auxiliary_balance: int
    books_match: bool
    physical_cash: int
    physical_bank: int
    physical_total: int
    discrepancy: int


@dataclass(frozen=True)
class ClosingSummary:
    opening_balance: int
    total_receipts: int
    total_disbursements: int
    tax_deposit: int
    cumulative_debit: int
    cumulative_credit: int
    closing_cash: int
    income_by_category: tuple[CategoryTotal, ...]
    expense_by_category: tuple[CategoryTotal, ...]


def reconcile(
    cash_entries: Iterable[CashEntry],
    auxiliary_entries: Iterable[AuxiliaryEntry],
    physical_cash: int = 0,
    physical_bank: int = 0,
) -> ReconciliationSummary:
    """Book saldo against the BKP saldo and the cash actually counted.

    A nonzero ``discrepancy`` is a finding to report, not an error. A BKU/BKP
    mismatch is flagged in ``books_match`` and logged.
    """
    cash_entries = list(cash_entries)
    auxiliary_entries = list(auxiliary_entries)

    opening = balance.opening_balance(cash_entries)
    receipts = sum(e.receipt_amount for e in cash_entries)
    disbursements = sum(e.disbursement_amount for e in cash_entries)
    book = balance.closing_balance(cash_entries)
    auxiliary = balance.closing_balance(auxiliary_entries)
    physical_total = physical_cash + physical_bank

    if book != auxiliary:
        logger.warning("saldo BKU %s != saldo BKP %s", book, auxiliary)

    return ReconciliationSummary(
        opening_balance=opening,
        total_receipts=receipts,
        managed_funds=opening + receipts,
        total_disbursements=disbursements,
        book_balance=book,
        auxiliary_balance=auxiliary,
        books_match=book == auxiliary,
        physical_cash=physical_cash,
        physical_bank=physical_bank,
        physical_total=physical_total,
        discrepancy=book - physical_total,
    )


def closing_summary(
    cash_entries: Iterable[CashEntry], opening_balance: int = 0, tax_deposit: int = 0
) -> ClosingSummary:
    """Saldo Akhir: opening balance plus receipts, minus spending and tax paid over."""
    cash_entries = list(cash_entries)
    receipts = sum(e.receipt_amount for e in cash_entries)
    disbursements = sum(e.disbursement_amount for e in cash_entries)
    debit = opening_balance + receipts
    credit = disbursements + tax_deposit
    income, expense = totals_by_category(cash_entries)

    return ClosingSummary(
        opening_balance=opening_balance,
        total_receipts=receipts,
        total_disbursements=disbursements,
        tax_deposit=tax_deposit,
        cumulative_debit=debit,
        cumulative_credit=credit,
        closing_cash=debit - credit,
        income_by_category=income,
        expense_by_category=expense,
    )
