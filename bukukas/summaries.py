import datetime
import heapq
from collections import defaultdict
from typing import Iterable, Iterator, NamedTuple, Optional

from bukukas.balance import sort_key
from bukukas.domain import CashEntry
from bukukas.formatting import month_label
from bukukas.settings import OTHER_CATEGORY_LABEL


class CategoryTotal(NamedTuple):
    name: str
    total: int


def _ranked(totals: dict[str, int]) -> tuple[CategoryTotal, ...]:
    ordered = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return tuple(CategoryTotal(name, total) for name, total in ordered)


def totals_by_category(
    entries: Iterable[CashEntry],
) -> tuple[tuple[CategoryTotal, ...], tuple[CategoryTotal, ...]]:
    """(income, expense) per category, highest first; no category counts as Lain-lain."""
    income: dict[str, int] = defaultdict(int)
    expense: dict[str, int] = defaultdict(int)
    for e in entries:
        name = e.category or OTHER_CATEGORY_LABEL
        if e.receipt_amount > 0:
            income[name] += e.receipt_amount
        if e.disbursement_amount > 0:
            expense[name] += e.disbursement_amount
    return _ranked(income), _ranked(expense)


def available_years(entries: Iterable[CashEntry], today: Optional[datetime.date] = None) -> list[int]:
    years = {(today or datetime.date.today()).year}
    years.update(e.date.year for e in entries)
    return sorted(years, reverse=True)


def entries_in_year(entries: Iterable[CashEntry], year: int) -> Iterator[CashEntry]:
    for e in entries:
        if e.date.year == year:
            yield e


def year_summary(entries: Iterable[CashEntry], year: int) -> dict:
    """Receipts and spending of one year and the saldo after its last entry."""
    in_year = sorted(entries_in_year(entries, year), key=sort_key)
    return {
        "year": year,
        "total_receipts": sum(e.receipt_amount for e in in_year),
        "total_disbursements": sum(e.disbursement_amount for e in in_year),
        "balance": in_year[-1].balance if in_year else 0,
    }


def monthly_totals(entries: Iterable[CashEntry], year: int) -> list[dict]:
    months = {m: {"month": month_label(m, year), "receipts": 0, "disbursements": 0} for m in range(1, 13)}
    for e in entries_in_year(entries, year):
        months[e.date.month]["receipts"] += e.receipt_amount
        months[e.date.month]["disbursements"] += e.disbursement_amount
    return [months[m] for m in range(1, 13)]


def recent_entries(entries: Iterable[CashEntry], n: int = 10) -> list[CashEntry]:
    return sorted(entries, key=sort_key, reverse=True)[: max(0, n)]


def top_entries(entries: Iterable[CashEntry], k: int = 5) -> list[CashEntry]:
    return heapq.nlargest(max(0, k), entries, key=lambda e: e.amount)
