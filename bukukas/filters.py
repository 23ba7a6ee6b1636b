"""Search predicates for the book pages, built as closures over the search term."""
import datetime
from typing import Callable, Iterable, Iterator, TypeVar

from bukukas.domain import AuxiliaryEntry, CashEntry, JournalRow

T = TypeVar("T")


def iter_matching(items: Iterable[T], pred: Callable[[T], bool]) -> Iterator[T]:
    for item in items:
        if pred(item):
            yield item


def cash_search(term: str):
    term = term.lower()

    def _filter(e: CashEntry) -> bool:
        return term in e.description.lower() or term in e.account_code.lower()

    return _filter


def auxiliary_search(term: str):
    term = term.lower()

    def _filter(e: AuxiliaryEntry) -> bool:
        return (
            term in e.description.lower()
            or term in e.voucher_number.lower()
            or term in (e.category or "").lower()
        )

    return _filter


def by_category(category: str):
    def _filter(e) -> bool:
        return e.category == category

    return _filter


def by_date_range(start: datetime.date, end: datetime.date):
    def _filter(e) -> bool:
        return e.date is not None and start <= e.date <= end

    return _filter


def search_journal(rows: Iterable[JournalRow], term: str) -> list[JournalRow]:
    """Whole triplets whose id, description or account code contains ``term``."""
    rows = list(rows)
    if not term:
        return rows
    term = term.lower()
    hits = {
        r.transaction_id
        for r in rows
        if term in r.transaction_id.lower()
        or term in r.description.lower()
        or term in (r.account_code or "").lower()
    }
    return [r for r in rows if r.transaction_id in hits]


def paginate(items: list[T], page: int, per_page: int) -> list[T]:
    start = (max(page, 1) - 1) * per_page
    return items[start:start + per_page]
