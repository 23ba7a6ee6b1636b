"""Budget realization report (Laporan Realisasi Anggaran)."""
import datetime
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Optional

from bukukas import settings
from bukukas.domain import (
    CLASSIFICATION_LABELS,
    CLASSIFICATIONS,
    INCOME,
    PROGRAM_CLASSIFICATIONS,
    ROUTINE_CLASSIFICATIONS,
    BudgetItem,
    CashEntry,
)

logger = logging.getLogger(__name__)

STRICT = "strict"
SURFACE_UNBUDGETED = "surface_unbudgeted"
POLICIES = (STRICT, SURFACE_UNBUDGETED)


@dataclass(frozen=True)
class ReportRow:
    id: str
    account_code: str
    label: str
    budgeted: int
    realized: int
    percentage: float


@dataclass(frozen=True)
class RealizationReport:
    sections: dict            # classification -> tuple[ReportRow, ...]
    subtotals: dict           # classification -> ReportRow
    total_income: ReportRow
    total_routine: ReportRow
    total_program: ReportRow
    surplus_deficit: ReportRow
    unbudgeted: tuple = field(default_factory=tuple)


def percentage(realized: int, budgeted: int) -> float:
    return realized / budgeted * 100 if budgeted > 0 else 0.0


def realized_by_category(entries: Iterable[CashEntry]) -> tuple[dict, dict]:
    """(receipts per category, disbursements per category); blank categories are dropped."""
    income: dict[str, int] = defaultdict(int)
    spending: dict[str, int] = defaultdict(int)
    for e in entries:
        category = (e.category or "").strip()
        if not category:
            continue
        if e.receipt_amount > 0:
            income[category] += e.receipt_amount
        if e.disbursement_amount > 0:
            spending[category] += e.disbursement_amount
    return dict(income), dict(spending)


def match_category(label: str, realized: dict) -> Optional[str]:
    """Key of ``realized`` for a budget label: exact first, then case-insensitive."""
    label = label.strip()
    if label in realized:
        return label
    lowered = label.lower()
    for key in realized:
        if key.lower() == lowered:
            return key
    return None


def _total(row_id: str, label: str, rows: Iterable[ReportRow]) -> ReportRow:
    rows = list(rows)
    budgeted = sum(r.budgeted for r in rows)
    realized = sum(r.realized for r in rows)
    return ReportRow(row_id, "", label, budgeted, realized, percentage(realized, budgeted))


def aggregate(
    budget_items: Iterable[BudgetItem],
    cash_entries: Iterable[CashEntry],
    policy: Optional[str] = None,
) -> RealizationReport:
    """Compare each budget item with what the cash book realized for its category.

    Income items are matched against receipts, every expenditure class
    against disbursements. Under the ``strict`` policy categories without a
    budget item are left out; ``surface_unbudgeted`` lists them separately in
    ``unbudgeted`` without touching any total.
    """
    policy = policy or settings.REALIZATION_POLICY
    if policy not in POLICIES:
        raise ValueError(f"unknown realization policy {policy!r}")

    budget_items = list(budget_items)
    income, spending = realized_by_category(cash_entries)
    matched = {INCOME: set(), "belanja": set()}

    sections = {}
    for classification in CLASSIFICATIONS:
        pool_name = INCOME if classification == INCOME else "belanja"
        pool = income if classification == INCOME else spending
        rows = []
        for item in budget_items:
            if item.classification != classification:
                continue
            key = match_category(item.label, pool)
            realized = pool[key] if key is not None else 0
            if key is not None:
                matched[pool_name].add(key)
            rows.append(ReportRow(
                id=item.id,
                account_code=item.account_code,
                label=item.label,
                budgeted=item.amount,
                realized=realized,
                percentage=percentage(realized, item.amount),
            ))
        sections[classification] = tuple(sorted(rows, key=lambda r: r.label.lower()))

    subtotals = {
        c: _total(f"subtotal-{c}", f"Subtotal {CLASSIFICATION_LABELS[c]}", sections[c])
        for c in CLASSIFICATIONS
    }
    total_income = _total("total-pendapatan", "Total Pendapatan", sections[INCOME])
    total_routine = _total(
        "total-belanja-rutin", "Total Belanja Rutin",
        (r for c in ROUTINE_CLASSIFICATIONS for r in sections[c]),
    )
    total_program = _total(
        "total-belanja-program", "Total Belanja Program",
        (r for c in PROGRAM_CLASSIFICATIONS for r in sections[c]),
    )
    surplus = ReportRow(
        id="surplus",
        account_code="",
        label="Surplus / (Defisit)",
        budgeted=total_income.budgeted - total_routine.budgeted - total_program.budgeted,
        realized=total_income.realized - total_routine.realized - total_program.realized,
        percentage=0.0,
    )

    unbudgeted: tuple = ()
    if policy == SURFACE_UNBUDGETED:
        unbudgeted = tuple(
            ReportRow(f"auto-{kind}-{name}", "", name, 0, amount, 0.0)
            for kind, pool in ((INCOME, income), ("belanja", spending))
            for name, amount in sorted(pool.items())
            if name not in matched[kind]
        )
        if unbudgeted:
            logger.info("%d categories realized without a budget item", len(unbudgeted))

    return RealizationReport(
        sections=sections,
        subtotals=subtotals,
        total_income=total_income,
        total_routine=total_routine,
        total_program=total_program,
        surplus_deficit=surplus,
        unbudgeted=unbudgeted,
    )


def report_year(entries: Iterable[CashEntry]) -> int:
    """Year of the latest cash book entry; this year when the book is empty."""
    dates = [e.date for e in entries]
    return max(dates).year if dates else datetime.date.today().year
