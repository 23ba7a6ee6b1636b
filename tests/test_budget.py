import datetime

import pytest

from bukukas.budget import SURFACE_UNBUDGETED, aggregate, match_category, percentage, report_year
from bukukas.domain import (
    INCOME,
    PROGRAM_PARHYANGAN,
    ROUTINE_INCENTIVE,
    ROUTINE_OPERATIONAL,
    BudgetItem,
    CashEntry,
)


def _spend(id, category, amount, day=2):
    return CashEntry(id, datetime.date(2025, 1, day), "5.1", category, id, disbursement_amount=amount)


def _receive(id, category, amount, day=1):
    return CashEntry(id, datetime.date(2025, 1, day), "4.1", category, id, receipt_amount=amount)


BUDGET = (
    BudgetItem("p1", "022.22.1", "Hibah", 2000000, INCOME),
    BudgetItem("r1", "5.1.1.01", "Insentif Kelian", 600000, ROUTINE_INCENTIVE),
    BudgetItem("r2", "5.1.2.01", "ATK", 500000, ROUTINE_OPERATIONAL),
    BudgetItem("r3", "5.1.2.06", "Konsumsi Rapat", 300000, ROUTINE_OPERATIONAL),
    BudgetItem("g1", "5.1.3.01", "Upakara", 1000000, PROGRAM_PARHYANGAN),
)

ENTRIES = (
    _receive("in", "Hibah", 1500000),
    _spend("atk", "ATK", 250000),
    _spend("kelian", "Insentif Kelian", 300000),
    _spend("upakara", "upakara", 400000),
    _spend("bensin", "Bensin", 50000),
    _receive("sewa", "Sewa Wantilan", 75000),
)


def test_atk_realized_half():
    report = aggregate(BUDGET, ENTRIES)
    atk = next(r for r in report.sections[ROUTINE_OPERATIONAL] if r.label == "ATK")
    assert atk.realized == 250000
    assert round(atk.percentage, 2) == 50.00


def test_rows_sorted_alphabetically():
    report = aggregate(BUDGET, ENTRIES)
    assert [r.label for r in report.sections[ROUTINE_OPERATIONAL]] == ["ATK", "Konsumsi Rapat"]


def test_case_insensitive_match():
    report = aggregate(BUDGET, ENTRIES)
    assert report.sections[PROGRAM_PARHYANGAN][0].realized == 400000
    assert match_category("atk", {"ATK": 1}) == "ATK"
    assert match_category("Bensin", {"ATK": 1}) is None


def test_income_uses_receipts_only():
    report = aggregate(BUDGET, ENTRIES)
    assert report.sections[INCOME][0].realized == 1500000
    assert report.total_income.budgeted == 2000000


def test_totals_and_surplus():
    report = aggregate(BUDGET, ENTRIES)
    assert report.subtotals[ROUTINE_OPERATIONAL].realized == 250000
    assert report.total_routine.budgeted == 1400000
    assert report.total_routine.realized == 550000
    assert report.total_program.realized == 400000
    assert report.surplus_deficit.budgeted == 2000000 - 1400000 - 1000000
    assert report.surplus_deficit.realized == 1500000 - 550000 - 400000


def test_strict_policy_leaves_out_unbudgeted():
    report = aggregate(BUDGET, ENTRIES, "strict")
    assert report.unbudgeted == ()


def test_surface_unbudgeted_lists_them_separately():
    strict = aggregate(BUDGET, ENTRIES, "strict")
    report = aggregate(BUDGET, ENTRIES, SURFACE_UNBUDGETED)
    assert sorted(r.label for r in report.unbudgeted) == ["Bensin", "Sewa Wantilan"]
    assert all(r.budgeted == 0 and r.percentage == 0.0 for r in report.unbudgeted)
    assert report.surplus_deficit == strict.surplus_deficit


def test_unknown_policy():
    with pytest.raises(ValueError):
        aggregate(BUDGET, ENTRIES, "lenient")


def test_blank_categories_ignored():
    report = aggregate(BUDGET, [_spend("x", "  ", 999)], SURFACE_UNBUDGETED)
    assert report.unbudgeted == ()


def test_percentage_zero_budget():
    assert percentage(100, 0) == 0.0


def test_report_year():
    assert report_year(ENTRIES) == 2025
    assert report_year([]) == datetime.date.today().year
