import datetime

import pytest

from bukukas.domain import (
    DISBURSEMENT,
    ROUTINE_OPERATIONAL,
    ROW_MEMO,
    BudgetItem,
    CashEntry,
    JournalRow,
    NotaLine,
    PendingTransaction,
)


def test_cash_entry_rejects_negative_amounts():
    with pytest.raises(ValueError):
        CashEntry("x", datetime.date(2025, 1, 1), "00.00", "", "x", receipt_amount=-1)


def test_cash_entry_tolerates_both_amounts_zero():
    entry = CashEntry("x", datetime.date(2025, 1, 1), "00.00", "", "x")
    assert entry.signed_amount == 0
    assert not entry.is_receipt


def test_cash_entry_keeps_calendar_day_of_datetime():
    entry = CashEntry("x", datetime.datetime(2025, 1, 1, 13, 45), "00.00", "", "x", receipt_amount=5)
    assert entry.date == datetime.date(2025, 1, 1)


def test_cash_entry_rejects_non_date():
    with pytest.raises(TypeError):
        CashEntry("x", "2025-01-01", "00.00", "", "x")


def test_memo_row_carries_no_amount():
    with pytest.raises(ValueError):
        JournalRow("r", "JU-0101-0001", "memo", ROW_MEMO, debit_amount=1)


def test_budget_item_rejects_unknown_classification():
    with pytest.raises(ValueError):
        BudgetItem("b", "5.1", "ATK", 100, "belanja-lain")
    assert BudgetItem("b", "5.1", "ATK", 100, ROUTINE_OPERATIONAL).is_income is False


def test_nota_line_total():
    assert NotaLine("Kertas", 3, 45000).total == 135000


def test_pending_transaction_direction():
    pending = PendingTransaction(
        datetime.date(2025, 1, 2), "5.1.2.01", "ATK", "Belanja ATK Kepada Toko", 0, 250000, "Toko", "ATK"
    )
    assert pending.direction == DISBURSEMENT
    assert pending.amount == 250000
