import datetime

from bukukas.balance import closing_balance, opening_balance, recalculate
from bukukas.domain import AuxiliaryEntry, CashEntry


def _cash(id, day, seq, receipt=0, disbursement=0, balance=0):
    return CashEntry(
        id=id,
        date=datetime.date(2025, 1, day),
        account_code="00.00",
        category="",
        description=id,
        receipt_amount=receipt,
        disbursement_amount=disbursement,
        balance=balance,
        seq=seq,
    )


def test_recalculate_sorts_by_date_and_prefix_sums():
    entries = (
        _cash("c", 3, 3, disbursement=200),
        _cash("a", 1, 1, receipt=1000),
        _cash("b", 2, 2, disbursement=300),
    )
    result = recalculate(entries)
    assert [e.id for e in result] == ["a", "b", "c"]
    assert [e.balance for e in result] == [1000, 700, 500]


def test_recalculate_same_day_uses_creation_sequence():
    first = _cash("first", 5, 1, receipt=500)
    second = _cash("second", 5, 2, disbursement=100)
    assert [e.id for e in recalculate([second, first])] == ["first", "second"]
    assert [e.id for e in recalculate([first, second])] == ["first", "second"]


def test_recalculate_ignores_incoming_balance():
    result = recalculate([_cash("a", 1, 1, receipt=100, balance=999)])
    assert result[0].balance == 100


def test_recalculate_is_fixed_point():
    entries = [
        _cash("a", 1, 1, receipt=1000),
        _cash("b", 1, 2, disbursement=250),
        _cash("c", 4, 3, receipt=50),
    ]
    once = recalculate(entries)
    assert recalculate(once) == once


def test_recalculate_empty():
    assert recalculate([]) == ()


def test_recalculate_auxiliary_entries():
    entries = [
        AuxiliaryEntry("k2", datetime.date(2025, 2, 1), "NOTA-1", "ATK", "Kertas", credit_amount=40, seq=2),
        AuxiliaryEntry("k1", datetime.date(2025, 1, 1), "KW-1", "Hibah", "Hibah", debit_amount=100, seq=1),
    ]
    result = recalculate(entries)
    assert [e.balance for e in result] == [100, 60]


def test_closing_and_opening_balance():
    entries = [_cash("a", 2, 2, receipt=100, balance=500), _cash("b", 3, 3, disbursement=50, balance=450)]
    assert closing_balance(entries) == 450
    assert opening_balance(entries) == 400


def test_closing_and_opening_balance_empty():
    assert closing_balance([]) == 0
    assert opening_balance([]) == 0
