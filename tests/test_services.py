import datetime

from bukukas.domain import ROUTINE_OPERATIONAL
from bukukas.errors import InvalidEntry
from bukukas.services import BookReportService, books_agree, default_report_service, journal_balanced
from bukukas.store import LedgerStore

DAY1 = datetime.date(2025, 1, 1)
DAY2 = datetime.date(2025, 1, 2)


def _store():
    store = LedgerStore()
    store.add_cash_entry(DAY1, "022.22.1", "Hibah", "Hibah", receipt_amount=1000000)
    store.add_cash_entry(DAY2, "5.1.2.01", "ATK", "ATK", disbursement_amount=250000)
    store.add_auxiliary_entry(DAY1, "KW-1", "Hibah", "Hibah", debit_amount=1000000)
    store.add_auxiliary_entry(DAY2, "NOTA-1", "ATK", "Kertas", credit_amount=250000)
    store.add_budget_item("5.1.2.01", "ATK", 500000, ROUTINE_OPERATIONAL)
    return store


def test_default_report():
    report = default_report_service().period_report(_store(), physical_cash=700000, tax_deposit=0)

    assert report["year"] == 2025
    assert all(v["messages"] == [] for v in report["validation"])
    assert [s["calculator"] for s in report["steps"]] == ["realization_step", "reconciliation_step", "closing_step"]
    assert report["result"]["discrepancy"] == 50000
    assert report["result"]["closing_cash"] == 750000
    assert report["result"]["surplus_deficit"] == -250000


def test_validators_report_mismatches():
    store = _store()
    store.delete_auxiliary_entry("bkp-000002")
    store.add_manual_journal(DAY2, "5.1", "Biaya", "Kas", 10)
    assert books_agree(store) == ["Saldo BKU 750000 tidak sama dengan saldo BKP 1000000"]
    assert journal_balanced(store) == []


def test_validator_error_becomes_message():
    def broken(store):
        raise InvalidEntry("rusak")

    service = BookReportService(validators=[broken], calculators=[])
    report = service.period_report(LedgerStore())
    assert report["validation"][0]["messages"] == ["validator_error: rusak"]
    assert report["result"] == {}


def test_calculators_see_earlier_results():
    def first(store, params, acc):
        return {"a": params["start"]}

    def second(store, params, acc):
        return {"b": acc["a"] + 1}

    report = BookReportService([], [first, second]).period_report(LedgerStore(), start=41)
    assert report["result"] == {"a": 41, "b": 42}
    assert report["steps"][1] == {"calculator": "second", "output": {"b": 42}}
