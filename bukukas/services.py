from typing import Any, Callable, Dict, List, Optional, Sequence

from bukukas import budget, journal
from bukukas.errors import BukuKasError
from bukukas.reconciliation import closing_summary, reconcile
from bukukas.store import LedgerStore


class BookReportService:
    """Facade for period reports over a store using injected validators and calculators.

    validators: functions taking (store) -> Sequence[str]
    calculators: functions taking (store, params, acc) -> dict (partial results)
    """

    def __init__(
        self,
        validators: Sequence[Callable[[LedgerStore], Sequence[str]]],
        calculators: Sequence[Callable[..., Dict[str, Any]]],
    ):
        self.validators = validators
        self.calculators = calculators

    def period_report(self, store: LedgerStore, **params) -> Dict[str, Any]:
        """Run validators and calculators and return the report with its intermediate steps."""
        report = {
            "year": budget.report_year(store.cash_entries),
            "validation": [],
            "steps": [],
            "result": {},
        }

        for v in self.validators:
            try:
                msgs = v(store)
            except BukuKasError as e:
                msgs = [f"validator_error: {e}"]
            report["validation"].append({"validator": getattr(v, "__name__", str(v)), "messages": list(msgs)})

        acc: Dict[str, Any] = {}
        for calc in self.calculators:
            out = calc(store, params, acc)
            report["steps"].append({"calculator": getattr(calc, "__name__", str(calc)), "output": out})
            acc.update(out)

        report["result"] = acc
        return report


def books_agree(store: LedgerStore) -> List[str]:
    book, auxiliary = store.closing_balances()
    if book != auxiliary:
        return [f"Saldo BKU {book} tidak sama dengan saldo BKP {auxiliary}"]
    return []


def journal_balanced(store: LedgerStore) -> List[str]:
    debit, credit = journal.journal_totals(store.journal_rows)
    if debit != credit:
        return [f"Jurnal tidak seimbang: debet {debit}, kredit {credit}"]
    return []


def realization_step(store: LedgerStore, params: dict, acc: dict) -> Dict[str, Any]:
    report = budget.aggregate(store.budget_items, store.cash_entries, params.get("policy"))
    return {"realization": report, "surplus_deficit": report.surplus_deficit.realized}


def reconciliation_step(store: LedgerStore, params: dict, acc: dict) -> Dict[str, Any]:
    summary = reconcile(
        store.cash_entries,
        store.auxiliary_entries,
        params.get("physical_cash", 0),
        params.get("physical_bank", 0),
    )
    return {"reconciliation": summary, "discrepancy": summary.discrepancy}


def closing_step(store: LedgerStore, params: dict, acc: dict) -> Dict[str, Any]:
    opening = acc["reconciliation"].opening_balance if "reconciliation" in acc else 0
    summary = closing_summary(store.cash_entries, opening, params.get("tax_deposit", 0))
    return {"closing": summary, "closing_cash": summary.closing_cash}


def default_report_service(calculators: Optional[Sequence[Callable[..., Dict[str, Any]]]] = None) -> BookReportService:
    return BookReportService(
        validators=[books_agree, journal_balanced],
        calculators=calculators or [realization_step, reconciliation_step, closing_step],
    )
