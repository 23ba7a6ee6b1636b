"""In-memory ledger: BKU, BKP, Jurnal Umum and the budget.

The store is the only place that assigns ids and the only writer of
``balance``. Every mutation rebuilds the affected book with
:func:`bukukas.balance.recalculate` and returns the new collection.
"""
import datetime
import logging
from collections import defaultdict
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Sequence

from bukukas import journal
from bukukas.balance import closing_balance, recalculate
from bukukas.domain import (
    AuxiliaryEntry,
    BudgetItem,
    CashEntry,
    JournalRow,
    PendingTransaction,
)
from bukukas.errors import EntryNotFound, InvalidEntry, ValidationError
from bukukas.functional import validate_budget_fields
from bukukas.settings import DEFAULT_ACCOUNT_CODE

logger = logging.getLogger(__name__)

_PROTECTED_FIELDS = ("id", "seq")


@dataclass(frozen=True)
class AuxiliaryLine:
    """BKP line prepared by the commit flow before the store assigns its id."""
    voucher_number: str
    description: str
    debit_amount: int = 0
    credit_amount: int = 0


@dataclass(frozen=True)
class CommitResult:
    cash_entry: CashEntry
    auxiliary_entries: tuple[AuxiliaryEntry, ...]
    journal_rows: tuple[JournalRow, ...]


def _clean_changes(changes: dict) -> dict:
    for name in _PROTECTED_FIELDS:
        if name in changes:
            raise ValueError(f"{name} is assigned by the store and cannot be changed")
    changes.pop("balance", None)
    return changes


class LedgerStore:

    def __init__(self):
        self._cash: tuple[CashEntry, ...] = ()
        self._auxiliary: tuple[AuxiliaryEntry, ...] = ()
        self._journal: tuple[JournalRow, ...] = ()
        self._budget: tuple[BudgetItem, ...] = ()
        self._counters: dict[str, int] = defaultdict(int)

    # -- read side -------------------------------------------------------

    @property
    def cash_entries(self) -> tuple[CashEntry, ...]:
        return self._cash

    @property
    def auxiliary_entries(self) -> tuple[AuxiliaryEntry, ...]:
        return self._auxiliary

    @property
    def journal_rows(self) -> tuple[JournalRow, ...]:
        return self._journal

    @property
    def budget_items(self) -> tuple[BudgetItem, ...]:
        return self._budget

    def get_cash_entry(self, entry_id: str) -> CashEntry:
        for e in self._cash:
            if e.id == entry_id:
                return e
        raise EntryNotFound("BKU entry", entry_id)

    def get_auxiliary_entry(self, entry_id: str) -> AuxiliaryEntry:
        for e in self._auxiliary:
            if e.id == entry_id:
                return e
        raise EntryNotFound("BKP entry", entry_id)

    def get_budget_item(self, item_id: str) -> BudgetItem:
        for b in self._budget:
            if b.id == item_id:
                return b
        raise EntryNotFound("budget item", item_id)

    def closing_balances(self) -> tuple[int, int]:
        """(BKU saldo, BKP saldo) after the latest entry of each book."""
        return closing_balance(self._cash), closing_balance(self._auxiliary)

    # -- identity --------------------------------------------------------

    def _next(self, counter: str) -> int:
        self._counters[counter] += 1
        return self._counters[counter]

    def next_transaction_id(self, day: datetime.date) -> str:
        return journal.transaction_id(day, self._next("ju"))

    def next_voucher_number(self, prefix: str) -> str:
        return f"{prefix}-{self._next('voucher-' + prefix):04d}"

    def _new_cash_entry(self, **fields) -> CashEntry:
        fields.pop("balance", None)
        fields.setdefault("account_code", DEFAULT_ACCOUNT_CODE)
        return CashEntry(id=f"bku-{self._next('bku'):06d}", seq=self._next("seq"), **fields)

    def _new_auxiliary_entry(self, **fields) -> AuxiliaryEntry:
        fields.pop("balance", None)
        return AuxiliaryEntry(id=f"bkp-{self._next('bkp'):06d}", seq=self._next("seq"), **fields)

    def _postings(self, entries: Iterable[CashEntry]) -> tuple[JournalRow, ...]:
        rows: list[JournalRow] = []
        for e in entries:
            if e.receipt_amount == 0 and e.disbursement_amount == 0:
                logger.warning("no journal posting for %s: zero amounts", e.id)
                continue
            rows.extend(journal.post(e, self.next_transaction_id(e.date)))
        return tuple(rows)

    # -- BKU -------------------------------------------------------------

    def add_cash_entry(
        self,
        date: datetime.date,
        account_code: str,
        category: str,
        description: str,
        receipt_amount: int = 0,
        disbursement_amount: int = 0,
        post: bool = True,
    ) -> tuple[CashEntry, ...]:
        """Append a new BKU entry; a new entry is posted to the journal too."""
        entry = self._new_cash_entry(
            date=date,
            account_code=account_code or DEFAULT_ACCOUNT_CODE,
            category=category,
            description=description,
            receipt_amount=receipt_amount,
            disbursement_amount=disbursement_amount,
        )
        rows = self._postings([entry]) if post else ()
        self._cash = recalculate(self._cash + (entry,))
        self._journal = self._journal + rows
        logger.info("added %s", entry.id)
        return self._cash

    def update_cash_entry(self, entry_id: str, **changes) -> tuple[CashEntry, ...]:
        """Edit an entry in place. Edits are never re-posted to the journal."""
        current = self.get_cash_entry(entry_id)
        updated = replace(current, **_clean_changes(changes))
        self._cash = recalculate(updated if e.id == entry_id else e for e in self._cash)
        logger.info("updated %s", entry_id)
        return self._cash

    def delete_cash_entry(self, entry_id: str) -> tuple[CashEntry, ...]:
        self.get_cash_entry(entry_id)
        self._cash = recalculate(e for e in self._cash if e.id != entry_id)
        logger.info("deleted %s", entry_id)
        return self._cash

    def replace_cash_entries(
        self, entries: Iterable[CashEntry], regenerate_journal: bool = True
    ) -> tuple[CashEntry, ...]:
        """Swap the whole BKU for ``entries``, in their given order.

        Fresh ids and sequence numbers are assigned. With
        ``regenerate_journal`` the journal is rebuilt as if every entry had
        just been created.
        """
        fresh = [
            self._new_cash_entry(
                date=e.date,
                account_code=e.account_code,
                category=e.category,
                description=e.description,
                receipt_amount=e.receipt_amount,
                disbursement_amount=e.disbursement_amount,
            )
            for e in entries
        ]
        rows = self._postings(fresh) if regenerate_journal else None
        self._cash = recalculate(fresh)
        if rows is not None:
            self._journal = rows
        logger.info("replaced BKU with %d entries", len(fresh))
        return self._cash

    # -- BKP -------------------------------------------------------------

    def add_auxiliary_entry(
        self,
        date: datetime.date,
        voucher_number: str,
        category: str,
        description: str,
        debit_amount: int = 0,
        credit_amount: int = 0,
    ) -> tuple[AuxiliaryEntry, ...]:
        entry = self._new_auxiliary_entry(
            date=date,
            voucher_number=voucher_number,
            category=category,
            description=description,
            debit_amount=debit_amount,
            credit_amount=credit_amount,
        )
        self._auxiliary = recalculate(self._auxiliary + (entry,))
        logger.info("added %s", entry.id)
        return self._auxiliary

    def update_auxiliary_entry(self, entry_id: str, **changes) -> tuple[AuxiliaryEntry, ...]:
        current = self.get_auxiliary_entry(entry_id)
        updated = replace(current, **_clean_changes(changes))
        self._auxiliary = recalculate(updated if e.id == entry_id else e for e in self._auxiliary)
        logger.info("updated %s", entry_id)
        return self._auxiliary

    def delete_auxiliary_entry(self, entry_id: str) -> tuple[AuxiliaryEntry, ...]:
        self.get_auxiliary_entry(entry_id)
        self._auxiliary = recalculate(e for e in self._auxiliary if e.id != entry_id)
        logger.info("deleted %s", entry_id)
        return self._auxiliary

    def replace_auxiliary_entries(self, entries: Iterable[AuxiliaryEntry]) -> tuple[AuxiliaryEntry, ...]:
        fresh = [
            self._new_auxiliary_entry(
                date=e.date,
                voucher_number=e.voucher_number,
                category=e.category,
                description=e.description,
                debit_amount=e.debit_amount,
                credit_amount=e.credit_amount,
            )
            for e in entries
        ]
        self._auxiliary = recalculate(fresh)
        logger.info("replaced BKP with %d entries", len(fresh))
        return self._auxiliary

    # -- Jurnal Umum -----------------------------------------------------

    def post_journal(self, entry_id: str) -> tuple[JournalRow, ...]:
        entry = self.get_cash_entry(entry_id)
        rows = journal.post(entry, self.next_transaction_id(entry.date))
        self._journal = self._journal + rows
        logger.info("posted %s as %s", entry_id, rows[0].transaction_id)
        return self._journal

    def add_manual_journal(
        self,
        day: datetime.date,
        account_code: str,
        debit_description: str,
        credit_description: str,
        amount: int,
    ) -> tuple[JournalRow, ...]:
        rows = journal.manual_entry(
            day, account_code, debit_description, credit_description, amount,
            self.next_transaction_id(day),
        )
        self._journal = self._journal + rows
        logger.info("added manual journal %s", rows[0].transaction_id)
        return self._journal

    def replace_journal(self, rows: Iterable[JournalRow]) -> tuple[JournalRow, ...]:
        self._journal = tuple(rows)
        logger.info("replaced journal with %d rows", len(self._journal))
        return self._journal

    # -- commit flow -----------------------------------------------------

    def commit_transaction(
        self, pending: PendingTransaction, lines: Sequence[AuxiliaryLine]
    ) -> CommitResult:
        """Write BKU, BKP and the journal posting for one confirmed transaction.

        Everything is built before anything is assigned, so a failure leaves
        all three books untouched.
        """
        if pending.receipt_amount == 0 and pending.disbursement_amount == 0:
            raise InvalidEntry("pending transaction has no amount")

        entry = self._new_cash_entry(
            date=pending.date,
            account_code=pending.account_code,
            category=pending.category,
            description=pending.description,
            receipt_amount=pending.receipt_amount,
            disbursement_amount=pending.disbursement_amount,
        )
        rows = journal.post(entry, self.next_transaction_id(entry.date))
        auxiliary = tuple(
            self._new_auxiliary_entry(
                date=pending.date,
                voucher_number=line.voucher_number,
                category=pending.category,
                description=line.description,
                debit_amount=line.debit_amount,
                credit_amount=line.credit_amount,
            )
            for line in lines
        )

        self._cash = recalculate(self._cash + (entry,))
        self._auxiliary = recalculate(self._auxiliary + auxiliary)
        self._journal = self._journal + rows

        return CommitResult(
            cash_entry=self.get_cash_entry(entry.id),
            auxiliary_entries=tuple(self.get_auxiliary_entry(a.id) for a in auxiliary),
            journal_rows=rows,
        )

    # -- Anggaran --------------------------------------------------------

    def add_budget_item(
        self, account_code: str, label: str, amount: int, classification: str
    ) -> tuple[BudgetItem, ...]:
        checked = validate_budget_fields(label, amount)
        if checked.is_left():
            raise ValidationError(checked.get_error()["message"])
        label, amount = checked.get_or_else(None)

        item = BudgetItem(
            id=f"{classification}-{self._next('budget'):04d}",
            account_code=(account_code or "").strip() or DEFAULT_ACCOUNT_CODE,
            label=label,
            amount=amount,
            classification=classification,
        )
        self._budget = self._budget + (item,)
        logger.info("added budget item %s", item.id)
        return self._budget

    def update_budget_item(self, item_id: str, **changes) -> tuple[BudgetItem, ...]:
        current = self.get_budget_item(item_id)
        if "id" in changes:
            raise ValueError("id is assigned by the store and cannot be changed")
        checked = validate_budget_fields(
            changes.get("label", current.label), changes.get("amount", current.amount)
        )
        if checked.is_left():
            raise ValidationError(checked.get_error()["message"])
        label, amount = checked.get_or_else(None)

        updated = replace(current, **{**changes, "label": label, "amount": amount})
        self._budget = tuple(updated if b.id == item_id else b for b in self._budget)
        logger.info("updated budget item %s", item_id)
        return self._budget

    def delete_budget_item(self, item_id: str) -> tuple[BudgetItem, ...]:
        self.get_budget_item(item_id)
        self._budget = tuple(b for b in self._budget if b.id != item_id)
        logger.info("deleted budget item %s", item_id)
        return self._budget

    def budget_items_for(self, classification: Optional[str] = None) -> tuple[BudgetItem, ...]:
        if classification is None:
            return self._budget
        return tuple(b for b in self._budget if b.classification == classification)
