"""Turning a typed transaction into committed BKU, BKP and journal rows.

A draft is validated and held as a pending transaction until the user
confirms its Kwitansi (receipt) or its Nota (itemised expenditure). Nothing
touches the store before that confirmation::

    drafting --submit--> awaiting_receipt_confirmation --confirm_receipt--> committed
             \\-------> awaiting_nota_confirmation    --confirm_nota-----> committed
    either awaiting state --cancel--> cancelled
"""
import logging
from typing import Optional, Sequence

from bukukas.accounts import clean_code
from bukukas.domain import (
    DISBURSEMENT,
    RECEIPT,
    NotaLine,
    PendingTransaction,
    TransactionDraft,
)
from bukukas.errors import ProtocolStateError, ReconciliationMismatch, ValidationError
from bukukas.events import (
    BOOKS_OUT_OF_BALANCE,
    TRANSACTION_COMMITTED,
    EventBus,
    event_bus,
)
from bukukas.functional import validate_draft, validate_nota
from bukukas.settings import NOTA_TOLERANCE
from bukukas.store import AuxiliaryLine, CommitResult, LedgerStore

logger = logging.getLogger(__name__)

DRAFTING = "drafting"
AWAITING_RECEIPT = "awaiting_receipt_confirmation"
AWAITING_NOTA = "awaiting_nota_confirmation"
COMMITTED = "committed"
CANCELLED = "cancelled"


def describe(direction: str, purpose: str, counterparty: str) -> str:
    """'Penerimaan <purpose> Dari <who>' or 'Belanja <purpose> Kepada <who>'."""
    if direction == RECEIPT:
        return f"Penerimaan {purpose} Dari {counterparty}"
    return f"Belanja {purpose} Kepada {counterparty}"


class CommitProtocol:
    """One transaction's way from the input form to the books."""

    def __init__(self, store: LedgerStore, bus: EventBus = event_bus, tolerance: int = NOTA_TOLERANCE):
        self.store = store
        self.bus = bus
        self.tolerance = tolerance
        self.state = DRAFTING
        self.receipt_purpose = ""
        self.alerts: list[str] = []
        self._pending: Optional[PendingTransaction] = None

    @property
    def pending(self) -> Optional[PendingTransaction]:
        return self._pending

    def _expect(self, *states: str) -> None:
        if self.state not in states:
            raise ProtocolStateError(f"not allowed while {self.state}")

    def _move(self, state: str) -> None:
        logger.debug("commit protocol %s -> %s", self.state, state)
        self.state = state

    def submit(self, draft: TransactionDraft) -> PendingTransaction:
        self._expect(DRAFTING)
        checked = validate_draft(draft)
        if checked.is_left():
            raise ValidationError(checked.get_error()["problems"])

        purpose = draft.purpose.strip()
        counterparty = draft.counterparty.strip()
        self._pending = PendingTransaction(
            date=draft.date,
            account_code=clean_code(draft.account_code),
            category=draft.category.strip(),
            description=describe(draft.direction, purpose, counterparty),
            receipt_amount=draft.amount if draft.direction == RECEIPT else 0,
            disbursement_amount=draft.amount if draft.direction == DISBURSEMENT else 0,
            counterparty=counterparty,
            purpose=purpose,
        )
        if draft.direction == RECEIPT:
            self.receipt_purpose = purpose
            self._move(AWAITING_RECEIPT)
        else:
            self._move(AWAITING_NOTA)
        return self._pending

    def confirm_receipt(self, purpose: Optional[str] = None) -> CommitResult:
        """Commit the pending receipt with its Kwitansi text."""
        self._expect(AWAITING_RECEIPT)
        pending = self._pending
        if purpose is not None and purpose.strip():
            self.receipt_purpose = purpose.strip()

        line = AuxiliaryLine(
            voucher_number=self.store.next_voucher_number("KW"),
            description=f"Penerimaan dari {pending.counterparty} untuk {self.receipt_purpose}",
            debit_amount=pending.receipt_amount,
        )
        result = self.store.commit_transaction(pending, [line])
        return self._finish(result)

    def confirm_nota(self, lines: Sequence[NotaLine], voucher_number: str = "") -> CommitResult:
        """Commit the pending disbursement with one BKP row per Nota line."""
        self._expect(AWAITING_NOTA)
        pending = self._pending
        lines = list(lines)

        checked = validate_nota(lines, pending.disbursement_amount, self.tolerance)
        if checked.is_left():
            error = checked.get_error()
            if error["error"] == "nota_mismatch":
                logger.warning("nota rejected, difference %s", error["difference"])
                raise ReconciliationMismatch(error["expected"], error["actual"])
            raise ValidationError(f"{error['message']}: baris {error['lines']}")

        voucher = voucher_number.strip() or self.store.next_voucher_number("NOTA")
        aux_lines = [
            AuxiliaryLine(
                voucher_number=voucher,
                description=f"{line.name.strip()} ({line.quantity} x {line.unit_price})",
                credit_amount=line.total,
            )
            for line in lines
            if line.name.strip() and line.total > 0
        ]
        result = self.store.commit_transaction(pending, aux_lines)
        return self._finish(result)

    def cancel(self) -> None:
        self._expect(AWAITING_RECEIPT, AWAITING_NOTA)
        self._pending = None
        self._move(CANCELLED)

    def _finish(self, result: CommitResult) -> CommitResult:
        self._pending = None
        self._move(COMMITTED)

        entry = result.cash_entry
        self.bus.publish(TRANSACTION_COMMITTED, {
            "entry_id": entry.id,
            "direction": RECEIPT if entry.is_receipt else DISBURSEMENT,
            "amount": entry.amount,
            "date": entry.date.isoformat(),
            "transaction_id": result.journal_rows[0].transaction_id,
        })

        book, auxiliary = self.store.closing_balances()
        if book != auxiliary:
            outcomes = self.bus.publish(BOOKS_OUT_OF_BALANCE, {
                "book_balance": book,
                "auxiliary_balance": auxiliary,
            })
            self.alerts.extend(o["alert"] for o in outcomes if "alert" in o)
        return result
