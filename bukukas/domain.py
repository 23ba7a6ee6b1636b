import datetime
from dataclasses import dataclass
from typing import Optional

RECEIPT = "receipt"
DISBURSEMENT = "disbursement"
DIRECTIONS = (RECEIPT, DISBURSEMENT)

ROW_DEBIT = "debit"
ROW_CREDIT = "credit"
ROW_MEMO = "memo"
ROW_KINDS = (ROW_DEBIT, ROW_CREDIT, ROW_MEMO)

INCOME = "pendapatan"
ROUTINE_INCENTIVE = "belanja-rutin-insentif"
ROUTINE_OPERATIONAL = "belanja-rutin-operasional"
PROGRAM_PARHYANGAN = "belanja-program-parhyangan"
PROGRAM_PAWONGAN = "belanja-program-pawongan"
PROGRAM_PALEMAHAN = "belanja-program-palemahan"

ROUTINE_CLASSIFICATIONS = (ROUTINE_INCENTIVE, ROUTINE_OPERATIONAL)
PROGRAM_CLASSIFICATIONS = (PROGRAM_PARHYANGAN, PROGRAM_PAWONGAN, PROGRAM_PALEMAHAN)
EXPENDITURE_CLASSIFICATIONS = ROUTINE_CLASSIFICATIONS + PROGRAM_CLASSIFICATIONS
CLASSIFICATIONS = (INCOME,) + EXPENDITURE_CLASSIFICATIONS

CLASSIFICATION_LABELS = {
    INCOME: "Pendapatan",
    ROUTINE_INCENTIVE: "Rutin (Insentif)",
    ROUTINE_OPERATIONAL: "Rutin (Operasional)",
    PROGRAM_PARHYANGAN: "Prog. Parhyangan",
    PROGRAM_PAWONGAN: "Prog. Pawongan",
    PROGRAM_PALEMAHAN: "Prog. Palemahan",
}


def _check_non_negative(record: str, **amounts) -> None:
    for name, value in amounts.items():
        if value < 0:
            raise ValueError(f"{record}.{name} must not be negative, got {value}")


def _as_date(record, value) -> None:
    # datetime is a date subclass; keep the calendar day only
    if isinstance(value, datetime.datetime):
        object.__setattr__(record, "date", value.date())
    elif not isinstance(value, datetime.date):
        raise TypeError(f"{type(record).__name__}.date must be a date, got {value!r}")


# One line of the General Cash Book (BKU)
@dataclass(frozen=True)
class CashEntry:
    id: str
    date: datetime.date
    account_code: str
    category: str
    description: str
    receipt_amount: int = 0
    disbursement_amount: int = 0
    balance: int = 0   # derived, written by recalculate only
    seq: int = 0       # creation order, breaks same-day ties

    def __post_init__(self):
        _as_date(self, self.date)
        _check_non_negative(
            "CashEntry",
            receipt_amount=self.receipt_amount,
            disbursement_amount=self.disbursement_amount,
        )

    @property
    def signed_amount(self) -> int:
        return self.receipt_amount - self.disbursement_amount

    @property
    def is_receipt(self) -> bool:
        return self.receipt_amount > 0

    @property
    def amount(self) -> int:
        return self.receipt_amount if self.is_receipt else self.disbursement_amount


# One line of the Auxiliary Cash Book (BKP); debit = in, credit = out
@dataclass(frozen=True)
class AuxiliaryEntry:
    id: str
    date: datetime.date
    voucher_number: str
    category: str
    description: str
    debit_amount: int = 0
    credit_amount: int = 0
    balance: int = 0
    seq: int = 0

    def __post_init__(self):
        _as_date(self, self.date)
        _check_non_negative(
            "AuxiliaryEntry",
            debit_amount=self.debit_amount,
            credit_amount=self.credit_amount,
        )

    @property
    def signed_amount(self) -> int:
        return self.debit_amount - self.credit_amount


@dataclass(frozen=True)
class JournalRow:
    row_id: str
    transaction_id: str
    description: str
    row_kind: str
    debit_amount: int = 0
    credit_amount: int = 0
    date: Optional[datetime.date] = None      # debit row only
    account_code: Optional[str] = None        # empty on memo rows

    def __post_init__(self):
        if self.row_kind not in ROW_KINDS:
            raise ValueError(f"unknown journal row kind {self.row_kind!r}")
        if self.date is not None:
            _as_date(self, self.date)
        _check_non_negative(
            "JournalRow",
            debit_amount=self.debit_amount,
            credit_amount=self.credit_amount,
        )
        if self.row_kind == ROW_MEMO and (self.debit_amount or self.credit_amount):
            raise ValueError("memo rows carry no amounts")


@dataclass(frozen=True)
class BudgetItem:
    id: str
    account_code: str
    label: str          # category name, joined against CashEntry.category
    amount: int
    classification: str

    def __post_init__(self):
        if self.classification not in CLASSIFICATIONS:
            raise ValueError(f"unknown budget classification {self.classification!r}")
        _check_non_negative("BudgetItem", amount=self.amount)

    @property
    def is_income(self) -> bool:
        return self.classification == INCOME


@dataclass(frozen=True)
class NotaLine:
    name: str
    quantity: int
    unit_price: int

    @property
    def total(self) -> int:
        return self.quantity * self.unit_price


# What the user typed into the transaction form
@dataclass(frozen=True)
class TransactionDraft:
    date: Optional[datetime.date]
    account_code: str
    category: str
    purpose: str
    counterparty: str
    amount: int
    direction: str


# A validated draft waiting for its Kwitansi or Nota; never stored
@dataclass(frozen=True)
class PendingTransaction:
    date: datetime.date
    account_code: str
    category: str
    description: str
    receipt_amount: int
    disbursement_amount: int
    counterparty: str
    purpose: str

    @property
    def direction(self) -> str:
        return RECEIPT if self.receipt_amount > 0 else DISBURSEMENT

    @property
    def amount(self) -> int:
        return self.receipt_amount if self.direction == RECEIPT else self.disbursement_amount
