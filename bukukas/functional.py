import datetime
from abc import ABC, abstractmethod
from typing import Callable, Generic, Iterable, Sequence, TypeVar

from bukukas.domain import DIRECTIONS, NotaLine, TransactionDraft

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return Left(self._error)

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_draft(draft: TransactionDraft) -> Either[dict, TransactionDraft]:
    problems = []
    if draft.date is None:
        problems.append("Tanggal wajib diisi")
    elif not isinstance(draft.date, datetime.date):
        problems.append(f"Tanggal tidak valid: {draft.date!r}")
    for field, label in (
        ("account_code", "Kode rekening"),
        ("category", "Kategori"),
        ("purpose", "Uraian"),
        ("counterparty", "Dari/Kepada"),
    ):
        if _blank(getattr(draft, field)):
            problems.append(f"{label} wajib diisi")
    if draft.direction not in DIRECTIONS:
        problems.append(f"Jenis transaksi tidak dikenal: {draft.direction!r}")
    if draft.amount is None or draft.amount <= 0:
        problems.append("Jumlah harus lebih dari nol")

    if problems:
        return Left({
            "error": "invalid_draft",
            "message": "Harap lengkapi semua data input.",
            "problems": problems,
        })
    return Right(draft)


def nota_total(lines: Iterable[NotaLine]) -> int:
    return sum(line.total for line in lines)


def validate_nota(
    lines: Sequence[NotaLine], expected: int, tolerance: int
) -> Either[dict, Sequence[NotaLine]]:
    bad_lines = [
        i + 1 for i, line in enumerate(lines)
        if line.quantity < 0 or line.unit_price < 0
    ]
    if not lines or bad_lines:
        return Left({
            "error": "invalid_nota",
            "message": "Rincian nota tidak valid",
            "lines": bad_lines,
        })

    total = nota_total(lines)
    if abs(expected - total) > tolerance:
        return Left({
            "error": "nota_mismatch",
            "message": "Total nota tidak sesuai dengan jumlah transaksi",
            "expected": expected,
            "actual": total,
            "difference": expected - total,
        })
    return Right(lines)


def validate_budget_fields(label: str, amount) -> Either[dict, tuple]:
    if _blank(label) or amount is None or amount == "":
        return Left({
            "error": "invalid_budget_item",
            "message": "Kategori dan Jumlah harus diisi.",
        })
    if amount < 0:
        return Left({
            "error": "invalid_budget_item",
            "message": "Jumlah anggaran tidak boleh negatif.",
        })
    return Right((label.strip(), amount))


def validate_manual_journal(
    account_code: str, debit_description: str, credit_description: str, amount
) -> Either[dict, int]:
    if (
        amount is None
        or amount <= 0
        or _blank(account_code)
        or _blank(debit_description)
        or _blank(credit_description)
    ):
        return Left({
            "error": "invalid_journal",
            "message": "Harap lengkapi semua field.",
        })
    return Right(amount)
