from dataclasses import replace
from itertools import accumulate
from typing import Iterable, TypeVar, Union

from bukukas.domain import AuxiliaryEntry, CashEntry

Entry = TypeVar("Entry", CashEntry, AuxiliaryEntry)


def sort_key(entry: Union[CashEntry, AuxiliaryEntry]) -> tuple:
    return (entry.date, entry.seq)


def recalculate(entries: Iterable[Entry]) -> tuple[Entry, ...]:
    """Sort by (date, seq) and stamp each entry with its running balance.

    The balance already carried by an input entry is ignored, so the result
    of recalculate is a fixed point: feeding it back changes nothing.
    """
    ordered = sorted(entries, key=sort_key)
    running = accumulate(e.signed_amount for e in ordered)
    return tuple(replace(e, balance=b) for e, b in zip(ordered, running))


def closing_balance(entries: Iterable[Entry]) -> int:
    ordered = sorted(entries, key=sort_key)
    return ordered[-1].balance if ordered else 0


def opening_balance(entries: Iterable[Entry]) -> int:
    """Balance before the earliest entry, derived back from its own balance."""
    ordered = sorted(entries, key=sort_key)
    if not ordered:
        return 0
    first = ordered[0]
    return first.balance - first.signed_amount
