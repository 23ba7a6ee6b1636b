"""Rupiah amounts, Indonesian dates and terbilang (amounts spelled out)."""
import datetime
from typing import Any, Optional

import pandas as pd

_MONTHS = ["Jan", "Feb", "Mar", "Apr", "Mei", "Jun", "Jul", "Agu", "Sep", "Okt", "Nov", "Des"]

_ONES = ["", "satu", "dua", "tiga", "empat", "lima", "enam", "tujuh", "delapan", "sembilan"]
_TEENS = [
    "sepuluh", "sebelas", "dua belas", "tiga belas", "empat belas",
    "lima belas", "enam belas", "tujuh belas", "delapan belas", "sembilan belas",
]
_TENS = [
    "", "sepuluh", "dua puluh", "tiga puluh", "empat puluh",
    "lima puluh", "enam puluh", "tujuh puluh", "delapan puluh", "sembilan puluh",
]
_SCALES = ["", "ribu", "juta", "miliar", "triliun"]


def format_currency(value: Optional[float]) -> str:
    """Format as ``Rp 1.250.000``; zero and missing values show as ``-``."""
    if value is None or value == 0:
        return "-"
    grouped = f"{abs(round(value)):,}".replace(",", ".")
    sign = "-" if value < 0 else ""
    return f"{sign}Rp {grouped}"


def parse_date(value: Any) -> Optional[datetime.date]:
    """Parse anything a spreadsheet cell may hold; None when it is not a date."""
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str) and not value.strip():
        return None
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        return None
    return ts.date()


def format_date(value: Any) -> str:
    d = parse_date(value)
    if d is None:
        return "-"
    return f"{d.day:02d} {_MONTHS[d.month - 1]} {d.year}"


def month_label(month: int, year: int) -> str:
    return f"{_MONTHS[month - 1]} {year}"


def _three_digits(num: int) -> str:
    words = []
    hundred, rest = divmod(num, 100)
    if hundred:
        words.append("seratus" if hundred == 1 else f"{_ONES[hundred]} ratus")
    if rest:
        if rest < 10:
            words.append(_ONES[rest])
        elif rest < 20:
            words.append(_TEENS[rest - 10])
        else:
            ten, one = divmod(rest, 10)
            words.append(_TENS[ten])
            if one:
                words.append(_ONES[one])
    return " ".join(words)


def terbilang(num: int) -> str:
    """Spell an integer amount in Indonesian, e.g. 1500 -> 'seribu lima ratus'."""
    num = int(num)
    if num == 0:
        return "nol"
    if num < 0:
        return "minus " + terbilang(-num)
    if num >= 1000 ** len(_SCALES):
        raise ValueError(f"{num} is too large to spell out")

    parts = []
    scale = 0
    while num > 0:
        num, chunk = divmod(num, 1000)
        if chunk:
            if scale == 0:
                parts.append(_three_digits(chunk))
            elif scale == 1 and chunk == 1:
                parts.append("seribu")
            else:
                parts.append(f"{_three_digits(chunk)} {_SCALES[scale]}")
        scale += 1
    return " ".join(reversed(parts))


def terbilang_rupiah(num: int) -> str:
    return terbilang(num) + " Rupiah"
