"""Reference account codes for desa adat bookkeeping (Permendagri 20 style).

Codes are suggestions only; any free-text code is accepted on an entry.
"""
from typing import Iterable

from bukukas.domain import AuxiliaryEntry, CashEntry
from bukukas.functional import Maybe, Nothing, Some
from bukukas.settings import CASH_ACCOUNT_CODE, CASH_ACCOUNT_LABEL

HISTORICAL_CODE_LABEL = "Kode Historis"

REFERENCE_ACCOUNTS: tuple[tuple[str, str], ...] = (
    (CASH_ACCOUNT_CODE, CASH_ACCOUNT_LABEL),
    ("022.22.1", "Bantuan Keuangan dari APBD Provinsi"),
    ("022.22.2", "Bantuan Keuangan dari APBD Kab/Kota"),
    ("5.1.1.01", "Insentif Kelian Adat"),
    ("5.1.1.02", "Insentif Prajuru Adat"),
    ("5.1.1.03", "Insentif Admin Adat"),
    ("5.1.1.04", "Jaminan Sosial Prajuru Adat"),
    ("5.1.2.01", "Belanja Alat Tulis Kantor (ATK)"),
    ("5.1.2.02", "Belanja Benda Pos & Materai"),
    ("5.1.2.03", "Belanja Alat Listrik & Elektronik"),
    ("5.1.2.04", "Belanja Peralatan Kebersihan"),
    ("5.1.2.05", "Belanja Cetak & Penggandaan"),
    ("5.1.2.06", "Belanja Makan & Minum Rapat"),
    ("5.1.2.07", "Belanja Pakaian Dinas & Atribut"),
    ("5.1.2.08", "Belanja Perjalanan Dinas"),
    ("5.1.2.09", "Belanja Pemeliharaan Gedung & Kantor"),
    ("5.1.3.01", "Belanja Pecalang"),
    ("5.1.3.02", "Belanja Pakis"),
    ("5.1.3.03", "Belanja Modal Gedung & Bangunan"),
    ("5.1.3.04", "Belanja Modal Jalan, Irigasi & Jaringan"),
    ("5.1.4.01", "Belanja Tak Terduga"),
    ("6.1.1.01", "Penerimaan Pembiayaan"),
    ("6.2.1.01", "Pengeluaran Pembiayaan"),
)


def clean_code(value: str) -> str:
    """'5.1.2.01 - Belanja ATK' (a picked suggestion) -> '5.1.2.01'."""
    return (value or "").split(" - ")[0].strip()


def lookup_account_name(code: str) -> Maybe[str]:
    code = clean_code(code)
    for ref_code, name in REFERENCE_ACCOUNTS:
        if ref_code == code:
            return Some(name)
    return Nothing()


def available_codes(entries: Iterable[CashEntry]) -> list[tuple[str, str]]:
    """Reference codes plus every other code already used in the cash book."""
    codes = dict(REFERENCE_ACCOUNTS)
    for e in entries:
        if e.account_code and e.account_code not in codes:
            codes[e.account_code] = HISTORICAL_CODE_LABEL
    return sorted(codes.items())


def available_categories(entries: Iterable[CashEntry | AuxiliaryEntry]) -> list[str]:
    return sorted({e.category for e in entries if e.category})
