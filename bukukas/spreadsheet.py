"""Spreadsheet import/export for BKU, BKP and the journal.

Tables use the column headers of the village templates (``Tanggal``,
``Uraian``, ...). Additive imports are best effort and report what they
skipped; replacing imports need an explicit confirmation and leave the books
alone when no row can be read.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

import numpy as np
import pandas as pd

from bukukas.domain import AuxiliaryEntry, CashEntry, JournalRow
from bukukas.errors import ImportParseError, ValidationError
from bukukas.events import LEDGER_REPLACED, event_bus
from bukukas.formatting import parse_date
from bukukas.journal import manual_entry
from bukukas.settings import DEFAULT_ACCOUNT_CODE
from bukukas.store import LedgerStore

logger = logging.getLogger(__name__)

CASH_EXPORT_COLUMNS = ["Tanggal", "Kode", "Kategori", "Uraian", "Penerimaan", "Pengeluaran", "Saldo"]
AUXILIARY_EXPORT_COLUMNS = ["Tanggal", "Bukti", "Kategori", "Uraian", "Debet", "Kredit", "Saldo"]
JOURNAL_EXPORT_COLUMNS = ["Tanggal", "ID Transaksi", "Kode Rekening", "Uraian", "Debet", "Kredit"]
JOURNAL_IMPORT_COLUMNS = ["Tanggal", "Kode Rekening", "Uraian Debet", "Uraian Kredit", "Jumlah"]

# English headers accepted on import
CASH_ALIASES = {
    "Tanggal": ("Tanggal", "Date"),
    "Kode": ("Kode", "AccountCode"),
    "Kategori": ("Kategori", "Category"),
    "Uraian": ("Uraian", "Description"),
    "Penerimaan": ("Penerimaan", "ReceiptAmount"),
    "Pengeluaran": ("Pengeluaran", "DisbursementAmount"),
}
AUXILIARY_ALIASES = {
    "Tanggal": ("Tanggal", "Date"),
    "Bukti": ("Bukti", "VoucherNumber"),
    "Kategori": ("Kategori", "Category"),
    "Uraian": ("Uraian", "Description"),
    "Debet": ("Debet", "DebitAmount"),
    "Kredit": ("Kredit", "CreditAmount"),
}


@dataclass(frozen=True)
class ImportResult:
    imported: int
    skipped: int
    errors: tuple[str, ...] = ()


def read_table(path) -> pd.DataFrame:
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(path, dtype=str, keep_default_na=False)
    if suffix in (".xlsx", ".xls"):
        return pd.read_excel(path)
    raise ImportParseError(f"unsupported spreadsheet type {suffix or path.name!r}")


def write_table(frame: pd.DataFrame, path, sheet_name: str = "Sheet1") -> Path:
    path = Path(path)
    if path.suffix.lower() == ".csv":
        frame.to_csv(path, index=False)
    else:
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            frame.to_excel(writer, sheet_name=sheet_name, index=False)
    logger.info("wrote %d rows to %s", len(frame), path)
    return path


def _missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return pd.api.types.is_scalar(value) and pd.isna(value)


def _cell(row: dict, names: Iterable[str]) -> Any:
    for name in names:
        value = row.get(name)
        if not _missing(value):
            return value
    return None


def _text(value: Any, default: str = "") -> str:
    return default if _missing(value) else str(value).strip()


def _amount(value: Any) -> int:
    if _missing(value):
        return 0
    number = pd.to_numeric(str(value).replace(",", ""), errors="coerce")
    if pd.isna(number):
        return 0
    if not np.isfinite(number):
        raise ValueError(f"jumlah di luar batas ({value!r})")
    return int(round(float(number)))


def _records(frame: pd.DataFrame) -> list[dict]:
    return frame.to_dict(orient="records")


def _parse_rows(frame: pd.DataFrame, aliases: dict, build) -> tuple[list[dict], int, list[str]]:
    """Rows without a date or description are skipped; so are rows ``build`` rejects."""
    parsed, skipped, errors = [], 0, []
    for index, row in enumerate(_records(frame)):
        line = index + 2  # header is spreadsheet row 1
        raw_date = _cell(row, aliases["Tanggal"])
        description = _text(_cell(row, aliases["Uraian"]))
        if raw_date is None or not description:
            skipped += 1
            continue
        day = parse_date(raw_date)
        if day is None:
            skipped += 1
            errors.append(f"Baris {line}: tanggal tidak dikenali ({raw_date!r})")
            continue
        try:
            parsed.append(build(row, day, description))
        except (TypeError, ValueError) as exc:
            skipped += 1
            errors.append(f"Baris {line}: {exc}")

    for message in errors:
        logger.warning("import: %s", message)
    return parsed, skipped, errors


def _cash_fields(row: dict, day, description: str) -> dict:
    fields = dict(
        date=day,
        account_code=_text(_cell(row, CASH_ALIASES["Kode"]), DEFAULT_ACCOUNT_CODE),
        category=_text(_cell(row, CASH_ALIASES["Kategori"])),
        description=description,
        receipt_amount=_amount(_cell(row, CASH_ALIASES["Penerimaan"])),
        disbursement_amount=_amount(_cell(row, CASH_ALIASES["Pengeluaran"])),
    )
    CashEntry(id="import", **fields)
    return fields


def _auxiliary_fields(row: dict, day, description: str) -> dict:
    fields = dict(
        date=day,
        voucher_number=_text(_cell(row, AUXILIARY_ALIASES["Bukti"]), "Imported"),
        category=_text(_cell(row, AUXILIARY_ALIASES["Kategori"])),
        description=description,
        debit_amount=_amount(_cell(row, AUXILIARY_ALIASES["Debet"])),
        credit_amount=_amount(_cell(row, AUXILIARY_ALIASES["Kredit"])),
    )
    AuxiliaryEntry(id="import", **fields)
    return fields


# -- BKU ----------------------------------------------------------------------

def export_cash_entries(entries: Iterable[CashEntry]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Tanggal": e.date,
                "Kode": e.account_code,
                "Kategori": e.category or "",
                "Uraian": e.description,
                "Penerimaan": e.receipt_amount,
                "Pengeluaran": e.disbursement_amount,
                "Saldo": e.balance,
            }
            for e in entries
        ],
        columns=CASH_EXPORT_COLUMNS,
    )


def import_cash_entries(store: LedgerStore, frame: pd.DataFrame) -> ImportResult:
    """Add every readable row as a new BKU entry (each posted to the journal)."""
    parsed, skipped, errors = _parse_rows(frame, CASH_ALIASES, _cash_fields)
    for fields in parsed:
        store.add_cash_entry(**fields)
    logger.info("imported %d BKU rows, skipped %d", len(parsed), skipped)
    return ImportResult(len(parsed), skipped, tuple(errors))


def replace_cash_entries(store: LedgerStore, frame: pd.DataFrame, confirmed: bool = False) -> ImportResult:
    """Wipe the BKU, load ``frame`` instead and rebuild the journal from it."""
    if not confirmed:
        raise ImportParseError("mengganti seluruh BKU perlu konfirmasi")
    parsed, skipped, errors = _parse_rows(frame, CASH_ALIASES, _cash_fields)
    if not parsed:
        raise ImportParseError("tidak ada data valid ditemukan", 0, skipped)

    store.replace_cash_entries(
        [CashEntry(id="import", **fields) for fields in parsed], regenerate_journal=True
    )
    event_bus.publish(LEDGER_REPLACED, {"book": "bku", "rows": len(parsed)})
    return ImportResult(len(parsed), skipped, tuple(errors))


# -- BKP ----------------------------------------------------------------------

def export_auxiliary_entries(entries: Iterable[AuxiliaryEntry]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Tanggal": e.date,
                "Bukti": e.voucher_number,
                "Kategori": e.category or "",
                "Uraian": e.description,
                "Debet": e.debit_amount,
                "Kredit": e.credit_amount,
                "Saldo": e.balance,
            }
            for e in entries
        ],
        columns=AUXILIARY_EXPORT_COLUMNS,
    )


def import_auxiliary_entries(store: LedgerStore, frame: pd.DataFrame) -> ImportResult:
    parsed, skipped, errors = _parse_rows(frame, AUXILIARY_ALIASES, _auxiliary_fields)
    for fields in parsed:
        store.add_auxiliary_entry(**fields)
    logger.info("imported %d BKP rows, skipped %d", len(parsed), skipped)
    return ImportResult(len(parsed), skipped, tuple(errors))


def replace_auxiliary_entries(store: LedgerStore, frame: pd.DataFrame, confirmed: bool = False) -> ImportResult:
    if not confirmed:
        raise ImportParseError("mengganti seluruh BKP perlu konfirmasi")
    parsed, skipped, errors = _parse_rows(frame, AUXILIARY_ALIASES, _auxiliary_fields)
    if not parsed:
        raise ImportParseError("tidak ada data valid ditemukan", 0, skipped)

    store.replace_auxiliary_entries([AuxiliaryEntry(id="import", **fields) for fields in parsed])
    event_bus.publish(LEDGER_REPLACED, {"book": "bkp", "rows": len(parsed)})
    return ImportResult(len(parsed), skipped, tuple(errors))


# -- Jurnal Umum --------------------------------------------------------------

def export_journal(rows: Iterable[JournalRow]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Tanggal": r.date or "",
                "ID Transaksi": r.transaction_id,
                "Kode Rekening": r.account_code or "",
                "Uraian": r.description,
                "Debet": r.debit_amount,
                "Kredit": r.credit_amount,
            }
            for r in rows
        ],
        columns=JOURNAL_EXPORT_COLUMNS,
    )


def replace_journal(store: LedgerStore, frame: pd.DataFrame, confirmed: bool = False) -> ImportResult:
    """Load journal triplets from ``Tanggal, Kode Rekening, Uraian Debet, Uraian Kredit, Jumlah``.

    The whole file must be valid; the first bad row aborts the import and the
    current journal is kept.
    """
    if not confirmed:
        raise ImportParseError("mengganti Jurnal Umum perlu konfirmasi")

    records = _records(frame)
    rows: list[JournalRow] = []
    for index, row in enumerate(records):
        line = index + 2
        for column in JOURNAL_IMPORT_COLUMNS:
            if _missing(row.get(column)):
                raise ImportParseError(f"Baris {line}: Kolom '{column}' tidak ditemukan atau kosong.", 0, index)
        day = parse_date(row["Tanggal"])
        if day is None:
            raise ImportParseError(f"Baris {line}: tanggal tidak dikenali ({row['Tanggal']!r})", 0, index)
        try:
            rows.extend(manual_entry(
                day,
                _text(row["Kode Rekening"]),
                _text(row["Uraian Debet"]),
                _text(row["Uraian Kredit"]),
                _amount(row["Jumlah"]),
                store.next_transaction_id(day),
            ))
        except (ValidationError, ValueError) as exc:
            raise ImportParseError(f"Baris {line}: {exc}", 0, index) from exc

    if not rows:
        raise ImportParseError("tidak ada data valid ditemukan")
    store.replace_journal(rows)
    event_bus.publish(LEDGER_REPLACED, {"book": "ju", "rows": len(rows)})
    return ImportResult(len(records), 0)

