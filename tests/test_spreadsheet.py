import datetime

import pandas as pd
import pytest

from bukukas import spreadsheet
from bukukas.domain import ROW_MEMO
from bukukas.errors import ImportParseError
from bukukas.events import LEDGER_REPLACED, event_bus
from bukukas.store import LedgerStore

DAY1 = datetime.date(2025, 1, 6)
DAY2 = datetime.date(2025, 1, 15)


def _store():
    store = LedgerStore()
    store.add_cash_entry(DAY1, "022.22.1", "Hibah", "Penerimaan Hibah Dari Pemprov", receipt_amount=1000000)
    store.add_cash_entry(DAY2, "5.1.2.01", "", "Belanja ATK Kepada Toko", disbursement_amount=250000)
    return store


def _fields(entries):
    return [
        (e.date, e.account_code, e.category, e.description, e.receipt_amount, e.disbursement_amount, e.balance)
        for e in entries
    ]


def test_export_cash_entries_columns():
    frame = spreadsheet.export_cash_entries(_store().cash_entries)
    assert list(frame.columns) == spreadsheet.CASH_EXPORT_COLUMNS
    assert frame["Saldo"].tolist() == [1000000, 750000]


def test_export_then_import_round_trip():
    source = _store()
    target = LedgerStore()
    result = spreadsheet.import_cash_entries(target, spreadsheet.export_cash_entries(source.cash_entries))

    assert result == spreadsheet.ImportResult(2, 0, ())
    assert _fields(target.cash_entries) == _fields(source.cash_entries)
    assert len(target.journal_rows) == 6


def test_csv_round_trip(tmp_path):
    source = _store()
    path = spreadsheet.write_table(spreadsheet.export_cash_entries(source.cash_entries), tmp_path / "bku.csv")
    target = LedgerStore()
    spreadsheet.import_cash_entries(target, spreadsheet.read_table(path))
    assert _fields(target.cash_entries) == _fields(source.cash_entries)


def test_xlsx_round_trip(tmp_path):
    source = _store()
    path = spreadsheet.write_table(
        spreadsheet.export_cash_entries(source.cash_entries), tmp_path / "bku.xlsx", sheet_name="BKU"
    )
    target = LedgerStore()
    spreadsheet.import_cash_entries(target, spreadsheet.read_table(path))
    assert _fields(target.cash_entries) == _fields(source.cash_entries)


def test_read_table_rejects_other_files(tmp_path):
    with pytest.raises(ImportParseError):
        spreadsheet.read_table(tmp_path / "bku.txt")


def test_import_accepts_english_headers():
    frame = pd.DataFrame([{
        "Date": "2025-02-01",
        "AccountCode": "5.1.2.06",
        "Category": "Konsumsi",
        "Description": "Makan rapat",
        "DisbursementAmount": "150000",
    }])
    store = LedgerStore()
    result = spreadsheet.import_cash_entries(store, frame)
    assert result.imported == 1
    entry = store.cash_entries[0]
    assert entry.date == datetime.date(2025, 2, 1)
    assert entry.disbursement_amount == 150000
    assert entry.receipt_amount == 0


def test_import_skips_unreadable_rows():
    frame = pd.DataFrame([
        {"Tanggal": "2025-01-01", "Kode": "", "Uraian": "Tanpa kode", "Penerimaan": "abc"},
        {"Tanggal": "2025-01-02", "Kode": "4.1", "Uraian": "", "Penerimaan": 5},
        {"Tanggal": "kemarin", "Kode": "4.1", "Uraian": "Tanggal rusak", "Penerimaan": 5},
        {"Tanggal": "2025-01-03", "Kode": "4.1", "Uraian": "Negatif", "Penerimaan": -5},
    ])
    store = LedgerStore()
    result = spreadsheet.import_cash_entries(store, frame)

    assert result.imported == 1
    assert result.skipped == 3
    assert len(result.errors) == 2
    assert result.errors[0].startswith("Baris 4")
    entry = store.cash_entries[0]
    assert entry.account_code == "00.00"
    assert entry.receipt_amount == 0
    assert store.journal_rows == ()


def test_import_skips_amount_out_of_range():
    frame = pd.DataFrame([
        {"Tanggal": "2025-01-01", "Uraian": "Hibah", "Penerimaan": "1000"},
        {"Tanggal": "2025-01-02", "Uraian": "Terlalu besar", "Penerimaan": "1e400"},
    ])
    store = LedgerStore()
    result = spreadsheet.import_cash_entries(store, frame)

    assert result.imported == 1
    assert result.skipped == 1
    assert result.errors[0].startswith("Baris 3")
    assert [e.receipt_amount for e in store.cash_entries] == [1000]


def test_replace_journal_rejects_amount_out_of_range():
    store = _store()
    before = store.journal_rows
    frame = pd.DataFrame([
        {"Tanggal": "2025-04-01", "Kode Rekening": "5.1", "Uraian Debet": "Biaya", "Uraian Kredit": "Kas", "Jumlah": "1e400"},
    ])
    with pytest.raises(ImportParseError) as exc:
        spreadsheet.replace_journal(store, frame, confirmed=True)
    assert "Baris 2" in str(exc.value)
    assert store.journal_rows == before


def test_replace_requires_confirmation():
    store = _store()
    before = store.cash_entries
    with pytest.raises(ImportParseError):
        spreadsheet.replace_cash_entries(store, spreadsheet.export_cash_entries(before))
    assert store.cash_entries == before


def test_replace_with_nothing_readable_keeps_ledger():
    store = _store()
    before = (store.cash_entries, store.journal_rows)
    frame = pd.DataFrame([{"Tanggal": "", "Uraian": "tanpa tanggal"}])
    with pytest.raises(ImportParseError):
        spreadsheet.replace_cash_entries(store, frame, confirmed=True)
    assert (store.cash_entries, store.journal_rows) == before


def test_replace_cash_entries_rebuilds_journal():
    store = _store()
    store.add_manual_journal(DAY1, "5.1.4.01", "Biaya", "Kas", 1000)
    frame = pd.DataFrame([
        {"Tanggal": "2025-03-01", "Kode": "4.1", "Kategori": "Sewa", "Uraian": "Sewa Wantilan", "Penerimaan": 300000},
    ])
    replaced = []

    def handler(event, payload):
        replaced.append(payload)
        return {}

    event_bus.subscribe(LEDGER_REPLACED, handler)
    try:
        result = spreadsheet.replace_cash_entries(store, frame, confirmed=True)
    finally:
        event_bus.unsubscribe(LEDGER_REPLACED, handler)

    assert result.imported == 1
    assert [e.description for e in store.cash_entries] == ["Sewa Wantilan"]
    assert len(store.journal_rows) == 3
    assert replaced == [{"book": "bku", "rows": 1}]


def test_auxiliary_import_defaults_voucher():
    frame = pd.DataFrame([
        {"Tanggal": "2025-01-06", "Kategori": "Hibah", "Uraian": "Hibah", "Debet": 1000, "Kredit": 0},
        {"Tanggal": "2025-01-07", "Bukti": "NOTA-9", "Kategori": "ATK", "Uraian": "Kertas", "Debet": 0, "Kredit": 400},
    ])
    store = LedgerStore()
    result = spreadsheet.import_auxiliary_entries(store, frame)
    assert result.imported == 2
    assert [e.voucher_number for e in store.auxiliary_entries] == ["Imported", "NOTA-9"]
    assert [e.balance for e in store.auxiliary_entries] == [1000, 600]


def test_replace_auxiliary_entries():
    store = LedgerStore()
    store.add_auxiliary_entry(DAY1, "KW-1", "Hibah", "Hibah", debit_amount=5)
    exported = spreadsheet.export_auxiliary_entries(store.auxiliary_entries)
    assert list(exported.columns) == spreadsheet.AUXILIARY_EXPORT_COLUMNS

    frame = pd.DataFrame([{"Tanggal": "2025-02-01", "Bukti": "KW-2", "Uraian": "Baru", "Debet": 10}])
    spreadsheet.replace_auxiliary_entries(store, frame, confirmed=True)
    assert [e.voucher_number for e in store.auxiliary_entries] == ["KW-2"]
    with pytest.raises(ImportParseError):
        spreadsheet.replace_auxiliary_entries(store, frame)


def test_export_journal():
    frame = spreadsheet.export_journal(_store().journal_rows)
    assert list(frame.columns) == spreadsheet.JOURNAL_EXPORT_COLUMNS
    assert frame["ID Transaksi"].tolist()[:3] == ["JU-0106-0001"] * 3
    assert frame["Debet"].sum() == frame["Kredit"].sum()


def test_replace_journal():
    store = _store()
    frame = pd.DataFrame([
        {"Tanggal": "2025-04-01", "Kode Rekening": "5.1.4.01", "Uraian Debet": "Biaya", "Uraian Kredit": "Kas", "Jumlah": 5000},
        {"Tanggal": "2025-04-02", "Kode Rekening": "5.1.2.01", "Uraian Debet": "ATK", "Uraian Kredit": "Kas", "Jumlah": "7500"},
    ])
    result = spreadsheet.replace_journal(store, frame, confirmed=True)

    assert result.imported == 2
    assert len(store.journal_rows) == 6
    assert store.journal_rows[2].row_kind == ROW_MEMO
    assert store.journal_rows[2].description == "(Pencatatan Biaya)"
    assert store.journal_rows[3].debit_amount == 7500


def test_replace_journal_names_bad_row():
    store = _store()
    before = store.journal_rows
    frame = pd.DataFrame([
        {"Tanggal": "2025-04-01", "Kode Rekening": "5.1", "Uraian Debet": "Biaya", "Uraian Kredit": "Kas", "Jumlah": 5000},
        {"Tanggal": "2025-04-02", "Kode Rekening": "5.1", "Uraian Debet": "ATK", "Uraian Kredit": "", "Jumlah": 100},
    ])
    with pytest.raises(ImportParseError) as exc:
        spreadsheet.replace_journal(store, frame, confirmed=True)
    assert "Baris 3" in str(exc.value)
    assert "Uraian Kredit" in str(exc.value)
    assert store.journal_rows == before


def test_replace_journal_requires_confirmation():
    with pytest.raises(ImportParseError):
        spreadsheet.replace_journal(LedgerStore(), pd.DataFrame())
