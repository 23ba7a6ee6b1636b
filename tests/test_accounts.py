import datetime

from bukukas.accounts import (
    HISTORICAL_CODE_LABEL,
    available_categories,
    available_codes,
    clean_code,
    lookup_account_name,
)
from bukukas.domain import CashEntry
from bukukas.functional import Nothing, Some


def test_clean_code():
    assert clean_code("5.1.2.01 - Belanja Alat Tulis Kantor (ATK)") == "5.1.2.01"
    assert clean_code(" 9.9.9 ") == "9.9.9"
    assert clean_code(None) == ""


def test_lookup_account_name():
    assert lookup_account_name("5.1.2.01") == Some("Belanja Alat Tulis Kantor (ATK)")
    assert lookup_account_name("1.1.1.01 - Kas") == Some("Kas di Bendahara Desa")
    assert lookup_account_name("7.7.7") == Nothing()


def test_available_codes_include_historical():
    entries = [CashEntry("a", datetime.date(2025, 1, 1), "9.9.9", "Lama", "lama", receipt_amount=1)]
    codes = dict(available_codes(entries))
    assert codes["9.9.9"] == HISTORICAL_CODE_LABEL
    assert codes["5.1.2.01"] == "Belanja Alat Tulis Kantor (ATK)"
    assert [c for c, _ in available_codes(entries)] == sorted(codes)


def test_available_categories():
    entries = [
        CashEntry("a", datetime.date(2025, 1, 1), "4.1", "Hibah", "x", receipt_amount=1),
        CashEntry("b", datetime.date(2025, 1, 1), "5.1", "", "y", disbursement_amount=1),
        CashEntry("c", datetime.date(2025, 1, 1), "5.1", "ATK", "z", disbursement_amount=1),
        CashEntry("d", datetime.date(2025, 1, 1), "5.1", "ATK", "z", disbursement_amount=1),
    ]
    assert available_categories(entries) == ["ATK", "Hibah"]
