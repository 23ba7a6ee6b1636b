import datetime

from bukukas.domain import RECEIPT, NotaLine, TransactionDraft
from bukukas.functional import (
    Left,
    Nothing,
    Right,
    Some,
    nota_total,
    validate_budget_fields,
    validate_draft,
    validate_manual_journal,
    validate_nota,
)


def test_maybe_map_and_default():
    assert Some(2).map(lambda x: x * 3) == Some(6)
    assert Nothing().map(lambda x: x * 3).get_or_else(0) == 0
    assert Some("a").is_some()
    assert Nothing().is_none()


def test_either_bind():
    assert Right(2).bind(lambda x: Right(x + 1)) == Right(3)
    assert Left("err").bind(lambda x: Right(x + 1)) == Left("err")
    assert Left("err").get_error() == "err"


def test_validate_draft_ok():
    draft = TransactionDraft(datetime.date(2025, 1, 1), "4.1", "Hibah", "Hibah", "Pemprov", 10, RECEIPT)
    assert validate_draft(draft) == Right(draft)


def test_validate_draft_collects_problems():
    draft = TransactionDraft(None, "", "Hibah", "Hibah", "Pemprov", -5, "transfer")
    error = validate_draft(draft).get_error()
    assert error["error"] == "invalid_draft"
    assert len(error["problems"]) == 4


def test_validate_nota_mismatch():
    lines = [NotaLine("Kertas", 2, 100000)]
    error = validate_nota(lines, 250000, 2).get_error()
    assert error["error"] == "nota_mismatch"
    assert error["difference"] == 50000
    assert nota_total(lines) == 200000


def test_validate_nota_tolerance_and_bad_lines():
    assert validate_nota([NotaLine("Kertas", 1, 998)], 1000, 2).is_right()
    assert validate_nota([NotaLine("Kertas", 1, 500), NotaLine("", 1, 500)], 1000, 2).is_right()
    error = validate_nota([NotaLine("Kertas", 1, 500), NotaLine("Paku", 1, -500)], 1000, 2).get_error()
    assert error["lines"] == [2]


def test_validate_draft_rejects_text_date():
    draft = TransactionDraft("2025-01-01", "4.1", "Hibah", "Hibah", "Pemprov", 10, RECEIPT)
    assert validate_draft(draft).get_error()["problems"] == ["Tanggal tidak valid: '2025-01-01'"]


def test_validate_budget_fields():
    assert validate_budget_fields(" ATK ", 100) == Right(("ATK", 100))
    assert validate_budget_fields("", 100).is_left()
    assert validate_budget_fields("ATK", -1).is_left()


def test_validate_manual_journal():
    assert validate_manual_journal("5.1", "Biaya", "Kas", 10) == Right(10)
    assert validate_manual_journal("5.1", "Biaya", " ", 10).is_left()
