"""General Journal (Jurnal Umum) posting and the per-account General Ledger.

Every posting is a Debit/Credit/Memo triplet sharing one transaction id. The
id (``JU-MMDD-NNNN``) is an opaque reference handed out by the store; it has
no meaning under any accounting standard.
"""
import datetime
import logging
from typing import Iterable

from bukukas.domain import ROW_CREDIT, ROW_DEBIT, ROW_MEMO, CashEntry, JournalRow
from bukukas.errors import InvalidEntry, ValidationError
from bukukas.functional import validate_manual_journal
from bukukas.settings import CASH_ACCOUNT_CODE, CASH_ACCOUNT_LABEL

logger = logging.getLogger(__name__)

CREDIT_NORMAL_PREFIXES = ("2", "3", "4")


def transaction_id(day: datetime.date, number: int) -> str:
    return f"JU-{day.month:02d}{day.day:02d}-{number:04d}"


def _triplet(
    txid: str,
    day: datetime.date,
    debit_code: str,
    debit_description: str,
    credit_code: str,
    credit_description: str,
    amount: int,
    memo: str,
) -> tuple[JournalRow, JournalRow, JournalRow]:
    return (
        JournalRow(
            row_id=f"{txid}-1",
            transaction_id=txid,
            date=day,
            account_code=debit_code,
            description=debit_description,
            debit_amount=amount,
            row_kind=ROW_DEBIT,
        ),
        JournalRow(
            row_id=f"{txid}-2",
            transaction_id=txid,
            account_code=credit_code,
            description=credit_description,
            credit_amount=amount,
            row_kind=ROW_CREDIT,
        ),
        JournalRow(
            row_id=f"{txid}-3",
            transaction_id=txid,
            description=memo,
            row_kind=ROW_MEMO,
        ),
    )


def post(entry: CashEntry, txid: str) -> tuple[JournalRow, JournalRow, JournalRow]:
    """Turn a newly committed cash book entry into its journal triplet.

    A receipt debits cash and credits the entry's account; a disbursement
    debits the entry's account and credits cash. Never call this for edits.
    """
    memo = f"(Posting Otomatis: {entry.description})"
    if entry.receipt_amount > 0:
        rows = _triplet(
            txid, entry.date,
            CASH_ACCOUNT_CODE, CASH_ACCOUNT_LABEL,
            entry.account_code, entry.description,
            entry.receipt_amount, memo,
        )
    elif entry.disbursement_amount > 0:
        rows = _triplet(
            txid, entry.date,
            entry.account_code, entry.description,
            CASH_ACCOUNT_CODE, CASH_ACCOUNT_LABEL,
            entry.disbursement_amount, memo,
        )
    else:
        raise InvalidEntry(f"cannot post {entry.id}: both receipt and disbursement are zero")

    logger.debug("posted %s for %s", txid, entry.id)
    return rows


def manual_entry(
    day: datetime.date,
    account_code: str,
    debit_description: str,
    credit_description: str,
    amount: int,
    txid: str,
) -> tuple[JournalRow, JournalRow, JournalRow]:
    """A hand-written journal triplet; only the debit leg names an account."""
    checked = validate_manual_journal(account_code, debit_description, credit_description, amount)
    if checked.is_left():
        raise ValidationError(checked.get_error()["message"])

    rows = _triplet(
        txid, day,
        account_code.strip(), debit_description.strip(),
        None, credit_description.strip(),
        amount, f"(Pencatatan {debit_description.strip()})",
    )
    return rows


def journal_totals(rows: Iterable[JournalRow]) -> tuple[int, int]:
    debit = credit = 0
    for r in rows:
        debit += r.debit_amount
        credit += r.credit_amount
    return debit, credit


def transaction_groups(rows: Iterable[JournalRow]) -> dict[str, list[JournalRow]]:
    groups: dict[str, list[JournalRow]] = {}
    for r in rows:
        groups.setdefault(r.transaction_id, []).append(r)
    return groups


def transaction_dates(rows: Iterable[JournalRow]) -> dict[str, datetime.date]:
    """Date of each transaction, taken from its debit leg."""
    return {r.transaction_id: r.date for r in rows if r.date is not None}


def is_credit_normal(account_code: str) -> bool:
    return account_code[:1] in CREDIT_NORMAL_PREFIXES


def account_ledger(rows: Iterable[JournalRow], account_code: str) -> list[dict]:
    """Buku Besar for one account: its journal legs with a running balance.

    Liability, equity and revenue codes (2.x, 3.x, 4.x) grow on the credit
    side; every other code grows on the debit side.
    """
    rows = list(rows)
    dates = transaction_dates(rows)
    legs = [r for r in rows if r.account_code == account_code and r.row_kind != ROW_MEMO]
    legs.sort(key=lambda r: (dates.get(r.transaction_id) or datetime.date.min, r.transaction_id))

    credit_normal = is_credit_normal(account_code)
    running = 0
    ledger = []
    for r in legs:
        if credit_normal:
            running += r.credit_amount - r.debit_amount
        else:
            running += r.debit_amount - r.credit_amount
        ledger.append({
            "date": dates.get(r.transaction_id),
            "transaction_id": r.transaction_id,
            "description": r.description,
            "debit": r.debit_amount,
            "credit": r.credit_amount,
            "balance": running,
        })
    return ledger


def ledger_accounts(rows: Iterable[JournalRow]) -> list[str]:
    return sorted({r.account_code for r in rows if r.account_code})
