import json
import logging
from pathlib import Path

from bukukas.formatting import parse_date
from bukukas.store import LedgerStore

logger = logging.getLogger(__name__)


def load_seed(path: str) -> LedgerStore:
    """Build a store from a JSON file; a missing file gives an empty store."""
    store = LedgerStore()
    if not Path(path).exists():
        logger.info("no seed file at %s, starting empty", path)
        return store

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    for b in data.get("budget", []):
        store.add_budget_item(**b)
    for e in data.get("cash_entries", []):
        store.add_cash_entry(**dict(e, date=parse_date(e["date"])))
    for a in data.get("auxiliary_entries", []):
        store.add_auxiliary_entry(**dict(a, date=parse_date(a["date"])))

    logger.info(
        "seeded %d BKU, %d BKP, %d budget items from %s",
        len(store.cash_entries), len(store.auxiliary_entries), len(store.budget_items), path,
    )
    return store
