import logging
from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

__all__ = [
    'event_bus', 'Event', 'EventBus',
    'TRANSACTION_COMMITTED', 'LEDGER_REPLACED', 'BOOKS_OUT_OF_BALANCE',
    'check_books_balanced_handler', 'register_default_handlers',
]

logger = logging.getLogger(__name__)


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Event, dict], dict]]] = {}

    def subscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        self._subscribers.setdefault(name, [])
        if handler not in self._subscribers[name]:
            self._subscribers[name].append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = self._subscribers.get(name, [])
        if not handlers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in handlers]

    def unsubscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


TRANSACTION_COMMITTED = "TRANSACTION_COMMITTED"
LEDGER_REPLACED = "LEDGER_REPLACED"
BOOKS_OUT_OF_BALANCE = "BOOKS_OUT_OF_BALANCE"

event_bus = EventBus()


def check_books_balanced_handler(event: Event, payload: dict) -> dict:
    """BKU and BKP must end on the same saldo while only the commit flow writes them."""
    book = payload.get("book_balance", 0)
    auxiliary = payload.get("auxiliary_balance", 0)
    if book != auxiliary:
        logger.warning("BKU saldo %s differs from BKP saldo %s", book, auxiliary)
        return {
            "alert": f"Saldo BKU ({book}) tidak sama dengan saldo BKP ({auxiliary})",
            "difference": book - auxiliary,
        }
    return {}


def log_commit_handler(event: Event, payload: dict) -> dict:
    logger.info(
        "committed %s %s (%s) on %s",
        payload.get("direction"), payload.get("entry_id"),
        payload.get("amount"), payload.get("date"),
    )
    return {}


def log_replace_handler(event: Event, payload: dict) -> dict:
    logger.info("%s replaced by import, %s rows", payload.get("book"), payload.get("rows"))
    return {}


def register_default_handlers(bus: EventBus = event_bus) -> None:
    bus.subscribe(TRANSACTION_COMMITTED, log_commit_handler)
    bus.subscribe(LEDGER_REPLACED, log_replace_handler)
    bus.subscribe(BOOKS_OUT_OF_BALANCE, check_books_balanced_handler)


register_default_handlers()
