from bukukas.events import (
    Event, EventBus,
    TRANSACTION_COMMITTED, LEDGER_REPLACED, BOOKS_OUT_OF_BALANCE,
    check_books_balanced_handler, register_default_handlers
)
from datetime import datetime


def test_event_creation():
    event = Event(
        name=TRANSACTION_COMMITTED,
        ts=datetime.now().isoformat(),
        payload={"entry_id": "bku-000001", "amount": 1000}
    )
    assert event.name == TRANSACTION_COMMITTED
    assert event.payload["amount"] == 1000


def test_event_bus_subscribe_and_publish():
    bus = EventBus()
    results_collected = []

    def test_handler(event: Event, payload: dict) -> dict:
        results_collected.append(payload)
        return {"processed": True}

    bus.subscribe(LEDGER_REPLACED, test_handler)
    results = bus.publish(LEDGER_REPLACED, {"book": "bku", "rows": 3})

    assert results == [{"processed": True}]
    assert results_collected == [{"book": "bku", "rows": 3}]


def test_subscribe_twice_calls_once():
    bus = EventBus()
    calls = []

    def handler(event, payload):
        calls.append(event.name)
        return {}

    bus.subscribe(TRANSACTION_COMMITTED, handler)
    bus.subscribe(TRANSACTION_COMMITTED, handler)
    bus.publish(TRANSACTION_COMMITTED, {})
    assert calls == [TRANSACTION_COMMITTED]


def test_unsubscribe():
    bus = EventBus()

    def handler(event, payload):
        return {"called": True}

    bus.subscribe(TRANSACTION_COMMITTED, handler)
    bus.unsubscribe(TRANSACTION_COMMITTED, handler)
    assert bus.publish(TRANSACTION_COMMITTED, {}) == []


def test_publish_without_subscribers():
    assert EventBus().publish("UNKNOWN", {"x": 1}) == []


def test_check_books_balanced_handler_alert():
    event = Event(name=BOOKS_OUT_OF_BALANCE, ts=datetime.now().isoformat(), payload={})
    payload = {"book_balance": 750000, "auxiliary_balance": 700000}
    result = check_books_balanced_handler(event, payload)

    assert result["difference"] == 50000
    assert "tidak sama" in result["alert"]
    assert payload == {"book_balance": 750000, "auxiliary_balance": 700000}


def test_check_books_balanced_handler_no_alert():
    event = Event(name=BOOKS_OUT_OF_BALANCE, ts=datetime.now().isoformat(), payload={})
    assert check_books_balanced_handler(event, {"book_balance": 5, "auxiliary_balance": 5}) == {}


def test_register_default_handlers():
    bus = EventBus()
    register_default_handlers(bus)
    results = bus.publish(BOOKS_OUT_OF_BALANCE, {"book_balance": 1, "auxiliary_balance": 2})
    assert results[0]["difference"] == -1
