from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from conftest import CUSTOMER_ID, ORDER_ID
from errors import StoreError
from models import db
from store import MemoryRecordStore, SqlRecordStore

T0 = datetime(2025, 10, 1, 12, 0, tzinfo=timezone.utc)


def _chat(chat_id, order_id=ORDER_ID, status="active", at=T0):
    return {
        "id": chat_id,
        "order_id": order_id,
        "customer_id": CUSTOMER_ID,
        "issue": "cold soup",
        "category": "order-issue",
        "status": status,
        "messages": [],
        "customer_details": {"id": CUSTOMER_ID, "name": "Ada Lovelace"},
        "order_details": {"id": order_id, "order_number": order_id[-6:]},
        "created_at": at,
        "last_message_at": at,
    }


@pytest.fixture
def sql_store(app):
    with app.app_context():
        yield SqlRecordStore(db)


def test_insert_and_get_chat(sql_store):
    created = sql_store.insert_chat(_chat("chat-1"))
    assert created["created_at"] == "2025-10-01T12:00:00+00:00"
    fetched = sql_store.get_chat("chat-1")
    assert fetched == created
    assert sql_store.get_chat("missing") is None


def test_find_active_and_latest_chat(sql_store):
    sql_store.insert_chat(_chat("old", status="resolved", at=T0))
    sql_store.insert_chat(_chat("new", at=T0 + timedelta(minutes=5)))
    assert sql_store.find_active_chat(ORDER_ID)["id"] == "new"
    assert sql_store.latest_chat_for_order(ORDER_ID)["id"] == "new"
    sql_store.update_chat("new", {"status": "resolved"})
    assert sql_store.find_active_chat(ORDER_ID) is None


def test_append_message_persists_and_bumps_timestamp(sql_store):
    sql_store.insert_chat(_chat("chat-1"))
    later = T0 + timedelta(seconds=30)
    msg = {"id": "m1", "sender": "customer", "sender_id": CUSTOMER_ID, "content": "Hi", "timestamp": later.isoformat(), "read": False}

    updated = sql_store.append_message("chat-1", msg, later)
    assert updated["messages"] == [msg]
    assert updated["last_message_at"] == later.isoformat()

    sql_store.append_message("chat-1", {**msg, "id": "m2"}, later)
    assert [m["id"] for m in sql_store.get_chat("chat-1")["messages"]] == ["m1", "m2"]
    assert sql_store.append_message("missing", msg, later) is None


def test_update_chat_replaces_message_list(sql_store):
    sql_store.insert_chat(_chat("chat-1"))
    msg = {"id": "m1", "sender_id": CUSTOMER_ID, "read": False}
    sql_store.append_message("chat-1", msg, T0)
    sql_store.update_chat("chat-1", {"messages": [{**msg, "read": True}]})
    assert sql_store.get_chat("chat-1")["messages"][0]["read"] is True
    assert sql_store.update_chat("missing", {"status": "resolved"}) is None


def test_list_chats_newest_activity_first(sql_store):
    sql_store.insert_chat(_chat("a", at=T0))
    sql_store.insert_chat(_chat("b", order_id="order-x-000002", at=T0 + timedelta(hours=1)))
    assert [c["id"] for c in sql_store.list_chats(10)] == ["b", "a"]
    assert len(sql_store.list_chats(1)) == 1


def test_reference_lookups(sql_store):
    assert sql_store.get_order(ORDER_ID)["customer_id"] == CUSTOMER_ID
    assert sql_store.get_profile(CUSTOMER_ID)["first_name"] == "Ada"
    assert sql_store.get_customer("C2")["name"] == "Grace Hopper"
    assert sql_store.get_order("missing") is None


def test_database_errors_surface_as_store_error(sql_store):
    with patch.object(db.session, "get", side_effect=OperationalError("SELECT", {}, Exception("db down"))):
        with pytest.raises(StoreError):
            sql_store.get_chat("chat-1")


def test_memory_store_returns_copies():
    store = MemoryRecordStore()
    store.insert_chat(_chat("chat-1"))
    fetched = store.get_chat("chat-1")
    fetched["messages"].append({"id": "sneaky"})
    assert store.get_chat("chat-1")["messages"] == []
    assert fetched["created_at"] == "2025-10-01T12:00:00+00:00"


def test_second_active_chat_for_order_is_rejected(sql_store):
    assert sql_store.insert_chat(_chat("first")) is not None
    assert sql_store.insert_chat(_chat("second", at=T0 + timedelta(minutes=1))) is None
    assert sql_store.find_active_chat(ORDER_ID)["id"] == "first"

    # resolved chats do not count against the order
    sql_store.update_chat("first", {"status": "resolved"})
    assert sql_store.insert_chat(_chat("third", at=T0 + timedelta(minutes=2)))["id"] == "third"
    assert sql_store.insert_chat(_chat("closed", status="closed"))["id"] == "closed"


def test_memory_store_rejects_second_active_chat():
    store = MemoryRecordStore()
    store.insert_chat(_chat("first"))
    assert store.insert_chat(_chat("second")) is None
    assert store.insert_chat(_chat("old", status="resolved"))["id"] == "old"


def test_chats_for_customer(sql_store):
    sql_store.insert_chat(_chat("a", at=T0))
    sql_store.insert_chat(_chat("b", order_id="order-x-000002", at=T0 + timedelta(hours=1)))
    assert [c["id"] for c in sql_store.chats_for_customer(CUSTOMER_ID)] == ["b", "a"]
    assert sql_store.chats_for_customer("nobody") == []
