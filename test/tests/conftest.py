"""
Project: Smart Restaurant Management System (SRMS)
School: UMGC – Software Development and Security
Authors: Beby Alexis, Kevin Wong , David White Jr
Date: October 2025

Description:
Shared fixtures: a testing app on in-memory SQLite with seeded orders,
Socket.IO test clients, and an engine over the in-memory record store with
a room double that records every broadcast.
"""

import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

# --- Make sure project root is importable ---
TESTS_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(TESTS_DIR, os.pardir, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from app import create_app, socketio  # noqa: E402
from chat_engine import ChatEngine  # noqa: E402
from models import db, Customer, Order, Profile  # noqa: E402
from store import MemoryRecordStore  # noqa: E402

CUSTOMER_ID = "C1"
ORDER_ID = "order-0001-4f2a9c"
SECOND_ORDER_ID = "order-0002-77be01"
GUEST_ORDER_ID = "order-0003-guest1"
LEGACY_ORDER_ID = "order-0004-c2only"
ADMIN_ID = "admin-1"


class TickClock:
    """Deterministic clock that moves one second per call."""

    def __init__(self):
        self.now = datetime(2025, 10, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


class RecordingRooms:
    def __init__(self):
        self.joined = []
        self.left = []
        self.broadcasts = []
        self.sent = []

    def join(self, sid, room):
        self.joined.append((sid, room))

    def leave(self, sid, room):
        self.left.append((sid, room))

    def broadcast(self, room, event, payload, skip_sid=None):
        self.broadcasts.append((room, event, payload, skip_sid))

    def send(self, sid, event, payload):
        self.sent.append((sid, event, payload))

    def events(self, name):
        return [b for b in self.broadcasts if b[1] == name]


@pytest.fixture
def app():
    app = create_app(testing=True)
    with app.app_context():
        db.drop_all()
        db.create_all()
        db.session.add_all([
            Profile(id=CUSTOMER_ID, first_name="Ada", last_name="Lovelace", email="ada@example.com", phone="+1 555 0100"),
            Customer(id="C2", name="Grace Hopper", email=None, phone=None),
            Order(id=ORDER_ID, customer_id=CUSTOMER_ID, total_amount=24.5, status="preparing", table_number="T4"),
            Order(id=SECOND_ORDER_ID, user_id=CUSTOMER_ID, total_amount=9.0, status="served"),
            Order(id=GUEST_ORDER_ID, total_amount=11.99, status="served"),
            Order(id=LEGACY_ORDER_ID, customer_id="C2", total_amount=5.0, status="paid"),
        ])
        db.session.commit()
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def connect(app):
    clients = []

    def _connect(token=None, role=None):
        auth = {}
        if token:
            auth["token"] = token
        if role:
            auth["user"] = {"role": role}
        c = socketio.test_client(app, auth=auth or None)
        clients.append(c)
        return c

    yield _connect
    for c in clients:
        if c.is_connected():
            c.disconnect()


def received(client, name):
    return [pkt["args"][0] for pkt in client.get_received() if pkt["name"] == name]


@pytest.fixture
def memory_store():
    store = MemoryRecordStore()
    store.add_profile({"id": CUSTOMER_ID, "first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.com", "phone": None})
    store.add_customer({"id": "C2", "name": "Grace Hopper", "email": None, "phone": None})
    store.add_order({"id": ORDER_ID, "customer_id": CUSTOMER_ID, "total_amount": 24.5, "status": "preparing", "table_number": "T4"})
    store.add_order({"id": SECOND_ORDER_ID, "customer_id": None, "user_id": CUSTOMER_ID, "total_amount": 9.0, "status": "served"})
    store.add_order({"id": GUEST_ORDER_ID, "customer_id": None, "user_id": None, "total_amount": 11.99, "status": "served"})
    store.add_order({"id": LEGACY_ORDER_ID, "customer_id": "C2", "total_amount": 5.0, "status": "paid"})
    store.add_order({"id": "order-0005-nobody", "customer_id": "C9", "total_amount": 1.0, "status": "paid"})
    return store


@pytest.fixture
def rooms():
    return RecordingRooms()


@pytest.fixture
def engine(memory_store, rooms):
    return ChatEngine(memory_store, rooms, clock=TickClock())
