"""
Project: Smart Restaurant Management System (SRMS)
School: UMGC – Software Development and Security
Authors: Beby Alexis, Kevin Wong, David White Jr
Date: October 2025

Description:
Keyed record store used by the chat engine. The SQL store is backed by
Flask-SQLAlchemy; the in-memory store keeps the same records in dicts and
is used for tests and for RECORD_STORE=memory runs.

Records cross this boundary as plain dicts with ISO-8601 timestamps, the
same shape the Socket.IO layer sends to clients.
"""

import copy
import threading
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from errors import StoreError
from models import Customer, Order, Profile, SupportChat, ChatStatus, iso


class RecordStore:
    """Contract shared by the store implementations."""

    def get_chat(self, chat_id):
        raise NotImplementedError

    def find_active_chat(self, order_id):
        raise NotImplementedError

    def latest_chat_for_order(self, order_id):
        raise NotImplementedError

    def list_chats(self, limit):
        raise NotImplementedError

    def chats_for_customer(self, customer_id):
        raise NotImplementedError

    def insert_chat(self, record):
        """Insert a chat. Returns None when the order already has an active chat."""
        raise NotImplementedError

    def update_chat(self, chat_id, changes):
        raise NotImplementedError

    def append_message(self, chat_id, message, at):
        """Append one message and bump last_message_at in a single step."""
        raise NotImplementedError

    def get_order(self, order_id):
        raise NotImplementedError

    def get_profile(self, profile_id):
        raise NotImplementedError

    def get_customer(self, customer_id):
        raise NotImplementedError


class SqlRecordStore(RecordStore):
    def __init__(self, db):
        self.db = db

    @contextmanager
    def _guard(self):
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.session.rollback()
            raise StoreError(str(exc)) from exc

    def get_chat(self, chat_id):
        with self._guard():
            chat = self.db.session.get(SupportChat, chat_id)
            return chat.to_dict() if chat else None

    def find_active_chat(self, order_id):
        with self._guard():
            chat = (
                SupportChat.query.filter_by(order_id=order_id, status=ChatStatus.active.value)
                .order_by(SupportChat.created_at.desc())
                .first()
            )
            return chat.to_dict() if chat else None

    def latest_chat_for_order(self, order_id):
        with self._guard():
            chat = SupportChat.query.filter_by(order_id=order_id).order_by(SupportChat.created_at.desc()).first()
            return chat.to_dict() if chat else None

    def list_chats(self, limit):
        with self._guard():
            chats = SupportChat.query.order_by(SupportChat.last_message_at.desc()).limit(limit).all()
            return [c.to_dict() for c in chats]

    def chats_for_customer(self, customer_id):
        with self._guard():
            chats = (
                SupportChat.query.filter_by(customer_id=customer_id)
                .order_by(SupportChat.last_message_at.desc())
                .all()
            )
            return [c.to_dict() for c in chats]

    def insert_chat(self, record):
        with self._guard():
            chat = SupportChat(**record)
            self.db.session.add(chat)
            try:
                self.db.session.commit()
            except IntegrityError:
                self.db.session.rollback()
                return None
            return chat.to_dict()

    def update_chat(self, chat_id, changes):
        with self._guard():
            chat = self.db.session.get(SupportChat, chat_id)
            if chat is None:
                return None
            for k, v in changes.items():
                setattr(chat, k, v)
            self.db.session.commit()
            return chat.to_dict()

    def append_message(self, chat_id, message, at):
        with self._guard():
            chat = self.db.session.get(SupportChat, chat_id, with_for_update=True)
            if chat is None:
                return None
            chat.messages = [*(chat.messages or []), dict(message)]
            chat.last_message_at = at
            self.db.session.commit()
            return chat.to_dict()

    def get_order(self, order_id):
        with self._guard():
            order = self.db.session.get(Order, order_id)
            return order.to_dict() if order else None

    def get_profile(self, profile_id):
        with self._guard():
            profile = self.db.session.get(Profile, profile_id)
            return profile.to_dict() if profile else None

    def get_customer(self, customer_id):
        with self._guard():
            customer = self.db.session.get(Customer, customer_id)
            return customer.to_dict() if customer else None


_CHAT_TIMESTAMPS = ("created_at", "last_message_at", "resolved_at")


class MemoryRecordStore(RecordStore):
    """Dict-backed store. Rows keep datetimes; reads return exported copies."""

    def __init__(self):
        self._lock = threading.Lock()
        self._state = {"chats": {}, "orders": {}, "profiles": {}, "customers": {}}

    # ----- reference data -----
    def add_order(self, order):
        self._state["orders"][order["id"]] = dict(order)

    def add_profile(self, profile):
        self._state["profiles"][profile["id"]] = dict(profile)

    def add_customer(self, customer):
        self._state["customers"][customer["id"]] = dict(customer)

    def get_order(self, order_id):
        return copy.deepcopy(self._state["orders"].get(order_id))

    def get_profile(self, profile_id):
        return copy.deepcopy(self._state["profiles"].get(profile_id))

    def get_customer(self, customer_id):
        return copy.deepcopy(self._state["customers"].get(customer_id))

    # ----- chats -----
    @staticmethod
    def _export(row):
        out = copy.deepcopy(row)
        for k in _CHAT_TIMESTAMPS:
            out[k] = iso(row.get(k))
        return out

    def get_chat(self, chat_id):
        with self._lock:
            row = self._state["chats"].get(chat_id)
            return self._export(row) if row else None

    def _for_order(self, order_id, status=None):
        rows = [
            r for r in self._state["chats"].values()
            if r["order_id"] == order_id and (status is None or r["status"] == status)
        ]
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return rows

    def find_active_chat(self, order_id):
        with self._lock:
            rows = self._for_order(order_id, ChatStatus.active.value)
            return self._export(rows[0]) if rows else None

    def latest_chat_for_order(self, order_id):
        with self._lock:
            rows = self._for_order(order_id)
            return self._export(rows[0]) if rows else None

    def list_chats(self, limit):
        with self._lock:
            rows = sorted(self._state["chats"].values(), key=lambda r: r["last_message_at"], reverse=True)
            return [self._export(r) for r in rows[:limit]]

    def chats_for_customer(self, customer_id):
        with self._lock:
            rows = [r for r in self._state["chats"].values() if r["customer_id"] == customer_id]
            rows.sort(key=lambda r: r["last_message_at"], reverse=True)
            return [self._export(r) for r in rows]

    def insert_chat(self, record):
        row = copy.deepcopy(record)
        row.setdefault("status", ChatStatus.active.value)
        row.setdefault("messages", [])
        row.setdefault("resolved_by", None)
        row.setdefault("resolved_at", None)
        with self._lock:
            if row["status"] == ChatStatus.active.value and self._for_order(row["order_id"], row["status"]):
                return None
            self._state["chats"][row["id"]] = row
            return self._export(row)

    def update_chat(self, chat_id, changes):
        with self._lock:
            row = self._state["chats"].get(chat_id)
            if row is None:
                return None
            row.update(copy.deepcopy(changes))
            return self._export(row)

    def append_message(self, chat_id, message, at):
        with self._lock:
            row = self._state["chats"].get(chat_id)
            if row is None:
                return None
            row["messages"].append(dict(message))
            row["last_message_at"] = at
            return self._export(row)
