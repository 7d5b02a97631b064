"""
Project: Smart Restaurant Management System (SRMS)
School: UMGC – Software Development and Security
Authors: Beby Alexis, Kevin Wong, David White Jr
Date: October 2025

Description:
Support chat lifecycle. A chat is opened for an order by its registered
customer, receives messages from the customer and the admins, tracks read
receipts and is resolved by an admin. At most one chat per order is active.

Mutations of a single chat (send, mark_read, resolve) are serialized per
chat id, and message append is a single store operation, so two concurrent
sends can never overwrite each other's message. Starting a chat is
serialized per order id; the SQL store also carries a partial unique index
on active chats per order for multi-process deployments.
"""

import threading
import uuid
from contextlib import contextmanager
from typing import Callable, Optional

from errors import ChatNotFound, NotRegisteredCustomer, OrderNotFound, StoreError
from logging_config import get_logger
from models import ChatStatus, iso, utcnow
from rooms import ADMIN_ROOM, chat_room

logger = get_logger(__name__)

CUSTOMER = "customer"
ADMIN = "admin"
DEFAULT_CATEGORY = "order-issue"


def sender_role(customer_id, sender_id) -> str:
    """The chat's customer speaks as 'customer'; everyone else as 'admin'."""
    return CUSTOMER if sender_id == customer_id else ADMIN


def order_number(order_id) -> str:
    return str(order_id)[-6:]


def _display_name(profile):
    if profile.get("name"):
        return profile["name"]
    first, last = profile.get("first_name"), profile.get("last_name")
    if first and last:
        return f"{first} {last}"
    return first or last or "Customer"


class ChatLocks:
    """Keyed locks that live only while a caller holds or waits on them."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = {}  # key -> [lock, users]

    def __len__(self):
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, key):
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if not entry[1]:
                    del self._locks[key]


class ChatEngine:
    def __init__(
        self,
        store,
        rooms,
        clock: Optional[Callable] = None,
        id_factory: Optional[Callable[[], str]] = None,
        admin_limit: int = 100,
    ):
        self.store = store
        self.rooms = rooms
        self.clock = clock or utcnow
        self.id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self.admin_limit = admin_limit
        self.locks = ChatLocks()

    # ---------- start ----------
    def start(self, order_id, issue, category=None, requester_sid=None):
        return self.open_chat(order_id, issue, category, requester_sid)[0]

    def open_chat(self, order_id, issue, category=None, requester_sid=None):
        """Like start, but also report whether a new chat was created."""
        order = self.store.get_order(order_id)
        if order is None:
            raise OrderNotFound()

        customer_id = order.get("customer_id") or order.get("user_id")
        if not customer_id:
            logger.info("Chat access denied, order has no registered customer", extra={"order_id": order_id})
            raise NotRegisteredCustomer()

        # check-then-insert must not interleave for one order
        with self.locks.hold(f"order:{order_id}"):
            existing = self.store.find_active_chat(order_id)
            if existing:
                self._join(requester_sid, existing["id"])
                return self._project(existing), False

            customer_details = self._customer_details(customer_id)
            if customer_details is None:
                logger.info("Chat access denied, customer record missing", extra={"order_id": order_id, "customer_id": customer_id})
                raise NotRegisteredCustomer()

            now = self.clock()
            chat = self.store.insert_chat({
                "id": self.id_factory(),
                "order_id": order_id,
                "customer_id": customer_id,
                "issue": issue,
                "category": category or DEFAULT_CATEGORY,
                "status": ChatStatus.active.value,
                "messages": [],
                "customer_details": customer_details,
                "order_details": self._order_snapshot(order),
                "created_at": now,
                "last_message_at": now,
            })
            if chat is None:
                # another process won the insert
                existing = self.store.find_active_chat(order_id)
                if existing is None:
                    raise StoreError("Chat could not be created")
                self._join(requester_sid, existing["id"])
                return self._project(existing), False
        logger.info("Chat created", extra={"chat_id": chat["id"], "order_id": order_id})

        chat = self._project(chat)
        self._join(requester_sid, chat["id"])
        self.rooms.broadcast(ADMIN_ROOM, "chat:new", {"chat": chat})
        if requester_sid:
            self.rooms.send(requester_sid, "chat:started", chat)
        return chat, True

    def _join(self, sid, chat_id):
        if sid:
            self.rooms.join(sid, chat_room(chat_id))

    def _customer_details(self, customer_id):
        profile = self.store.get_profile(customer_id)
        if profile:
            return {
                "id": profile["id"],
                "name": _display_name(profile),
                "email": profile.get("email") or "No Email",
                "phone": profile.get("phone") or "No Phone",
            }
        customer = self.store.get_customer(customer_id)
        if customer:
            return {
                "id": customer["id"],
                "name": customer.get("name"),
                "email": customer.get("email") or "No Email",
                "phone": customer.get("phone") or "No Phone",
            }
        return None

    @staticmethod
    def _order_snapshot(order):
        return {
            "id": order["id"],
            "order_number": order_number(order["id"]),
            "total_amount": order.get("total_amount"),
            "status": order.get("status"),
            "items": [],
            "table_number": order.get("table_number"),
            "created_at": order.get("created_at"),
            "customer_name": order.get("customer_name"),
        }

    # ---------- messages ----------
    def send(self, chat_id, content, sender_id):
        with self.locks.hold(chat_id):
            chat = self.store.get_chat(chat_id)
            if chat is None:
                raise ChatNotFound()

            now = self.clock()
            message = {
                "id": self.id_factory(),
                "sender": sender_role(chat["customer_id"], sender_id),
                "sender_id": sender_id,
                "content": content,
                "timestamp": iso(now),
                "read": False,
            }
            if self.store.append_message(chat_id, message, now) is None:
                raise ChatNotFound()

        self.rooms.broadcast(chat_room(chat_id), "chat:message", {"chat_id": chat_id, "message": message})
        return message

    def mark_read(self, chat_id, reader_id) -> bool:
        with self.locks.hold(chat_id):
            chat = self.store.get_chat(chat_id)
            if chat is None:
                raise ChatNotFound()

            changed = False
            messages = []
            for msg in chat["messages"]:
                if not msg.get("read") and msg.get("sender_id") != reader_id:
                    msg = {**msg, "read": True}
                    changed = True
                messages.append(msg)

            if not changed:
                return False
            self.store.update_chat(chat_id, {"messages": messages})

        self.rooms.broadcast(chat_room(chat_id), "chat:messagesRead", {"chat_id": chat_id, "user_id": reader_id})
        return True

    # ---------- resolve ----------
    def resolve(self, chat_id, resolved_by=ADMIN):
        with self.locks.hold(chat_id):
            chat = self.store.get_chat(chat_id)
            if chat is None:
                raise ChatNotFound()
            # one-way: anything past active stays where it is
            if chat["status"] != ChatStatus.active.value:
                return
            now = self.clock()
            # a resolution counts as activity so the chat resurfaces in the admin list
            self.store.update_chat(chat_id, {
                "status": ChatStatus.resolved.value,
                "resolved_by": resolved_by,
                "resolved_at": now,
                "last_message_at": now,
            })

        logger.info("Chat resolved", extra={"chat_id": chat_id, "resolved_by": resolved_by})
        self.rooms.broadcast(chat_room(chat_id), "chat:resolved", {"chat_id": chat_id, "resolved_by": resolved_by})

    # ---------- reads ----------
    def get(self, chat_id):
        chat = self.store.get_chat(chat_id)
        if chat is None:
            raise ChatNotFound()
        return self._project(chat, backfill_customer=True)

    def get_by_order(self, order_id):
        chat = self.store.latest_chat_for_order(order_id)
        if chat is None:
            return None
        return self._project(chat)

    def list_for_admin(self):
        return [self._project(c, backfill_customer=True) for c in self.store.list_chats(self.admin_limit)]

    def list_for_customer(self, customer_id):
        return [self._project(c) for c in self.store.chats_for_customer(customer_id)]

    def _project(self, chat, backfill_customer=False):
        """Fill missing display snapshots and recompute order_number."""
        chat = dict(chat)
        order_details = chat.get("order_details")
        if not order_details:
            order = self.store.get_order(chat["order_id"])
            order_details = {"id": order["id"], "total_amount": order.get("total_amount"), "status": order.get("status")} if order \
                else {"total_amount": 0, "status": "unknown"}
        chat["order_details"] = {**order_details, "order_number": order_number(chat["order_id"])}

        if backfill_customer:
            details = chat.get("customer_details")
            if not details or not details.get("email"):
                chat["customer_details"] = self._customer_details(chat["customer_id"]) or {
                    "name": "Unknown Customer",
                    "email": "No email provided",
                    "phone": "No phone provided",
                }
        return chat
