"""
Project: Smart Restaurant Management System (SRMS)
School: UMGC – Software Development and Security
Authors: Beby Alexis, Kevin Wong, David White Jr
Date: October 2025

Description:
Socket.IO event handlers for live support chat. Commands that take an
acknowledgement answer with an (error, result) pair: exactly one slot is
filled, the error slot as {"code", "message"}.
"""

import functools

from flask import request

from errors import ChatError, InvalidPayload, NotRegisteredCustomer, Unauthorized, require, to_ack
from identity import resolve_identity
from logging_config import get_logger
from rooms import ADMIN_ROOM, chat_room, order_room

logger = get_logger(__name__)


def _field(data, *names):
    """Read a key from a dict payload (first matching alias) or take a bare value."""
    if isinstance(data, dict):
        for name in names:
            if data.get(name) is not None:
                return data[name]
        return None
    return data


def _object(data, command):
    if not isinstance(data, dict):
        raise InvalidPayload(f"{command} expects an object payload")
    return data


def acknowledged(handler):
    @functools.wraps(handler)
    def wrapper(*args):
        try:
            return None, handler(*args)
        except ChatError as exc:
            logger.info("Chat command rejected", extra={"sid": request.sid, "code": exc.code, "error": str(exc)})
            return to_ack(exc), None
    return wrapper


def register_chat_handlers(socketio, engine, rooms, connections, typing):

    def _author():
        identity = connections.get(request.sid)
        if identity.anonymous:
            raise Unauthorized("Anonymous connections cannot change chats")
        return identity

    # ---------- connection ----------
    @socketio.on("connect")
    def on_connect(auth=None):
        identity = resolve_identity(auth)
        connections.bind(request.sid, identity)
        if identity.is_admin:
            rooms.join(request.sid, ADMIN_ROOM)
        logger.info(
            "Client connected",
            extra={"sid": request.sid, "user_id": identity.user_id, "active_connections": len(connections)},
        )

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        connections.forget(request.sid)
        rooms.drop(request.sid)
        logger.info(
            "Client disconnected",
            extra={"sid": request.sid, "reason": str(reason) if reason else None, "active_connections": len(connections)},
        )

    @socketio.on_error_default
    def on_error(exc):
        event = (getattr(request, "event", None) or {}).get("message")
        logger.exception("Socket handler failed", extra={"sid": request.sid, "event": event})
        return {"code": "InternalError", "message": "Internal server error"}, None

    # ---------- rooms ----------
    @socketio.on("chat:join")
    def join_chat(chat_id=None):
        chat_id = _field(chat_id, "chat_id", "chatId")
        if chat_id:
            rooms.join(request.sid, chat_room(chat_id))

    @socketio.on("chat:leave")
    def leave_chat(chat_id=None):
        chat_id = _field(chat_id, "chat_id", "chatId")
        if chat_id:
            rooms.leave(request.sid, chat_room(chat_id))

    @socketio.on("join:orders")
    def join_orders(order_id=None):
        if order_id:
            rooms.join(request.sid, order_room(order_id))

    @socketio.on("leave:orders")
    def leave_orders(order_id=None):
        if order_id:
            rooms.leave(request.sid, order_room(order_id))

    # ---------- lifecycle ----------
    @socketio.on("chat:start")
    @acknowledged
    def start_chat(data=None):
        _object(data, "chat:start")
        order_id = require(_field(data, "order_id", "orderId"), "order_id")
        try:
            return engine.start(
                order_id,
                _field(data, "issue"),
                _field(data, "category"),
                requester_sid=request.sid,
            )
        except NotRegisteredCustomer as exc:
            rooms.send(request.sid, "chat:error", {"message": str(exc)})
            raise

    @socketio.on("chat:send")
    @acknowledged
    def send_message(data=None):
        identity = _author()
        _object(data, "chat:send")
        chat_id = require(_field(data, "chat_id", "chatId"), "chat_id")
        content = require(_field(data, "content"), "content")
        claimed = _field(data, "sender_id", "senderId")
        if claimed is not None and str(claimed) != identity.user_id:
            raise Unauthorized("sender_id does not match the connection identity")
        return engine.send(chat_id, content, identity.user_id)

    @socketio.on("chat:markRead")
    @acknowledged
    def mark_read(chat_id=None):
        identity = _author()
        chat_id = require(_field(chat_id, "chat_id", "chatId"), "chat_id")
        engine.mark_read(chat_id, identity.user_id)
        return {"success": True}

    @socketio.on("chat:resolve")
    @acknowledged
    def resolve_chat(chat_id=None):
        identity = _author()
        chat_id = require(_field(chat_id, "chat_id", "chatId"), "chat_id")
        engine.resolve(chat_id, resolved_by=identity.user_id)
        return {"success": True}

    @socketio.on("chat:getByOrder")
    @acknowledged
    def get_by_order(order_id=None):
        order_id = require(_field(order_id, "order_id", "orderId"), "order_id")
        return engine.get_by_order(order_id)

    @socketio.on("admin:getChats")
    @acknowledged
    def admin_get_chats(*_):
        if not connections.get(request.sid).is_admin:
            raise Unauthorized("Admin access required")
        return engine.list_for_admin()

    # ---------- presence ----------
    @socketio.on("chat:typing")
    def on_typing(data=None):
        chat_id = _field(data, "chat_id", "chatId")
        if not chat_id:
            return
        is_typing = _field(data, "is_typing", "isTyping")
        typing.set_typing(chat_id, is_typing, connections.get(request.sid), request.sid)
