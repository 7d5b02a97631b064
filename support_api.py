"""
Project: Smart Restaurant Management System (SRMS)
School: UMGC – Software Development and Security
Authors: Beby Alexis, Kevin Wong, David White Jr
Date: October 2025

Description:
HTTP routes for support chat, for clients that are not on the socket. Every
route goes through the same chat engine as the Socket.IO commands, so
connected rooms still receive the live events. Errors are rendered by the
ChatError handler registered in create_app.
"""

from flask import Blueprint, current_app, jsonify, request

from chat_engine import ADMIN
from errors import ChatNotFound, InvalidPayload, require
from models import ChatStatus

bp = Blueprint("support_api", __name__, url_prefix="/api/support-chat")


def _engine():
    return current_app.extensions["chat_engine"]


def _body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidPayload("Expected a JSON object body")
    return data


def _arg(data, *names):
    for name in names:
        if data.get(name) is not None:
            return data[name]
    return None


# ----- LIST -----
@bp.get("")
def list_chats():
    if request.args.get("role") == "admin":
        return jsonify(_engine().list_for_admin())
    customer_id = require(_arg(request.args, "customerId", "customer_id"), "customer_id")
    return jsonify(_engine().list_for_customer(customer_id))


# ----- START -----
@bp.post("")
def start_chat():
    data = _body()
    order_id = require(_arg(data, "order_id", "orderId"), "order_id")
    issue = require(_arg(data, "issue"), "issue")
    chat, created = _engine().open_chat(order_id, issue, _arg(data, "category"))
    return jsonify(chat), (201 if created else 200)


# ----- MESSAGES -----
@bp.post("/message")
def send_message():
    data = _body()
    chat_id = require(_arg(data, "chat_id", "chatId"), "chat_id")
    content = require(_arg(data, "content"), "content")
    sender_id = require(_arg(data, "sender_id", "senderId"), "sender_id")
    message = _engine().send(chat_id, content, str(sender_id))
    return jsonify({"message": message, "success": True}), 201


@bp.post("/read-messages")
def read_messages():
    data = _body()
    chat_id = require(_arg(data, "chat_id", "chatId"), "chat_id")
    user_id = require(_arg(data, "user_id", "userId"), "user_id")
    updated = _engine().mark_read(chat_id, str(user_id))
    return jsonify({"success": True, "updated": updated})


# ----- STATUS -----
@bp.put("/<chat_id>/status")
def update_status(chat_id):
    data = _body()
    status = require(_arg(data, "status"), "status")
    # resolution is the only transition a client can ask for
    if status != ChatStatus.resolved.value:
        raise InvalidPayload(f"Cannot change chat status to '{status}'")
    _engine().resolve(chat_id, resolved_by=_arg(data, "resolved_by", "resolvedBy") or ADMIN)
    return jsonify(_engine().get(chat_id))


# ----- READ -----
@bp.get("/<chat_id>")
def get_chat(chat_id):
    return jsonify(_engine().get(chat_id))


@bp.get("/order/<order_id>")
def chat_for_order(order_id):
    chat = _engine().get_by_order(order_id)
    if chat is None:
        raise ChatNotFound()
    return jsonify(chat)
