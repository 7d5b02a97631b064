"""
Project: Smart Restaurant Management System (SRMS)
School: University of Maryland Global Campus (UMGC)
Dept: Software Development and Security – Capstone Project
Authors: Beby Alexis, Kevin Wong, David White Jr
Date: September–October 2025

Description:
Support chat service entry point. Initializes Flask, the record store and
Socket.IO, wires the chat engine to the realtime handlers, and exposes the
health and socket port discovery endpoints.
"""

from flask import Flask, jsonify
from flask_socketio import SocketIO

from bootstrap import PortNegotiator
from chat_engine import ChatEngine
from chat_events import register_chat_handlers
from config import Config
from errors import ChatError, to_ack
from identity import ConnectionRegistry
from logging_config import configure_logging
from models import db
from rooms import RoomRouter
from store import MemoryRecordStore, SqlRecordStore
from support_api import bp as support_bp
from typing_relay import TypingRelay

# Create SocketIO once (no app yet), then bind inside factory
socketio = SocketIO()


def _build_store(app):
    if app.config["RECORD_STORE"] == "memory":
        return MemoryRecordStore()
    return SqlRecordStore(db)


def create_app(testing: bool = False):
    app = Flask(__name__)
    app.config.from_object(Config)

    if testing:
        app.config["TESTING"] = True
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///:memory:"
        app.config["SOCKETIO_ASYNC_MODE"] = "threading"

    configure_logging(app)
    db.init_app(app)
    socketio.init_app(
        app,
        async_mode=app.config["SOCKETIO_ASYNC_MODE"],
        cors_allowed_origins=app.config["CORS_ALLOWED_ORIGINS"],
    )

    # --------- realtime wiring ---------
    store = _build_store(app)
    rooms = RoomRouter(socketio)
    connections = ConnectionRegistry()
    engine = ChatEngine(store, rooms, admin_limit=app.config["ADMIN_CHAT_LIMIT"])
    negotiator = PortNegotiator(app.config["SOCKET_PORTS"], app.config["PORT"], host=app.config["HOST"])
    register_chat_handlers(socketio, engine, rooms, connections, TypingRelay(rooms))

    app.extensions["chat_store"] = store
    app.extensions["chat_engine"] = engine
    app.extensions["chat_rooms"] = rooms
    app.extensions["chat_connections"] = connections
    app.extensions["port_negotiator"] = negotiator

    @app.errorhandler(ChatError)
    def chat_error(exc):
        return jsonify({"error": to_ack(exc)}), exc.status_code

    # ---------- SUPPORT CHAT ----------
    app.register_blueprint(support_bp)

    # ---------- SOCKET PORT ----------
    @app.get("/api/socket-port")
    def socket_port():
        return jsonify({"port": negotiator.active_port})

    # ---------- HEALTH ----------
    @app.get("/api/health")
    def health():
        return jsonify({"status": "ok"})

    return app


if __name__ == "__main__":
    # Runs the eventlet server with port negotiation
    from bootstrap import main

    main()
