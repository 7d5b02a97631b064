"""
Project: Smart Restaurant Management System (SRMS)
School: UMGC – Software Development and Security
Authors: Beby Alexis, Kevin Wong, David White Jr
Date: October 2025

Description:
Application configuration. Values are read from the environment with
development defaults and loaded into Flask via app.config.from_object(Config).
"""

import os


def _ports(raw):
    return [int(p) for p in raw.split(",") if p.strip()]


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-me")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///srms.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Primary HTTP listener; also carries Socket.IO as the fallback transport
    HOST = os.environ.get("HOST", "0.0.0.0")
    PORT = int(os.environ.get("PORT", "5000"))

    # Candidate ports for the dedicated realtime listener, tried in order
    SOCKET_PORTS = _ports(os.environ.get("SOCKET_PORTS", "5000,5001,5002,5003,5004,5005"))
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "eventlet")
    CORS_ALLOWED_ORIGINS = os.environ.get("CORS_ALLOWED_ORIGINS", "*")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    ADMIN_CHAT_LIMIT = int(os.environ.get("ADMIN_CHAT_LIMIT", "100"))

    # "sql" or "memory"
    RECORD_STORE = os.environ.get("RECORD_STORE", "sql")
