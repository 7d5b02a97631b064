"""
Project: Smart Restaurant Management System (SRMS)
School: UMGC – Software Development and Security
Authors: Beby Alexis, Kevin Wong, David White Jr
Date: October 2025

Description:
Server startup. The primary listener serves HTTP and Socket.IO. After it is
up, a dedicated realtime listener is negotiated on the first free candidate
port; if none binds, realtime traffic stays on the primary listener. The port
in use is published at GET /api/socket-port.
"""

import threading

import eventlet
import eventlet.wsgi

from logging_config import get_logger

logger = get_logger(__name__)


def default_binder(host, port):
    return eventlet.listen((host, port), reuse_port=False)


class PortNegotiator:
    """Best-effort, run-once selection of the dedicated realtime port."""

    def __init__(self, candidates, primary_port, host="0.0.0.0", binder=None):
        self.candidates = list(candidates)
        self.primary_port = primary_port
        self.host = host
        self.binder = binder or default_binder
        self.socket = None
        self.port = None
        self._done = False
        self._lock = threading.Lock()

    @property
    def dedicated(self) -> bool:
        return self.port is not None

    @property
    def active_port(self) -> int:
        return self.port if self.port is not None else self.primary_port

    def negotiate(self) -> int:
        with self._lock:
            if self._done:
                return self.active_port
            self._done = True

            for port in self.candidates:
                if port == self.primary_port:
                    continue
                try:
                    sock = self.binder(self.host, port)
                except OSError as exc:
                    logger.warning("Failed to start realtime listener", extra={"port": port, "error": str(exc)})
                    continue
                self.socket, self.port = sock, port
                logger.info("Realtime listener bound", extra={"port": port})
                return port

            logger.warning("No candidate port available, sharing the primary listener", extra={"port": self.primary_port})
            return self.primary_port


def serve(app):
    host, port = app.config["HOST"], app.config["PORT"]
    primary = eventlet.listen((host, port))
    logger.info("HTTP server listening", extra={"port": port})

    negotiator = app.extensions["port_negotiator"]
    negotiator.negotiate()
    if negotiator.dedicated:
        eventlet.spawn(eventlet.wsgi.server, negotiator.socket, app, log_output=False)

    eventlet.wsgi.server(primary, app, log_output=False)


def main():
    eventlet.monkey_patch()

    from app import create_app
    from models import db

    app = create_app()
    with app.app_context():
        db.create_all()
    serve(app)


if __name__ == "__main__":
    main()
