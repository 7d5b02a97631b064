"""Room routing on top of Flask-SocketIO.

Socket.IO keeps the authoritative room membership; the router mirrors it in
process memory so the engine and tests can ask who is in a room. Nothing
survives a reconnect: clients re-join their rooms after every connection.
"""

import threading
from typing import Dict, Optional, Set

ADMIN_ROOM = "admin"


def chat_room(chat_id) -> str:
    return f"chat:{chat_id}"


def order_room(order_id) -> str:
    return f"order:{order_id}"


class RoomRouter:
    def __init__(self, socketio, namespace: str = "/"):
        self.socketio = socketio
        self.namespace = namespace
        self._rooms: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()

    def join(self, sid: str, room: str) -> None:
        with self._lock:
            members = self._rooms.setdefault(room, set())
            if sid in members:
                return
            members.add(sid)
        self.socketio.server.enter_room(sid, room, namespace=self.namespace)

    def leave(self, sid: str, room: str) -> None:
        with self._lock:
            members = self._rooms.get(room)
            if not members or sid not in members:
                return
            members.discard(sid)
            if not members:
                self._rooms.pop(room, None)
        self.socketio.server.leave_room(sid, room, namespace=self.namespace)

    def drop(self, sid: str) -> None:
        """Forget every membership of a disconnected sid."""
        with self._lock:
            for room in [r for r, members in self._rooms.items() if sid in members]:
                self._rooms[room].discard(sid)
                if not self._rooms[room]:
                    self._rooms.pop(room, None)

    def members(self, room: str) -> Set[str]:
        with self._lock:
            return set(self._rooms.get(room, ()))

    def rooms_of(self, sid: str) -> Set[str]:
        with self._lock:
            return {r for r, members in self._rooms.items() if sid in members}

    def broadcast(self, room: str, event: str, payload: dict, skip_sid: Optional[str] = None) -> None:
        # Delivered to whoever is in the room right now; late joiners get nothing
        self.socketio.emit(event, payload, to=room, skip_sid=skip_sid, namespace=self.namespace)

    def send(self, sid: str, event: str, payload: dict) -> None:
        self.socketio.emit(event, payload, to=sid, namespace=self.namespace)
