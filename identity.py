"""Connection identity: classify each Socket.IO handshake and remember it per sid."""

import threading
from dataclasses import dataclass

ANONYMOUS = "anonymous"
ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class Identity:
    user_id: str
    is_admin: bool = False

    @property
    def anonymous(self) -> bool:
        return self.user_id == ANONYMOUS


ANONYMOUS_IDENTITY = Identity(ANONYMOUS)


def resolve_identity(auth) -> Identity:
    """
    Build the logical identity for a connection from its handshake auth.

    Never rejects: a missing token yields the anonymous identity, which can
    read but cannot author messages. The optional ``user`` profile is only
    consulted for the admin role.
    """
    if not isinstance(auth, dict):
        return ANONYMOUS_IDENTITY
    token = auth.get("token")
    if not token:
        return ANONYMOUS_IDENTITY
    user = auth.get("user")
    is_admin = isinstance(user, dict) and user.get("role") == ADMIN_ROLE
    return Identity(str(token), is_admin)


class ConnectionRegistry:
    def __init__(self):
        self._identities = {}
        self._lock = threading.Lock()

    def bind(self, sid, identity):
        with self._lock:
            self._identities[sid] = identity

    def get(self, sid):
        with self._lock:
            return self._identities.get(sid, ANONYMOUS_IDENTITY)

    def forget(self, sid):
        with self._lock:
            self._identities.pop(sid, None)

    def __len__(self):
        with self._lock:
            return len(self._identities)
