"""Typing indicators: rebroadcast only, nothing is stored or acknowledged."""

from rooms import chat_room


class TypingRelay:
    def __init__(self, rooms):
        self.rooms = rooms

    def set_typing(self, chat_id, is_typing, identity, sid=None):
        self.rooms.broadcast(
            chat_room(chat_id),
            "chat:typing",
            {
                "chat_id": chat_id,
                "user_id": identity.user_id,
                "is_typing": bool(is_typing),
                "user_type": "admin" if identity.is_admin else "customer",
            },
            skip_sid=sid,
        )
