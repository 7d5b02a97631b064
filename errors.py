"""Support chat error taxonomy and helpers for acknowledgement payloads."""

from typing import Any, Dict


class ChatError(Exception):
    """Base class for errors reported back to the caller."""

    status_code = 400

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code

    @property
    def code(self) -> str:
        return type(self).__name__


class NotRegisteredCustomer(ChatError):
    """Raised when an order does not resolve to a registered customer."""

    status_code = 403

    def __init__(
        self,
        message: str = (
            "Chat support is only available for registered customers. "
            "Please create an account to access live chat support."
        ),
    ):
        super().__init__(message)


class ChatNotFound(ChatError):
    status_code = 404

    def __init__(self, message: str = "Chat not found"):
        super().__init__(message)


class OrderNotFound(ChatError):
    status_code = 404

    def __init__(self, message: str = "Order not found"):
        super().__init__(message)


class Unauthorized(ChatError):
    status_code = 403

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class InvalidPayload(ChatError):
    status_code = 422

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message)


class StoreError(ChatError):
    """Raised when the record store fails; the effect of the write is unknown."""

    status_code = 503

    def __init__(self, message: str = "Record store unavailable"):
        super().__init__(message)


def to_ack(error: ChatError) -> Dict[str, Any]:
    """Convert a ChatError into the error slot of an acknowledgement."""
    return {"code": error.code, "message": str(error)}


def require(value: Any, field: str) -> Any:
    """Raise InvalidPayload if value is missing or blank."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidPayload(f"{field} is required")
    return value
