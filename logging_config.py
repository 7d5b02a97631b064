"""
JSON logging for the support chat service.

Every module logs through a child of the ``srms.chat`` logger, so the level
and the handler are set in one place. create_app calls configure_logging
with its config; testing apps also propagate to the root logger so pytest's
caplog sees the records.
"""

import logging

from pythonjsonlogger import jsonlogger

ROOT_LOGGER = "srms.chat"
SERVICE = "srms-support-chat"


class ChatJsonFormatter(jsonlogger.JsonFormatter):
    """Tags every line with the service name."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["service"] = SERVICE


def _root_logger() -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(ChatJsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Module logger; context goes into ``extra=`` (chat_id, order_id, sid, port)."""
    _root_logger()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def configure_logging(app) -> logging.Logger:
    logger = _root_logger()
    logger.setLevel(str(app.config["LOG_LEVEL"]).upper())
    logger.propagate = bool(app.config.get("TESTING"))
    return logger
