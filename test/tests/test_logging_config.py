import json
import logging

from conftest import ORDER_ID
from logging_config import ROOT_LOGGER, ChatJsonFormatter, get_logger


def test_module_loggers_share_the_service_logger():
    logger = get_logger("chat_engine")
    assert logger.name == f"{ROOT_LOGGER}.chat_engine"
    assert len(logging.getLogger(ROOT_LOGGER).handlers) == 1


def test_testing_app_propagates_at_configured_level(app):
    root = logging.getLogger(ROOT_LOGGER)
    assert root.propagate is True
    assert root.level == logging.getLevelName(app.config["LOG_LEVEL"].upper())


def test_chat_creation_is_logged_with_context(app, caplog):
    engine = app.extensions["chat_engine"]
    with caplog.at_level(logging.INFO, logger=ROOT_LOGGER), app.app_context():
        chat = engine.start(ORDER_ID, "late delivery", None)

    [record] = [r for r in caplog.records if r.getMessage() == "Chat created"]
    assert record.name == f"{ROOT_LOGGER}.chat_engine"
    assert (record.chat_id, record.order_id) == (chat["id"], ORDER_ID)


def test_json_lines_carry_service_name():
    record = logging.LogRecord("srms.chat.rooms", logging.INFO, __file__, 1, "joined", None, None)
    record.sid = "s1"
    line = json.loads(ChatJsonFormatter("%(levelname)s %(name)s %(message)s").format(record))
    assert line["service"] == "srms-support-chat"
    assert (line["levelname"], line["message"], line["sid"]) == ("INFO", "joined", "s1")
