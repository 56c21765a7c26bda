from __future__ import annotations

import json
import logging

from signum_bot.core.logging import JsonFormatter


def test_json_formatter_includes_event_extras() -> None:
    record = logging.LogRecord(
        name="signum_bot.bot.listener",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="message_received",
        args=(),
        exc_info=None,
    )
    record.event = "message_received"
    record.chat_id = 42
    payload = json.loads(JsonFormatter().format(record))
    assert payload["msg"] == "message_received"
    assert payload["event"] == "message_received"
    assert payload["chat_id"] == 42
    assert payload["level"] == "INFO"
    assert "account" not in payload
