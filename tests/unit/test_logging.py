from __future__ import annotations

import io
import json
import logging

from linear_github_sync.bridge.logging import REDACTED, JsonFormatter, configure_logging


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="linear_github_sync.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Linear context fetched",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields() -> None:
    payload = json.loads(JsonFormatter().format(_record(team_count=3)))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "linear_github_sync.test"
    assert payload["message"] == "Linear context fetched"
    assert payload["extra"] == {"team_count": 3}


def test_json_formatter_masks_credentials() -> None:
    payload = json.loads(
        JsonFormatter().format(_record(access_token="gho_x", webhook_secret="s", repo="a/b"))
    )

    assert payload["extra"] == {"access_token": REDACTED, "webhook_secret": REDACTED, "repo": "a/b"}


def test_configure_logging_replaces_handlers_and_quiets_clients() -> None:
    stream = io.StringIO()

    configure_logging("debug", stream=stream)
    logging.getLogger("linear_github_sync.test").debug("Repos listed", extra={"count": 2})

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert root.level == logging.DEBUG
    assert logging.getLogger("urllib3").level == logging.INFO
    payload = json.loads(stream.getvalue().strip())
    assert payload["message"] == "Repos listed"
    assert payload["extra"] == {"count": 2}
