"""Unit tests for shared helpers."""

from __future__ import annotations

import json
from unittest.mock import Mock

import pytest

from linear_github_sync.bridge import helpers
from linear_github_sync.bridge.helpers import (
    ClipboardUnavailable,
    clear_url_params,
    copy_to_clipboard,
    format_json,
    generate_linear_uuid,
    get_github_footer,
    get_sync_footer,
    get_webhook_url,
    is_dev,
    is_issue,
    skip_reason,
)


@pytest.mark.parametrize(
    ("app_url", "expected"),
    [
        ("http://localhost:3000", "https://example.com"),
        ("http://127.0.0.1:8000/some/page", "https://example.com"),
        ("https://synclinear.com", "https://synclinear.com/api"),
        ("synclinear.com", "https://synclinear.com/api"),
        ("localhost:3000", "https://example.com"),
        ("https://sync.example.org:8443/settings?x=1", "https://sync.example.org:8443/api"),
    ],
)
def test_get_webhook_url(app_url: str, expected: str) -> None:
    assert get_webhook_url(app_url) == expected


def test_is_dev() -> None:
    assert is_dev("development") is True
    assert is_dev(" Development ") is True
    assert is_dev("production") is False


def test_format_json_uses_four_space_indent() -> None:
    text = format_json({"a": [1]})

    assert text == '{\n    "a": [\n        1\n    ]\n}'
    assert json.loads(text) == {"a": [1]}


def test_clear_url_params() -> None:
    assert clear_url_params("https://x.org/a?code=1&state=2") == "https://x.org/a"
    assert clear_url_params("https://x.org/a") == "https://x.org/a"


def test_generate_linear_uuid_has_sync_suffix() -> None:
    value = generate_linear_uuid()

    assert len(value) == 36
    assert value.endswith("decafbad")
    assert generate_linear_uuid() != value


def test_github_footer_hides_email_domain() -> None:
    assert get_github_footer("jane@example.com") == "\n\n<!-- From jane on Linear -->"
    assert get_github_footer("jane") == "\n\n<!-- From jane on Linear -->"


def test_sync_footer() -> None:
    assert get_sync_footer() == "\n\n> From [Linear-GitHub Sync](https://synclinear.com)"


def test_is_issue_reads_event_header_case_insensitively() -> None:
    assert is_issue({"X-GitHub-Event": "issues"}) is True
    assert is_issue({"x-github-event": "issue_comment"}) is False
    assert is_issue({}) is False


def test_skip_reason() -> None:
    assert skip_reason("comment", 12) == "Skipping over comment for issue #12 as it is not synced."
    assert (
        skip_reason("state change", "7", caused_by_sync=True)
        == "Skipping over state change for issue #7 as it is caused by sync."
    )


def test_copy_to_clipboard_uses_first_available_tool(monkeypatch: pytest.MonkeyPatch) -> None:
    available = {"xclip"}
    monkeypatch.setattr(
        helpers.shutil, "which", lambda name: f"/usr/bin/{name}" if name in available else None
    )
    run = Mock()
    monkeypatch.setattr(helpers.subprocess, "run", run)

    tool = copy_to_clipboard("hello")

    assert tool == "xclip"
    run.assert_called_once()
    assert run.call_args.args[0] == ["xclip", "-selection", "clipboard"]
    assert run.call_args.kwargs["input"] == b"hello"


def test_copy_to_clipboard_without_tools(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(helpers.shutil, "which", lambda _name: None)

    with pytest.raises(ClipboardUnavailable):
        copy_to_clipboard("hello")
