"""Small shared helpers: formatting, footers, webhook URLs and log strings."""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
import uuid
from collections.abc import Mapping
from typing import Any, Literal
from urllib.parse import urlparse

from linear_github_sync.bridge.constants import GENERAL, GITHUB

logger = logging.getLogger(__name__)

_LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1"}

# Tried in order; the first one installed wins.
_CLIPBOARD_COMMANDS: tuple[tuple[str, ...], ...] = (
    ("pbcopy",),
    ("wl-copy",),
    ("xclip", "-selection", "clipboard"),
    ("xsel", "--clipboard", "--input"),
    ("clip",),
)

SkipEvent = Literal["issue", "edit", "comment", "state change", "label"]


class ClipboardUnavailable(RuntimeError):
    """Raised when no clipboard tool is installed."""


def is_dev(environment: str) -> bool:
    return environment.strip().lower() == "development"


def get_webhook_url(app_url: str) -> str:
    """Where both services should deliver webhooks for this deployment.

    Providers refuse to register localhost callbacks, so local runs get a
    placeholder URL instead.
    """

    if "://" not in app_url:
        app_url = f"https://{app_url}"
    parsed = urlparse(app_url)
    if (parsed.hostname or "") in _LOCAL_HOSTS:
        return "https://example.com"
    return f"{parsed.scheme}://{parsed.netloc}/api"


def copy_to_clipboard(text: str) -> str:
    """Copy ``text`` using the platform clipboard tool; return the tool name."""

    for command in _CLIPBOARD_COMMANDS:
        if shutil.which(command[0]) is None:
            continue
        subprocess.run(list(command), input=text.encode("utf-8"), check=True, timeout=5)
        logger.debug("Copied text to clipboard", extra={"tool": command[0]})
        return command[0]
    raise ClipboardUnavailable("Cannot copy to clipboard: no clipboard tool found")


def format_json(body: Any) -> str:
    return json.dumps(body, indent=4)


def clear_url_params(url: str) -> str:
    return url.split("?", 1)[0]


def generate_linear_uuid() -> str:
    """A uuid4 whose tail marks it as created by the sync (not by a person)."""

    return f"{str(uuid.uuid4())[:28]}{GITHUB.uuid_suffix}"


def get_github_footer(user_name: str) -> str:
    # Only keep the part before "@" so usernames that are emails aren't exposed.
    sanitized = user_name.split("@")[0]
    return f"\n\n<!-- From {sanitized} on Linear -->"


def get_sync_footer() -> str:
    return f"\n\n> From [{GENERAL.app_name}]({GENERAL.app_url})"


def is_issue(headers: Mapping[str, str]) -> bool:
    """True when a GitHub webhook delivery is an ``issues`` event."""

    for key, value in headers.items():
        if key.lower() == "x-github-event":
            return value == "issues"
    return False


def skip_reason(
    event: SkipEvent,
    issue_number: int | str,
    caused_by_sync: bool = False,
) -> str:
    why = "caused by sync" if caused_by_sync else "not synced"
    return f"Skipping over {event} for issue #{issue_number} as it is {why}."
