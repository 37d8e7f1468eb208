"""Shared label conventions for both sides of the bridge.

Linear issues tagged "Public" are mirrored to GitHub; GitHub issues that came
from (or go to) Linear carry the "linear" label. Both labels are created on
demand if the workspace or repository doesn't have them yet.

Workflow state names are matched exactly as Linear ships them by default.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from linear_github_sync.bridge.constants import LINEAR


@dataclass(frozen=True, slots=True)
class LabelSpec:
    name: str
    color: str
    description: str


LABEL_PUBLIC = "Public"

STATE_CANCELED = "Canceled"
STATE_DONE = "Done"
STATE_TODO = "Todo"


LINEAR_PUBLIC_LABEL = LabelSpec(
    name=LABEL_PUBLIC,
    color="#2DA54E",
    description="Issues with this label are mirrored to GitHub",
)

GITHUB_LINEAR_LABEL = LabelSpec(
    name=LINEAR.github_label,
    color="5e6ad2",
    description="Synced with Linear",
)


class _Named(Protocol):
    @property
    def id(self) -> str: ...

    @property
    def name(self) -> str: ...


def find_id_by_name(nodes: Iterable[_Named], name: str) -> str | None:
    """Return the id of the first label/state whose name matches exactly."""

    for node in nodes:
        if node.name == name:
            return node.id
    return None
