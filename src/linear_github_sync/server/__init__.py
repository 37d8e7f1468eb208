"""FastAPI server adapter for linear-github-sync.

Design intent:
- Keep OAuth and API logic in `linear_github_sync.bridge.*`
- Keep server-specific concerns (routing, CORS, HTTP error mapping) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from linear_github_sync.server.app import create_app
