"""Linear <-> GitHub sync bridge: OAuth, workspace metadata and webhook setup.

Provides:
- configuration loaded from `.env`
- structured logging
- Linear (GraphQL) and GitHub (REST) clients for the connection flow
- a small REST server for the OAuth token exchange
"""

__version__ = "0.1.0"

from linear_github_sync.bridge.config import SyncSettings

__all__ = ["__version__", "SyncSettings"]
