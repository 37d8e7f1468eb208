"""Connection flow: OAuth, workspace metadata, webhooks and context persistence."""
