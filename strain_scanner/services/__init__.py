"""Business logic: strain catalog, per-browser state, moderation."""
