"""Local-first persistence: schedule store, preferences, import/export."""
