"""Remote sync: engine, backends and shared-link helpers."""
