"""Data model, time/overlap engine, palette and ports."""
