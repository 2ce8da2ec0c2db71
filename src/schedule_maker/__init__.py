"""
Weekly schedule maker.

Subpackages:
- core: data model, time grid, palette, ports
- store: local schedule store, preferences, JSON transfer
- sync: sync engine and remote backends
- cli / connectors: console entrypoint and REPL
"""
