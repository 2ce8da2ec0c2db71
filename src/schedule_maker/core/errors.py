# src/schedule_maker/core/errors.py

from __future__ import annotations

"""
Error taxonomy.

- ValidationError: rejected input, raised before the store is touched.
- RemoteError and subclasses: raised only by RemoteBackend implementations.
  The sync engine logs and drops them; local state is left as-is.
"""


class ValidationError(ValueError):
    """Invalid schedule/task/settings input."""


class RemoteError(RuntimeError):
    """Base class for failures reported by a remote backend."""


class NotAuthenticatedError(RemoteError):
    """Owner-scoped call made without an authenticated owner."""


class OwnershipError(RemoteError):
    """The schedule exists but belongs to somebody else."""


class NotFoundError(RemoteError):
    """No schedule (or no public schedule) matches the given id/token."""


class NetworkError(RemoteError):
    """Transport or availability failure."""
