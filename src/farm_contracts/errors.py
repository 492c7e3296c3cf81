from __future__ import annotations

from typing import Any


class RemoteStoreError(Exception):
    """Raised when a read against the remote store fails."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.details = details


class StoreConnectionError(RemoteStoreError):
    """The store could not be reached or did not answer in time."""


class AuthorizationError(RemoteStoreError):
    """The session lacks the privilege to read the requested rows."""


class QueryError(RemoteStoreError):
    """The store rejected the composed query (bad column, join or filter)."""


class DataShapeError(RemoteStoreError):
    """The payload returned by the store does not match the read model."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path
