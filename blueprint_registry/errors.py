"""Error taxonomy for registry sync runs.

Every error here is fatal to a run. Manifest resolution problems are the one
failure class that never surfaces as an exception (see ``github.manifests``).
"""

from __future__ import annotations

from pathlib import Path


class RegistryError(Exception):
    """Base exception for registry sync errors."""
    pass


class ConfigError(RegistryError):
    """Raised when required inputs are missing or invalid."""

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = list(missing or [])


class FetchError(RegistryError):
    """Raised when a remote lookup fails.

    ``status_code`` is ``None`` for network-level (transport) failures.
    """

    def __init__(
        self,
        message: str,
        url: str = "",
        status_code: int | None = None,
        body: str = "",
    ):
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.body = body

    @property
    def is_transport(self) -> bool:
        return self.status_code is None


class DecodeError(RegistryError):
    """Raised when the persisted catalog cannot be decoded."""

    def __init__(self, message: str, path: str | Path = ""):
        super().__init__(message)
        self.path = str(path)


class PersistError(RegistryError):
    """Raised when the catalog cannot be written."""

    def __init__(self, message: str, path: str | Path = ""):
        super().__init__(message)
        self.path = str(path)
