from __future__ import annotations


class AppbootError(Exception):
    """Base exception for this project."""


class ConfigError(AppbootError):
    """Raised when configuration is invalid or incomplete."""

    def __init__(self, message: str, *, path: str | None = None):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path


class RootNotFoundError(AppbootError):
    """Raised when the application directory cannot be determined."""


class MetadataError(AppbootError):
    """Raised when the application descriptor is missing or incomplete."""

    def __init__(self, message: str, *, path: str | None = None):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path


class LifecycleError(AppbootError):
    """Raised on a lifecycle transition that is not allowed."""


class UnitLoadError(AppbootError):
    """Raised when a discovered unit cannot be imported or has no init hook."""

    def __init__(self, message: str, *, location: str | None = None):
        super().__init__(f"{location}: {message}" if location else message)
        self.location = location
