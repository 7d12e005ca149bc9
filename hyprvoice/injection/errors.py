"""Injection error types for hyprvoice."""

from __future__ import annotations


class InjectionError(Exception):
    """Raised when text could not be delivered.

    Attributes:
        failures: (backend, reason) pairs for each backend that was tried.
    """

    def __init__(self, message: str, failures: list[tuple[str, str]] | None = None) -> None:
        self.failures = failures or []
        if self.failures:
            detail = "; ".join(f"{name}: {reason}" for name, reason in self.failures)
            message = f"{message} ({detail})"
        super().__init__(message)


class BackendUnavailableError(InjectionError):
    """Raised when a backend cannot run in this session."""


class CommandTimeoutError(InjectionError):
    """Raised when an external command exceeds its deadline."""


class InjectionCancelledError(InjectionError):
    """Raised when the caller cancelled an injection in progress."""


class ClipboardError(InjectionError):
    """Raised when the clipboard cannot be read or written in time."""
