"""
Exception types raised across lumen.

Every failure of an invocation is one of these; the CLI renders them as a
single error line and exits non-zero.
"""

from typing import Optional


class LumenError(Exception):
    """Base class for all lumen errors."""


class InvalidArguments(LumenError):
    """Contradictory or insufficient command input."""


class ProviderConfigError(LumenError):
    """Missing credential or unusable model override for a provider."""


class NetworkError(LumenError):
    """Transport-level failure talking to a provider."""


class GitEntityError(LumenError):
    """Commit not found, or git could not produce the requested diff."""


class ProviderProtocolError(LumenError):
    """Non-2xx response, error payload or malformed stream from a provider."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.message = message
        self.status = status
        super().__init__(message)

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"[{self.status}] {self.message}"
