"""Exceptions raised by the KKM Server client."""

from __future__ import annotations

from typing import Optional


class KkmError(RuntimeError):
    """Base class for every failure surfaced by the client."""

    def __init__(self, message: str, *, command_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.command_id = command_id


class TransportUnavailableError(KkmError):
    """Raised when the selected transport cannot be reached at all."""


class TransportError(KkmError):
    """Raised on a non-2xx HTTP reply or a failure reported by the add-in host."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        command_id: Optional[str] = None,
    ) -> None:
        super().__init__(message, command_id=command_id)
        self.status_code = status_code


class NetworkError(KkmError):
    """Raised on connection-level failures (refused, DNS, reset)."""


class RequestTimeoutError(KkmError):
    """Raised when a single call exceeds its deadline."""

    def __init__(
        self, message: str, *, timeout_ms: int, command_id: Optional[str] = None
    ) -> None:
        super().__init__(message, command_id=command_id)
        self.timeout_ms = timeout_ms


class ProtocolError(KkmError):
    """Raised when the server breaks the status/identifier contract."""


class CommandNotFoundError(KkmError):
    """Raised when the server no longer knows the polled command id."""


class PollingTimeoutError(KkmError):
    """Raised when status polling exhausts its attempts."""

    def __init__(
        self,
        message: str,
        *,
        attempts: int,
        elapsed_ms: int,
        command_id: Optional[str] = None,
    ) -> None:
        super().__init__(message, command_id=command_id)
        self.attempts = attempts
        self.elapsed_ms = elapsed_ms
