"""Command status codes reported by KKM Server."""

from __future__ import annotations

from enum import IntEnum


class KkmStatus(IntEnum):
    OK = 0
    RUN = 1
    ERROR = 2
    NOT_FOUND = 3
    NOT_RUN = 4


_STATUS_TEXT = {
    KkmStatus.OK: "done, success",
    KkmStatus.RUN: "in progress",
    KkmStatus.ERROR: "done, failed",
    KkmStatus.NOT_FOUND: "unknown command id",
    KkmStatus.NOT_RUN: "queued, not yet started",
}

TERMINAL_STATUSES = frozenset({KkmStatus.OK, KkmStatus.ERROR})
PENDING_STATUSES = frozenset({KkmStatus.RUN, KkmStatus.NOT_RUN})


def status_text(status: int) -> str:
    """Return a human readable description of a status code."""

    try:
        return _STATUS_TEXT[KkmStatus(status)]
    except ValueError:
        return f"unknown status: {status}"


def is_terminal(status: int) -> bool:
    return status in TERMINAL_STATUSES


def is_pending(status: int) -> bool:
    return status in PENDING_STATUSES
