"""Transport contract shared by every way of reaching KKM Server."""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional, Protocol

from .. import constants
from ..models import KkmCommand, KkmResponse


class CommandTransport(Protocol):
    """Sends one command and returns the server's immediate response."""

    async def execute(self, command: KkmCommand, timeout_ms: int) -> KkmResponse:
        ...

    async def aclose(self) -> None:
        ...


def effective_timeout_ms(
    command_timeout: Optional[int],
    caller_timeout_ms: int = constants.DEFAULT_REQUEST_TIMEOUT_MS,
) -> int:
    """Return the request deadline for a command.

    A command that asks the device for more than a minute (``Timeout`` is in
    seconds) gets that long plus a margin, never less than the caller's own
    budget.

    >>> effective_timeout_ms(90)
    110000
    >>> effective_timeout_ms(None, 5000)
    5000
    """

    if (
        command_timeout is not None
        and command_timeout > constants.COMMAND_TIMEOUT_THRESHOLD_SECONDS
    ):
        extended = (command_timeout + constants.COMMAND_TIMEOUT_MARGIN_SECONDS) * 1000
        return max(caller_timeout_ms, extended)
    return caller_timeout_ms


def dump_payload(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)
