"""Transport bridging to a host-provided KKM Server add-in."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Optional, Protocol

from .. import constants
from ..errors import (
    ProtocolError,
    RequestTimeoutError,
    TransportError,
    TransportUnavailableError,
)
from ..models import KkmCommand, KkmResponse
from .base import dump_payload, effective_timeout_ms

LOGGER = logging.getLogger(__name__)

SuccessCallback = Callable[[Dict[str, Any]], None]
ErrorCallback = Callable[[str], None]


class AddInHost(Protocol):
    """Callback-style API exposed by the add-in host.

    The host invokes exactly one of the callbacks, possibly from another
    thread and possibly before ``execute`` returns.
    """

    def execute(
        self, success: SuccessCallback, command: Dict[str, Any], error: ErrorCallback
    ) -> None:
        ...


class AddInTransport:
    """Wraps the add-in callbacks into the same awaitable contract as HTTP."""

    def __init__(self, host: Optional[AddInHost] = None) -> None:
        self._host = host

    def attach(self, host: Optional[AddInHost]) -> None:
        self._host = host

    def is_available(self) -> bool:
        return self._host is not None

    async def execute(
        self,
        command: KkmCommand,
        timeout_ms: int = constants.DEFAULT_REQUEST_TIMEOUT_MS,
    ) -> KkmResponse:
        host = self._host
        if host is None:
            raise TransportUnavailableError(
                "KKM Server add-in is not available", command_id=command.id_command
            )

        loop = asyncio.get_running_loop()
        future: asyncio.Future[Dict[str, Any]] = loop.create_future()

        def _resolve(result: Dict[str, Any]) -> None:
            if not future.done():
                future.set_result(result)

        def _reject(message: str) -> None:
            if not future.done():
                future.set_exception(
                    TransportError(
                        f"Add-in error: {message}", command_id=command.id_command
                    )
                )

        def on_success(result: Dict[str, Any]) -> None:
            loop.call_soon_threadsafe(_resolve, result)

        def on_error(message: str) -> None:
            loop.call_soon_threadsafe(_reject, str(message))

        payload = command.to_payload()
        deadline_ms = effective_timeout_ms(command.timeout, timeout_ms)
        LOGGER.debug("-> add-in %s\n%s", command.name, dump_payload(payload))

        try:
            host.execute(on_success, payload, on_error)
        except Exception as exc:
            raise TransportError(
                f"Add-in rejected {command.name}: {exc}", command_id=command.id_command
            ) from exc

        try:
            async with asyncio.timeout(deadline_ms / 1000):
                result = await future
        except asyncio.TimeoutError as exc:
            LOGGER.warning(
                "Add-in did not answer %s within %dms", command.name, deadline_ms
            )
            raise RequestTimeoutError(
                f"Command {command.name} timed out after {deadline_ms}ms",
                timeout_ms=deadline_ms,
                command_id=command.id_command,
            ) from exc

        if not isinstance(result, dict):
            raise ProtocolError(
                f"Add-in returned {type(result).__name__} instead of an object",
                command_id=command.id_command,
            )
        LOGGER.debug("<- add-in %s\n%s", command.name, dump_payload(result))
        return command.response_type().from_payload(result)

    async def aclose(self) -> None:
        return None
