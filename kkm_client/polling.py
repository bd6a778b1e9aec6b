"""Completion tracking for commands the device runs asynchronously.

KKM Server answers a long-running command (shift open/close, card payment)
with ``Run`` or ``NotRun`` and keeps working on it after the HTTP exchange
ends. The engine then queries ``GetRezult`` with the same ``IdCommand`` until
the command finishes, the server forgets it, or the attempt budget runs out.
Only the query is ever repeated; the original command is never re-sent.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from .errors import CommandNotFoundError, PollingTimeoutError, ProtocolError
from .models import GetResultCommand, KkmCommand, KkmResponse
from .status import KkmStatus, is_pending, is_terminal

LOGGER = logging.getLogger(__name__)

ExecuteFn = Callable[[KkmCommand], Awaitable[KkmResponse]]
SleepFn = Callable[[float], Awaitable[object]]


@dataclass(slots=True)
class PollingSession:
    command_id: str
    max_attempts: int
    interval_ms: int
    started_at: float
    attempts: int = 0

    def elapsed_ms(self, now: float) -> int:
        return int((now - self.started_at) * 1000)


class PollingEngine:
    """Drives one command from its first response to a final outcome."""

    def __init__(
        self,
        execute: ExecuteFn,
        *,
        sleep: SleepFn = asyncio.sleep,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._execute = execute
        self._sleep = sleep
        self._clock = clock

    async def resolve(
        self,
        command: KkmCommand,
        initial: KkmResponse,
        *,
        max_attempts: int,
        interval_ms: int,
    ) -> KkmResponse:
        """Return the final response for ``command`` given its first response.

        Raises:
            ProtocolError: A pending response carried no ``IdCommand``.
            CommandNotFoundError: The server reported the id as unknown.
            PollingTimeoutError: ``max_attempts`` queries all came back pending.
        """

        if is_terminal(initial.status):
            return initial

        if not is_pending(initial.status):
            # Unknown-but-final status values are handed back untouched.
            return initial

        if not initial.id_command:
            raise ProtocolError(
                f"Missing identifier for asynchronous command {command.name}",
                command_id=command.id_command,
            )

        session = PollingSession(
            command_id=initial.id_command,
            max_attempts=max_attempts,
            interval_ms=interval_ms,
            started_at=self._now(),
        )
        LOGGER.info(
            "%s is running asynchronously, polling result (IdCommand=%s)",
            command.name,
            session.command_id,
        )
        return await self._poll(command, session)

    async def _poll(self, command: KkmCommand, session: PollingSession) -> KkmResponse:
        query = GetResultCommand(
            id_command=session.command_id, result_type=command.response_type()
        )

        while session.attempts < session.max_attempts:
            await self._sleep(session.interval_ms / 1000)
            session.attempts += 1
            LOGGER.debug(
                "Attempt %d/%d: checking status of %s",
                session.attempts,
                session.max_attempts,
                session.command_id,
            )

            result = await self._execute(query)

            if is_terminal(result.status):
                LOGGER.info(
                    "%s finished with status %s after %d poll(s)",
                    command.name,
                    result.status_text,
                    session.attempts,
                )
                return result

            if result.status == KkmStatus.NOT_FOUND:
                LOGGER.warning(
                    "KKM Server lost track of %s (IdCommand=%s)",
                    command.name,
                    session.command_id,
                )
                raise CommandNotFoundError(
                    f"Command {session.command_id} not found on the server",
                    command_id=session.command_id,
                )

        elapsed_ms = session.elapsed_ms(self._now())
        LOGGER.warning(
            "Gave up waiting for %s after %d attempts (%dms)",
            command.name,
            session.attempts,
            elapsed_ms,
        )
        raise PollingTimeoutError(
            f"Timed out waiting for {command.name} to finish "
            f"({session.attempts} attempts)",
            attempts=session.attempts,
            elapsed_ms=elapsed_ms,
            command_id=session.command_id,
        )

    def _now(self) -> float:
        if self._clock is not None:
            return self._clock()
        return asyncio.get_running_loop().time()
