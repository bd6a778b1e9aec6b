"""High level client for KKM Server."""

from __future__ import annotations

import asyncio
import random
from typing import Optional

from .config import ConnectionMode, EmulatorConfig, KkmConfig, PollingConfig
from .connection import ConnectionProvider, IniConnectionStore
from .correlator import ensure_id
from .models import GetResultCommand, KkmCommand, KkmResponse
from .polling import PollingEngine, SleepFn
from .status import status_text
from .transports import (
    AddInHost,
    AddInTransport,
    CommandTransport,
    EmulatorTransport,
    HttpTransport,
    TransportSelector,
)


class KkmServerClient:
    """Issues commands to KKM Server and waits for their final outcome.

    Usage:
        async with KkmServerClient(ConnectionProvider()) as client:
            response = await client.execute_with_polling(OpenShiftCommand())
    """

    def __init__(
        self,
        provider: ConnectionProvider,
        *,
        http: Optional[CommandTransport] = None,
        addin: Optional[CommandTransport] = None,
        emulator: Optional[CommandTransport] = None,
        polling: Optional[PollingConfig] = None,
        emulator_fallback: bool = False,
        sleep: Optional[SleepFn] = None,
    ) -> None:
        self.provider = provider
        self.polling = polling or PollingConfig()
        self._addin = addin if addin is not None else AddInTransport()
        self._selector = TransportSelector(
            provider,
            http=http if http is not None else HttpTransport(provider.get),
            addin=self._addin,
            emulator=emulator if emulator is not None else EmulatorTransport(),
            emulator_fallback=emulator_fallback,
        )
        self._engine = PollingEngine(
            self.execute_command, sleep=sleep or asyncio.sleep
        )

    @classmethod
    def from_config(
        cls,
        config: KkmConfig,
        *,
        addin_host: Optional[AddInHost] = None,
        persist_connection: bool = True,
    ) -> "KkmServerClient":
        store = IniConnectionStore(config) if persist_connection else None
        provider = ConnectionProvider(config.connection, store=store)
        return cls(
            provider,
            addin=AddInTransport(addin_host),
            emulator=_build_emulator(config.emulator),
            polling=config.polling,
            emulator_fallback=config.emulator.fallback_on_network_error,
        )

    async def __aenter__(self) -> "KkmServerClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._selector.aclose()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    async def execute_command(
        self,
        command: KkmCommand,
        timeout_ms: Optional[int] = None,
    ) -> KkmResponse:
        """Send one command and return the immediate response, without polling."""

        command = ensure_id(command)
        if timeout_ms is None:
            timeout_ms = self.polling.request_timeout_ms
        return await self._selector.execute(command, timeout_ms)

    async def execute_with_polling(
        self,
        command: KkmCommand,
        max_attempts: Optional[int] = None,
        poll_interval_ms: Optional[int] = None,
    ) -> KkmResponse:
        """Send a command and, if the device runs it asynchronously, wait for it."""

        command = ensure_id(command)
        if max_attempts is None:
            max_attempts = (
                self.polling.payment_max_attempts
                if command.IS_PAYMENT
                else self.polling.max_attempts
            )
        if poll_interval_ms is None:
            poll_interval_ms = (
                self.polling.payment_interval_ms
                if command.IS_PAYMENT
                else self.polling.interval_ms
            )

        initial = await self.execute_command(command)
        return await self._engine.resolve(
            command,
            initial,
            max_attempts=max_attempts,
            interval_ms=poll_interval_ms,
        )

    async def get_result(self, id_command: str) -> KkmResponse:
        return await self.execute_command(GetResultCommand(id_command=id_command))

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------
    def is_addin_available(self) -> bool:
        return isinstance(self._addin, AddInTransport) and self._addin.is_available()

    def set_connection(
        self, mode: ConnectionMode | str, endpoint: Optional[str] = None
    ) -> None:
        self.provider.set(mode, endpoint)

    def set_credentials(self, user: str, password: str) -> None:
        self.provider.set_credentials(user, password)

    @staticmethod
    def status_text(status: int) -> str:
        return status_text(status)


def _build_emulator(config: EmulatorConfig) -> EmulatorTransport:
    return EmulatorTransport(
        rng=random.Random(),
        min_delay_ms=config.min_delay_ms,
        max_delay_ms=config.max_delay_ms,
        random_failures=config.random_failures,
        async_commands=config.async_commands,
        pending_polls=config.pending_polls,
    )
