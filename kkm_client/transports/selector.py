"""Picks the transport for each command from the current connection mode."""

from __future__ import annotations

import logging
from typing import Optional

from .. import constants
from ..config import ConnectionMode
from ..connection import ConnectionProvider
from ..errors import NetworkError, TransportUnavailableError
from ..models import KkmCommand, KkmResponse
from .base import CommandTransport

LOGGER = logging.getLogger(__name__)


class TransportSelector:
    """Routes commands to the HTTP, add-in or emulator transport.

    The mode is read from the provider on every call. When
    ``emulator_fallback`` is enabled a connection-level HTTP failure is
    answered by the emulator instead; that substitution is a deployment
    choice for offline use and is off by default.
    """

    def __init__(
        self,
        provider: ConnectionProvider,
        *,
        http: Optional[CommandTransport] = None,
        addin: Optional[CommandTransport] = None,
        emulator: Optional[CommandTransport] = None,
        emulator_fallback: bool = False,
    ) -> None:
        self._provider = provider
        self._transports: dict[ConnectionMode, Optional[CommandTransport]] = {
            ConnectionMode.HTTP: http,
            ConnectionMode.ADDIN: addin,
            ConnectionMode.EMULATOR: emulator,
        }
        self._emulator_fallback = emulator_fallback

    def select(self) -> CommandTransport:
        mode = self._provider.get().mode
        transport = self._transports.get(mode)
        if transport is None:
            raise TransportUnavailableError(f"No transport configured for {mode.value}")
        return transport

    async def execute(
        self,
        command: KkmCommand,
        timeout_ms: int = constants.DEFAULT_REQUEST_TIMEOUT_MS,
    ) -> KkmResponse:
        transport = self.select()
        try:
            return await transport.execute(command, timeout_ms)
        except NetworkError:
            emulator = self._transports[ConnectionMode.EMULATOR]
            if (
                not self._emulator_fallback
                or emulator is None
                or transport is emulator
            ):
                raise
            LOGGER.warning(
                "KKM Server unreachable, answering %s from the emulator", command.name
            )
            return await emulator.execute(command, timeout_ms)

    async def aclose(self) -> None:
        for transport in self._transports.values():
            if transport is not None:
                await transport.aclose()
