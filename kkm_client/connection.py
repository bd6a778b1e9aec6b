"""Connection settings shared by every command the client issues."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Protocol

from .config import ConnectionMode, ConnectionSettings, KkmConfig, save_config

LOGGER = logging.getLogger(__name__)


class ConnectionStore(Protocol):
    """Persistence for the connection mode and endpoint."""

    def load(self) -> ConnectionSettings:
        ...

    def save(self, settings: ConnectionSettings) -> None:
        ...


class IniConnectionStore:
    """Keeps connection settings in the ``[connection]`` section of the config file."""

    def __init__(self, config: KkmConfig) -> None:
        self._config = config

    def load(self) -> ConnectionSettings:
        return replace(self._config.connection)

    def save(self, settings: ConnectionSettings) -> None:
        raw = self._config.raw
        if not raw.has_section("connection"):
            raw.add_section("connection")

        raw.set("connection", "mode", settings.mode.value)
        # An add-in connection keeps the last HTTP endpoint on disk.
        if settings.mode is not ConnectionMode.ADDIN and settings.endpoint:
            raw.set("connection", "endpoint", settings.endpoint)

        self._config.connection = replace(
            settings,
            endpoint=raw.get("connection", "endpoint", fallback="") or None,
        )
        save_config(self._config)
        LOGGER.info("Saved connection settings to %s", self._config.path)


class ConnectionProvider:
    """Holds the current connection settings with explicit get/set.

    Transports read ``get()`` on every call so a change applies to the next
    command without rebuilding the client.
    """

    def __init__(
        self,
        settings: Optional[ConnectionSettings] = None,
        *,
        store: Optional[ConnectionStore] = None,
    ) -> None:
        self._store = store
        if settings is None:
            settings = store.load() if store is not None else ConnectionSettings()
        self._settings = settings

    def get(self) -> ConnectionSettings:
        return self._settings

    def set(self, mode: ConnectionMode | str, endpoint: Optional[str] = None) -> None:
        if isinstance(mode, str):
            mode = ConnectionMode.parse(mode)

        if mode is ConnectionMode.ADDIN:
            endpoint = None
        elif endpoint is None:
            endpoint = self._settings.endpoint

        self._settings = replace(self._settings, mode=mode, endpoint=endpoint)
        LOGGER.info(
            "Connection set to %s%s",
            mode.value,
            f" ({endpoint})" if endpoint else "",
        )
        if self._store is not None:
            self._store.save(self._settings)

    def set_credentials(self, user: str, password: str) -> None:
        """Set HTTP Basic credentials. They are kept in memory only."""

        self._settings = replace(self._settings, user=user, password=password)
