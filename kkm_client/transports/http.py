"""HTTP transport posting commands to ``<endpoint>/Execute``."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Callable, Optional

import aiohttp

from .. import constants
from ..config import ConnectionSettings
from ..errors import (
    NetworkError,
    ProtocolError,
    RequestTimeoutError,
    TransportError,
    TransportUnavailableError,
)
from ..models import KkmCommand, KkmResponse
from .base import dump_payload, effective_timeout_ms

LOGGER = logging.getLogger(__name__)


def build_execute_url(endpoint: str) -> str:
    base_url = endpoint if endpoint.endswith("/") else endpoint + "/"
    return base_url + constants.EXECUTE_PATH


def build_headers(settings: ConnectionSettings) -> dict[str, str]:
    headers = {"Content-Type": constants.CONTENT_TYPE}
    if settings.has_credentials:
        headers["Authorization"] = aiohttp.BasicAuth(
            settings.user, settings.password, encoding="utf-8"
        ).encode()
    return headers


class HttpTransport:
    """Non-blocking HTTP executor for KKM Server commands."""

    def __init__(
        self,
        settings: Callable[[], ConnectionSettings],
        *,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._settings = settings
        self._session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None

    async def execute(
        self,
        command: KkmCommand,
        timeout_ms: int = constants.DEFAULT_REQUEST_TIMEOUT_MS,
    ) -> KkmResponse:
        settings = self._settings()
        if not settings.endpoint:
            raise TransportUnavailableError(
                "KKM Server endpoint is not configured", command_id=command.id_command
            )

        url = build_execute_url(settings.endpoint)
        headers = build_headers(settings)
        payload = command.to_payload()
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        deadline_ms = effective_timeout_ms(command.timeout, timeout_ms)

        LOGGER.debug("-> %s %s\n%s", url, command.name, dump_payload(payload))

        session = await self._ensure_session()
        try:
            async with asyncio.timeout(deadline_ms / 1000):
                async with session.post(url, data=body, headers=headers) as response:
                    if not 200 <= response.status < 300:
                        detail = (await response.text()).strip()
                        LOGGER.warning(
                            "KKM Server returned HTTP %d for %s: %s",
                            response.status,
                            command.name,
                            detail[:200],
                        )
                        raise TransportError(
                            f"HTTP {response.status}: {response.reason or detail}",
                            status_code=response.status,
                            command_id=command.id_command,
                        )
                    raw = await response.read()
        except asyncio.TimeoutError as exc:
            LOGGER.warning(
                "%s timed out after %dms (url=%s)", command.name, deadline_ms, url
            )
            raise RequestTimeoutError(
                f"Command {command.name} timed out after {deadline_ms}ms",
                timeout_ms=deadline_ms,
                command_id=command.id_command,
            ) from exc
        except aiohttp.ClientError as exc:
            LOGGER.warning("Request to KKM Server at %s failed: %s", url, exc)
            raise NetworkError(
                f"HTTP request to {url} failed: {exc}", command_id=command.id_command
            ) from exc

        try:
            data = json.loads(raw.decode("utf-8-sig"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise ProtocolError(
                f"KKM Server returned a non-JSON body for {command.name}",
                command_id=command.id_command,
            ) from exc

        if isinstance(data, dict):
            LOGGER.debug("<- %s\n%s", command.name, dump_payload(data))
        return command.response_type().from_payload(data)

    async def aclose(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            # Deadlines are applied per request.
            timeout = aiohttp.ClientTimeout(total=None)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session
