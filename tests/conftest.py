from __future__ import annotations

from typing import Any, Iterable, Union

import pytest

from kkm_client.models import KkmCommand, KkmResponse

Scripted = Union[dict[str, Any], Exception]


class ScriptedTransport:
    """Replays canned response payloads and records every command sent."""

    def __init__(self, responses: Iterable[Scripted] = ()) -> None:
        self.responses: list[Scripted] = list(responses)
        self.commands: list[KkmCommand] = []
        self.timeouts: list[int] = []
        self.closed = False

    async def execute(self, command: KkmCommand, timeout_ms: int) -> KkmResponse:
        self.commands.append(command)
        self.timeouts.append(timeout_ms)
        if not self.responses:
            raise AssertionError(f"Unexpected command {command.name}")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return command.response_type().from_payload(item)

    async def aclose(self) -> None:
        self.closed = True

    @property
    def payloads(self) -> list[dict[str, Any]]:
        return [command.to_payload() for command in self.commands]


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def scripted():
    return ScriptedTransport


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()
