"""Command identifier assignment."""

from __future__ import annotations

import dataclasses
import uuid
from typing import TypeVar

from .models import KkmCommand

CommandT = TypeVar("CommandT", bound=KkmCommand)


def generate_command_id() -> str:
    """Return a fresh GUID string such as ``0f8fad5b-d9cb-469f-a165-70867728950e``."""

    return str(uuid.uuid4())


def ensure_id(command: CommandT) -> CommandT:
    """Return ``command`` with an ``IdCommand``, generating one only when missing."""

    if command.id_command:
        return command
    return dataclasses.replace(command, id_command=generate_command_id())
