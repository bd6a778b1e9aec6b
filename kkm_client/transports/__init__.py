"""Ways of delivering commands to KKM Server."""

from .addin import AddInHost, AddInTransport
from .base import CommandTransport, effective_timeout_ms
from .emulator import EmulatorTransport
from .http import HttpTransport, build_execute_url, build_headers
from .selector import TransportSelector

__all__ = [
    "AddInHost",
    "AddInTransport",
    "CommandTransport",
    "EmulatorTransport",
    "HttpTransport",
    "TransportSelector",
    "build_execute_url",
    "build_headers",
    "effective_timeout_ms",
]
