"""Client for KKM Server fiscal cash-register devices."""

from .client import KkmServerClient
from .commands import KkmCommands
from .config import ConnectionMode, ConnectionSettings, PollingConfig
from .connection import ConnectionProvider, ConnectionStore, IniConnectionStore
from .correlator import ensure_id, generate_command_id
from .errors import (
    CommandNotFoundError,
    KkmError,
    NetworkError,
    PollingTimeoutError,
    ProtocolError,
    RequestTimeoutError,
    TransportError,
    TransportUnavailableError,
)
from .polling import PollingEngine, PollingSession
from .status import KkmStatus, status_text

__all__ = [
    "CommandNotFoundError",
    "ConnectionMode",
    "ConnectionProvider",
    "ConnectionSettings",
    "ConnectionStore",
    "IniConnectionStore",
    "KkmCommands",
    "KkmError",
    "KkmServerClient",
    "KkmStatus",
    "NetworkError",
    "PollingConfig",
    "PollingEngine",
    "PollingSession",
    "PollingTimeoutError",
    "ProtocolError",
    "RequestTimeoutError",
    "TransportError",
    "TransportUnavailableError",
    "ensure_id",
    "generate_command_id",
    "status_text",
]
