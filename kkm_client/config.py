"""Configuration loader for kkm-client."""

from __future__ import annotations

from configparser import ConfigParser
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from . import constants


class ConnectionMode(str, Enum):
    ADDIN = "AddIn"
    HTTP = "HTTP"
    EMULATOR = "Emulator"

    @classmethod
    def parse(cls, value: str) -> "ConnectionMode":
        normalized = value.strip().lower()
        for mode in cls:
            if mode.value.lower() == normalized:
                return mode
        raise ValueError(f"Unsupported connection mode: {value!r}")


@dataclass(slots=True)
class ConnectionSettings:
    mode: ConnectionMode = ConnectionMode.HTTP
    endpoint: Optional[str] = constants.DEFAULT_ENDPOINT
    user: str = ""
    password: str = ""

    @property
    def has_credentials(self) -> bool:
        return bool(self.user or self.password)


@dataclass(slots=True)
class PollingConfig:
    request_timeout_ms: int = constants.DEFAULT_REQUEST_TIMEOUT_MS
    max_attempts: int = constants.DEFAULT_MAX_POLL_ATTEMPTS
    interval_ms: int = constants.DEFAULT_POLL_INTERVAL_MS
    payment_max_attempts: int = constants.PAYMENT_MAX_POLL_ATTEMPTS
    payment_interval_ms: int = constants.PAYMENT_POLL_INTERVAL_MS


@dataclass(slots=True)
class EmulatorConfig:
    fallback_on_network_error: bool = False  # opt-in substitution for offline use
    async_commands: bool = False
    pending_polls: int = 1
    min_delay_ms: int = 500
    max_delay_ms: int = 1500
    random_failures: bool = True


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = None
    log_network: bool = False


@dataclass(slots=True)
class KkmConfig:
    connection: ConnectionSettings
    polling: PollingConfig
    emulator: EmulatorConfig
    logging: LoggingConfig
    raw: ConfigParser
    path: Path


def load_config(path: Optional[Path] = None) -> KkmConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser(interpolation=None)
    parser.read_dict(
        {
            "connection": {
                "mode": ConnectionMode.HTTP.value,
                "endpoint": constants.DEFAULT_ENDPOINT,
                "user": "",
                "password": "",
            },
            "polling": {
                "request_timeout_ms": str(constants.DEFAULT_REQUEST_TIMEOUT_MS),
                "max_attempts": str(constants.DEFAULT_MAX_POLL_ATTEMPTS),
                "interval_ms": str(constants.DEFAULT_POLL_INTERVAL_MS),
                "payment_max_attempts": str(constants.PAYMENT_MAX_POLL_ATTEMPTS),
                "payment_interval_ms": str(constants.PAYMENT_POLL_INTERVAL_MS),
            },
            "emulator": {
                "fallback_on_network_error": "false",
                "async_commands": "false",
                "pending_polls": "1",
                "min_delay_ms": "500",
                "max_delay_ms": "1500",
                "random_failures": "true",
            },
            "logging": {
                "level": "INFO",
                "log_network": "false",
            },
        }
    )

    if config_path.exists():
        parser.read(config_path, encoding="utf-8")

    try:
        mode = ConnectionMode.parse(parser.get("connection", "mode"))
    except ValueError:
        mode = ConnectionMode.HTTP
        parser.set("connection", "mode", mode.value)

    connection = ConnectionSettings(
        mode=mode,
        endpoint=parser.get("connection", "endpoint", fallback="") or None,
        user=parser.get("connection", "user", fallback=""),
        password=parser.get("connection", "password", fallback=""),
    )

    polling_defaults = PollingConfig()
    polling = PollingConfig(
        request_timeout_ms=max(
            1,
            parser.getint(
                "polling",
                "request_timeout_ms",
                fallback=polling_defaults.request_timeout_ms,
            ),
        ),
        max_attempts=max(
            1,
            parser.getint(
                "polling", "max_attempts", fallback=polling_defaults.max_attempts
            ),
        ),
        interval_ms=max(
            0,
            parser.getint(
                "polling", "interval_ms", fallback=polling_defaults.interval_ms
            ),
        ),
        payment_max_attempts=max(
            1,
            parser.getint(
                "polling",
                "payment_max_attempts",
                fallback=polling_defaults.payment_max_attempts,
            ),
        ),
        payment_interval_ms=max(
            0,
            parser.getint(
                "polling",
                "payment_interval_ms",
                fallback=polling_defaults.payment_interval_ms,
            ),
        ),
    )

    min_delay_ms = max(0, parser.getint("emulator", "min_delay_ms", fallback=500))
    emulator = EmulatorConfig(
        fallback_on_network_error=parser.getboolean(
            "emulator", "fallback_on_network_error", fallback=False
        ),
        async_commands=parser.getboolean(
            "emulator", "async_commands", fallback=False
        ),
        pending_polls=max(0, parser.getint("emulator", "pending_polls", fallback=1)),
        min_delay_ms=min_delay_ms,
        max_delay_ms=max(
            min_delay_ms, parser.getint("emulator", "max_delay_ms", fallback=1500)
        ),
        random_failures=parser.getboolean(
            "emulator", "random_failures", fallback=True
        ),
    )

    log_path_value = parser.get("logging", "path", fallback="")
    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        path=Path(log_path_value).expanduser() if log_path_value else None,
        log_network=parser.getboolean("logging", "log_network", fallback=False),
    )

    return KkmConfig(
        connection=connection,
        polling=polling,
        emulator=emulator,
        logging=logging_config,
        raw=parser,
        path=config_path,
    )


def save_config(config: KkmConfig) -> None:
    """Persist the current configuration to disk."""

    config_path = config.path
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as stream:
        config.raw.write(stream)
