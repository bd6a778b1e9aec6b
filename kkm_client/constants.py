"""Constants used across the kkm-client package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "kkm-client"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path.home() / ".kkm-client" / DEFAULT_CONFIG_FILENAME

DEFAULT_ENDPOINT = "http://localhost:5893/"
EXECUTE_PATH = "Execute"
CONTENT_TYPE = "application/json; charset=UTF-8"

DEFAULT_REQUEST_TIMEOUT_MS = 60_000
# Commands that declare their own Timeout above this many seconds get a longer
# HTTP deadline.
COMMAND_TIMEOUT_THRESHOLD_SECONDS = 60
COMMAND_TIMEOUT_MARGIN_SECONDS = 20

DEFAULT_MAX_POLL_ATTEMPTS = 30
DEFAULT_POLL_INTERVAL_MS = 2_000
PAYMENT_MAX_POLL_ATTEMPTS = 60
PAYMENT_POLL_INTERVAL_MS = 3_000
