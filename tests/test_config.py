from configparser import ConfigParser
from pathlib import Path

from kkm_client.config import ConnectionMode, ConnectionSettings, load_config
from kkm_client.connection import ConnectionProvider, IniConnectionStore
from kkm_client.constants import DEFAULT_ENDPOINT


def test_load_config_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path / "kkm-client.cfg")

    assert config.connection.mode is ConnectionMode.HTTP
    assert config.connection.endpoint == DEFAULT_ENDPOINT
    assert config.connection.has_credentials is False
    assert config.polling.request_timeout_ms == 60_000
    assert config.polling.max_attempts == 30
    assert config.polling.interval_ms == 2_000
    assert config.polling.payment_max_attempts == 60
    assert config.polling.payment_interval_ms == 3_000
    assert config.emulator.fallback_on_network_error is False
    assert config.logging.level == "INFO"
    assert config.logging.path is None


def test_load_config_overrides_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "kkm-client.cfg"
    config_path.write_text(
        """
[connection]
mode = addin
endpoint = http://kkm.local:5893
user = admin
password = p%ss

[polling]
max_attempts = 5
interval_ms = 250

[emulator]
fallback_on_network_error = yes
min_delay_ms = 900
max_delay_ms = 100

[logging]
level = debug
path = ~/kkm.log
        """.strip()
        + "\n",
        encoding="utf-8",
    )

    config = load_config(config_path)

    assert config.connection.mode is ConnectionMode.ADDIN
    assert config.connection.endpoint == "http://kkm.local:5893"
    assert config.connection.password == "p%ss"
    assert config.polling.max_attempts == 5
    assert config.polling.interval_ms == 250
    assert config.emulator.fallback_on_network_error is True
    assert config.emulator.max_delay_ms == 900
    assert config.logging.level == "debug"
    assert config.logging.path == Path("~/kkm.log").expanduser()


def test_invalid_mode_falls_back_to_http(tmp_path: Path) -> None:
    config_path = tmp_path / "kkm-client.cfg"
    config_path.write_text("[connection]\nmode = carrier-pigeon\n", encoding="utf-8")

    config = load_config(config_path)

    assert config.connection.mode is ConnectionMode.HTTP
    assert config.raw.get("connection", "mode") == "HTTP"


def test_provider_persists_mode_and_endpoint(tmp_path: Path) -> None:
    config_path = tmp_path / "kkm-client.cfg"
    config = load_config(config_path)
    provider = ConnectionProvider(store=IniConnectionStore(config))

    provider.set("HTTP", "http://10.0.0.5:5893/")

    saved = ConfigParser(interpolation=None)
    saved.read(config_path, encoding="utf-8")
    assert saved.get("connection", "mode") == "HTTP"
    assert saved.get("connection", "endpoint") == "http://10.0.0.5:5893/"
    assert load_config(config_path).connection.endpoint == "http://10.0.0.5:5893/"


def test_addin_mode_clears_endpoint_but_keeps_it_on_disk(tmp_path: Path) -> None:
    config_path = tmp_path / "kkm-client.cfg"
    config = load_config(config_path)
    provider = ConnectionProvider(store=IniConnectionStore(config))

    provider.set(ConnectionMode.ADDIN, "http://ignored/")

    assert provider.get().mode is ConnectionMode.ADDIN
    assert provider.get().endpoint is None
    reloaded = load_config(config_path)
    assert reloaded.connection.mode is ConnectionMode.ADDIN
    assert reloaded.connection.endpoint == DEFAULT_ENDPOINT


def test_switching_mode_keeps_current_endpoint() -> None:
    provider = ConnectionProvider(ConnectionSettings(endpoint="http://a/"))

    provider.set("emulator")

    assert provider.get().mode is ConnectionMode.EMULATOR
    assert provider.get().endpoint == "http://a/"


def test_credentials_stay_in_memory(tmp_path: Path) -> None:
    config_path = tmp_path / "kkm-client.cfg"
    config = load_config(config_path)
    provider = ConnectionProvider(store=IniConnectionStore(config))

    provider.set_credentials("cashier", "secret")

    assert provider.get().has_credentials is True
    assert not config_path.exists()
