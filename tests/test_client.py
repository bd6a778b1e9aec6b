import pytest

from kkm_client import ConnectionMode, ConnectionProvider, KkmServerClient
from kkm_client.config import ConnectionSettings, PollingConfig
from kkm_client.errors import NetworkError, TransportError
from kkm_client.models import (
    ListCommand,
    OpenShiftCommand,
    PayByPaymentCardCommand,
    PaymentResponse,
)

GUID_LENGTH = 36


def _client(scripted, recording_sleep, *, mode=ConnectionMode.HTTP, **kwargs):
    http = kwargs.pop("http", scripted())
    addin = kwargs.pop("addin", scripted())
    emulator = kwargs.pop("emulator", scripted())
    provider = ConnectionProvider(ConnectionSettings(mode=mode))
    client = KkmServerClient(
        provider,
        http=http,
        addin=addin,
        emulator=emulator,
        sleep=recording_sleep,
        **kwargs,
    )
    return client, http, addin, emulator


@pytest.mark.asyncio
async def test_execute_command_assigns_identifier(scripted, recording_sleep):
    http = scripted([{"Status": 0}])
    client, *_ = _client(scripted, recording_sleep, http=http)

    await client.execute_command(ListCommand())

    assert len(http.commands[0].id_command) == GUID_LENGTH
    assert http.timeouts == [60_000]


@pytest.mark.asyncio
async def test_execute_command_keeps_caller_identifier(scripted, recording_sleep):
    http = scripted([{"Status": 0}])
    client, *_ = _client(scripted, recording_sleep, http=http)

    await client.execute_command(ListCommand(id_command="mine"), timeout_ms=1_500)

    assert http.payloads[0]["IdCommand"] == "mine"
    assert http.timeouts == [1_500]


@pytest.mark.asyncio
async def test_mode_change_applies_to_next_command(scripted, recording_sleep):
    http = scripted([{"Status": 0}])
    addin = scripted([{"Status": 0}])
    client, *_ = _client(scripted, recording_sleep, http=http, addin=addin)

    await client.execute_command(ListCommand())
    client.set_connection(ConnectionMode.ADDIN)
    await client.execute_command(ListCommand())

    assert len(http.commands) == 1
    assert len(addin.commands) == 1
    assert client.provider.get().endpoint is None


@pytest.mark.asyncio
async def test_network_error_propagates_without_fallback(scripted, recording_sleep):
    http = scripted([NetworkError("refused")])
    emulator = scripted([{"Status": 0}])
    client, *_ = _client(scripted, recording_sleep, http=http, emulator=emulator)

    with pytest.raises(NetworkError):
        await client.execute_command(ListCommand())

    assert emulator.commands == []


@pytest.mark.asyncio
async def test_network_error_falls_back_to_emulator_when_enabled(
    scripted, recording_sleep
):
    http = scripted([NetworkError("refused")])
    emulator = scripted([{"Status": 0, "Message": "emulated"}])
    client, *_ = _client(
        scripted,
        recording_sleep,
        http=http,
        emulator=emulator,
        emulator_fallback=True,
    )

    response = await client.execute_command(ListCommand(id_command="x"))

    assert response.message == "emulated"
    assert emulator.payloads[0]["IdCommand"] == "x"


@pytest.mark.asyncio
async def test_http_status_errors_never_fall_back(scripted, recording_sleep):
    http = scripted([TransportError("HTTP 500", status_code=500)])
    emulator = scripted([{"Status": 0}])
    client, *_ = _client(
        scripted,
        recording_sleep,
        http=http,
        emulator=emulator,
        emulator_fallback=True,
    )

    with pytest.raises(TransportError):
        await client.execute_command(ListCommand())

    assert emulator.commands == []


@pytest.mark.asyncio
async def test_shift_polling_uses_default_budget(scripted, recording_sleep):
    http = scripted([{"Status": 1, "IdCommand": "s"}, {"Status": 0}])
    client, *_ = _client(scripted, recording_sleep, http=http)

    response = await client.execute_with_polling(OpenShiftCommand(id_command="s"))

    assert response.status == 0
    assert recording_sleep.calls == [2.0]
    assert http.payloads[1] == {"Command": "GetRezult", "IdCommand": "s"}


@pytest.mark.asyncio
async def test_card_payment_polling_uses_longer_interval(scripted, recording_sleep):
    http = scripted(
        [
            {"Status": 1, "IdCommand": "p"},
            {"Status": 1},
            {"Status": 0, "UniversalID": "RRN:1"},
        ]
    )
    client, *_ = _client(scripted, recording_sleep, http=http)

    response = await client.execute_with_polling(
        PayByPaymentCardCommand(id_command="p", amount=10.0)
    )

    assert isinstance(response, PaymentResponse)
    assert response.universal_id == "RRN:1"
    assert recording_sleep.calls == [3.0, 3.0]


@pytest.mark.asyncio
async def test_explicit_polling_budget_overrides_defaults(scripted, recording_sleep):
    http = scripted([{"Status": 4, "IdCommand": "o"}, {"Status": 1}, {"Status": 2}])
    client, *_ = _client(
        scripted,
        recording_sleep,
        http=http,
        polling=PollingConfig(max_attempts=1),
    )

    response = await client.execute_with_polling(
        OpenShiftCommand(id_command="o"), max_attempts=5, poll_interval_ms=100
    )

    assert response.status == 2
    assert recording_sleep.calls == [0.1, 0.1]


@pytest.mark.asyncio
async def test_get_result_sends_status_query(scripted, recording_sleep):
    http = scripted([{"Status": 3, "Error": "unknown"}])
    client, *_ = _client(scripted, recording_sleep, http=http)

    response = await client.get_result("abc")

    assert response.status == 3
    assert http.payloads == [{"Command": "GetRezult", "IdCommand": "abc"}]


@pytest.mark.asyncio
async def test_aclose_closes_every_transport(scripted, recording_sleep):
    client, http, addin, emulator = _client(scripted, recording_sleep)

    async with client:
        pass

    assert http.closed and addin.closed and emulator.closed


def test_addin_availability_reflects_host(scripted, recording_sleep):
    client = KkmServerClient(ConnectionProvider())
    assert client.is_addin_available() is False

    stubbed, *_ = _client(scripted, recording_sleep)
    assert stubbed.is_addin_available() is False


def test_status_text_helper():
    assert KkmServerClient.status_text(1) == "in progress"
    assert KkmServerClient.status_text(42) == "unknown status: 42"
