import random

import pytest

from kkm_client import KkmCommands, KkmServerClient, KkmStatus
from kkm_client.config import load_config
from kkm_client.models import (
    GetResultCommand,
    ListCommand,
    OpenShiftCommand,
    PayByPaymentCardCommand,
    PaymentResponse,
    Register,
    RegisterCheckCommand,
    ReturnPaymentByPaymentCardCommand,
    ShiftResponse,
)
from kkm_client.transports import EmulatorTransport
from kkm_client.transports.emulator import PAYMENT_FAILURES


class AlwaysFailRandom(random.Random):
    def random(self):
        return 0.0


def _emulator(**kwargs) -> EmulatorTransport:
    kwargs.setdefault("rng", random.Random(1234))
    kwargs.setdefault("random_failures", False)
    return EmulatorTransport(min_delay_ms=0, max_delay_ms=0, **kwargs)


@pytest.mark.asyncio
async def test_list_returns_active_devices_only():
    emulator = _emulator()

    response = await emulator.execute(ListCommand(id_command="l"))

    assert response.status == KkmStatus.OK
    assert [device.num_device for device in response.list_unit] == [1]
    assert response.list_unit[0].on_off is True


@pytest.mark.asyncio
async def test_list_filters_by_device_number():
    emulator = _emulator()

    response = await emulator.execute(
        ListCommand(id_command="l", num_device=2, active=False)
    )

    assert [device.num_device for device in response.list_unit] == [2]
    assert response.list_unit[0].fn_is_fiscal is False


@pytest.mark.asyncio
async def test_open_shift_succeeds_without_failures():
    emulator = _emulator()

    response = await emulator.execute(OpenShiftCommand(id_command="s", num_device=1))

    assert isinstance(response, ShiftResponse)
    assert response.status == KkmStatus.OK
    assert response.id_command == "s"
    assert response.num_device == 1
    assert 1 <= response.session_number <= 100
    assert "fn=" in response.qr_code


@pytest.mark.asyncio
async def test_payment_reports_universal_id_and_slip():
    emulator = _emulator()

    response = await emulator.execute(
        PayByPaymentCardCommand(id_command="p", amount=150.5)
    )

    assert isinstance(response, PaymentResponse)
    assert response.amount == 150.5
    assert response.universal_id.startswith("CN:1254********")
    assert ";RRN:" in response.universal_id
    assert "Amount: 150.5" in response.slip


@pytest.mark.asyncio
async def test_refund_echoes_universal_id():
    emulator = _emulator()

    response = await emulator.execute(
        ReturnPaymentByPaymentCardCommand(
            id_command="r", amount=10.0, universal_id="CN:1;RN:2"
        )
    )

    assert response.status == KkmStatus.OK
    assert response.universal_id == "CN:1;RN:2"


@pytest.mark.asyncio
async def test_register_check_totals_payments():
    emulator = _emulator()
    line = Register(
        name="Coffee",
        quantity=1,
        price=120,
        amount=120,
        tax=-1,
        sign_method_calculation=4,
        sign_calculation_object=1,
    )

    response = await emulator.execute(
        RegisterCheckCommand(
            id_command="c", check_strings=(line,), cash=100, electronic_payment=20
        )
    )

    assert response.status == KkmStatus.OK
    assert response.cash == 100
    assert response.electronic_payment == 20
    assert "s=120.00" in response.qr_code


@pytest.mark.asyncio
async def test_forced_failure_reports_error_status():
    emulator = _emulator(rng=AlwaysFailRandom(), random_failures=True)

    payment = await emulator.execute(PayByPaymentCardCommand(id_command="p", amount=1))
    shift = await emulator.execute(OpenShiftCommand(id_command="s"))

    assert payment.status == KkmStatus.ERROR
    assert payment.error in PAYMENT_FAILURES
    assert shift.status == KkmStatus.ERROR
    assert shift.error == "Shift is already open"


@pytest.mark.asyncio
async def test_unknown_result_id_is_not_found():
    emulator = _emulator()

    response = await emulator.execute(GetResultCommand(id_command="missing"))

    assert response.status == KkmStatus.NOT_FOUND


@pytest.mark.asyncio
async def test_async_mode_reports_run_until_polled_out():
    emulator = _emulator(async_commands=True, pending_polls=1)
    query = GetResultCommand(id_command="a", result_type=ShiftResponse)

    first = await emulator.execute(OpenShiftCommand(id_command="a"))
    second = await emulator.execute(query)
    final = await emulator.execute(query)
    after = await emulator.execute(query)

    assert first.status == KkmStatus.RUN
    assert second.status == KkmStatus.RUN
    assert final.status == KkmStatus.OK
    assert isinstance(final, ShiftResponse)
    assert after.status == KkmStatus.NOT_FOUND


@pytest.mark.asyncio
async def test_client_completes_shift_through_emulator(tmp_path):
    config_path = tmp_path / "kkm.cfg"
    config_path.write_text(
        "[connection]\n"
        "mode = Emulator\n"
        "[polling]\n"
        "interval_ms = 0\n"
        "[emulator]\n"
        "async_commands = true\n"
        "pending_polls = 2\n"
        "min_delay_ms = 0\n"
        "max_delay_ms = 0\n"
        "random_failures = false\n",
        encoding="utf-8",
    )
    config = load_config(config_path)

    async with KkmServerClient.from_config(config) as client:
        commands = KkmCommands(client)
        shift = await commands.open_shift(cashier_name="Ivanova")
        devices = await commands.get_device_list()

    assert shift.status == KkmStatus.OK
    assert shift.command == "OpenShift"
    assert [device.num_device for device in devices.list_unit] == [1]
