"""Ready-made KKM Server operations."""

from __future__ import annotations

import time
from typing import Iterable, Optional, cast

from .client import KkmServerClient
from .correlator import generate_command_id
from .models import (
    CancelPaymentByPaymentCardCommand,
    CheckResponse,
    CheckString,
    CloseShiftCommand,
    ListCommand,
    ListResponse,
    OpenShiftCommand,
    PayByPaymentCardCommand,
    PaymentResponse,
    RegisterCheckCommand,
    ReturnPaymentByPaymentCardCommand,
    ShiftResponse,
)


def default_receipt_number() -> str:
    return f"RCPT-{int(time.time() * 1000)}"


class KkmCommands:
    """Typed wrappers for the common device operations.

    Shift, payment and receipt commands go through polling since the device
    may finish them after the first response. The device list does not.
    """

    def __init__(self, client: KkmServerClient) -> None:
        self._client = client

    async def get_device_list(
        self,
        *,
        num_device: int = 0,
        inn_kkm: str = "",
        active: bool = True,
        on_off: bool = True,
        ofd_error: bool = False,
        fn_is_fiscal: bool = True,
    ) -> ListResponse:
        command = ListCommand(
            num_device=num_device,
            inn_kkm=inn_kkm,
            active=active,
            on_off=on_off,
            ofd_error=ofd_error,
            fn_is_fiscal=fn_is_fiscal,
        )
        return cast(ListResponse, await self._client.execute_command(command))

    async def open_shift(
        self,
        *,
        num_device: int = 0,
        inn_kkm: str = "",
        tax_variant: str = "",
        cashier_name: str = "",
        cashier_vatin: str = "",
        not_print: bool = False,
    ) -> ShiftResponse:
        command = OpenShiftCommand(
            id_command=generate_command_id(),
            num_device=num_device,
            inn_kkm=inn_kkm,
            tax_variant=tax_variant,
            cashier_name=cashier_name,
            cashier_vatin=cashier_vatin,
            not_print=not_print,
        )
        return cast(ShiftResponse, await self._client.execute_with_polling(command))

    async def close_shift(
        self,
        *,
        num_device: int = 0,
        inn_kkm: str = "",
        tax_variant: str = "",
        cashier_name: str = "",
        cashier_vatin: str = "",
        not_print: bool = False,
    ) -> ShiftResponse:
        command = CloseShiftCommand(
            id_command=generate_command_id(),
            num_device=num_device,
            inn_kkm=inn_kkm,
            tax_variant=tax_variant,
            cashier_name=cashier_name,
            cashier_vatin=cashier_vatin,
            not_print=not_print,
        )
        return cast(ShiftResponse, await self._client.execute_with_polling(command))

    async def pay_by_payment_card(
        self,
        amount: float,
        *,
        num_device: int = 0,
        inn_kkm: str = "",
        receipt_number: Optional[str] = None,
    ) -> PaymentResponse:
        command = PayByPaymentCardCommand(
            id_command=generate_command_id(),
            num_device=num_device,
            inn_kkm=inn_kkm,
            amount=amount,
            receipt_number=receipt_number or default_receipt_number(),
        )
        return cast(PaymentResponse, await self._client.execute_with_polling(command))

    async def return_payment_by_payment_card(
        self,
        amount: float,
        universal_id: str,
        *,
        num_device: int = 0,
        inn_kkm: str = "",
    ) -> PaymentResponse:
        command = ReturnPaymentByPaymentCardCommand(
            id_command=generate_command_id(),
            num_device=num_device,
            inn_kkm=inn_kkm,
            amount=amount,
            universal_id=universal_id,
        )
        return cast(PaymentResponse, await self._client.execute_with_polling(command))

    async def cancel_payment_by_payment_card(
        self,
        amount: float,
        universal_id: str,
        *,
        num_device: int = 0,
        inn_kkm: str = "",
    ) -> PaymentResponse:
        command = CancelPaymentByPaymentCardCommand(
            id_command=generate_command_id(),
            num_device=num_device,
            inn_kkm=inn_kkm,
            amount=amount,
            universal_id=universal_id,
        )
        return cast(PaymentResponse, await self._client.execute_with_polling(command))

    async def register_check(
        self,
        check_strings: Iterable[CheckString],
        *,
        num_device: int = 0,
        inn_kkm: str = "",
        type_check: int = 0,
        cashier_name: str = "",
        cashier_vatin: str = "",
        client_address: str = "",
        not_print: bool = False,
        cash: float = 0,
        electronic_payment: float = 0,
    ) -> CheckResponse:
        command = RegisterCheckCommand(
            id_command=generate_command_id(),
            num_device=num_device,
            inn_kkm=inn_kkm,
            type_check=type_check,
            cashier_name=cashier_name,
            cashier_vatin=cashier_vatin,
            client_address=client_address,
            not_print=not_print,
            check_strings=tuple(check_strings),
            cash=cash,
            electronic_payment=electronic_payment,
        )
        return cast(CheckResponse, await self._client.execute_with_polling(command))
