"""Typed commands and responses exchanged with KKM Server."""

from .commands import (
    BarCode,
    CancelPaymentByPaymentCardCommand,
    CheckString,
    CloseShiftCommand,
    CommandNames,
    GetResultCommand,
    GoodCodeData,
    KkmCommand,
    ListCommand,
    OpenShiftCommand,
    PayByPaymentCardCommand,
    PrintImage,
    PrintText,
    Register,
    RegisterCheckCommand,
    ReturnPaymentByPaymentCardCommand,
)
from .responses import (
    CheckResponse,
    DeviceInfo,
    KkmResponse,
    ListResponse,
    PaymentResponse,
    ShiftResponse,
)

__all__ = [
    "BarCode",
    "CancelPaymentByPaymentCardCommand",
    "CheckResponse",
    "CheckString",
    "CloseShiftCommand",
    "CommandNames",
    "DeviceInfo",
    "GetResultCommand",
    "GoodCodeData",
    "KkmCommand",
    "KkmResponse",
    "ListCommand",
    "ListResponse",
    "OpenShiftCommand",
    "PayByPaymentCardCommand",
    "PaymentResponse",
    "PrintImage",
    "PrintText",
    "Register",
    "RegisterCheckCommand",
    "ReturnPaymentByPaymentCardCommand",
    "ShiftResponse",
]
