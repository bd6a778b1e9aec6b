"""Typed commands understood by KKM Server.

Field names produced by ``to_payload`` are part of the device server protocol
and must not be renamed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional, Tuple, Type, Union

from .responses import (
    CheckResponse,
    KkmResponse,
    ListResponse,
    PaymentResponse,
    ShiftResponse,
)


class CommandNames:
    """Command names as spelled by the device server."""

    LIST = "List"
    OPEN_SHIFT = "OpenShift"
    CLOSE_SHIFT = "CloseShift"
    PAY_BY_PAYMENT_CARD = "PayByPaymentCard"
    RETURN_PAYMENT_BY_PAYMENT_CARD = "ReturnPaymentByPaymentCard"
    CANCEL_PAYMENT_BY_PAYMENT_CARD = "CancelPaymentByPaymentCard"
    REGISTER_CHECK = "RegisterCheck"
    GET_RESULT = "GetRezult"  # sic, the server's spelling


@dataclass(frozen=True, slots=True, kw_only=True)
class KkmCommand:
    """Fields shared by every command."""

    COMMAND: ClassVar[str] = ""
    RESPONSE_TYPE: ClassVar[Type[KkmResponse]] = KkmResponse
    IS_PAYMENT: ClassVar[bool] = False

    id_command: Optional[str] = None
    num_device: int = 0
    inn_kkm: str = ""
    timeout: Optional[int] = None

    @property
    def name(self) -> str:
        return self.COMMAND

    def response_type(self) -> Type[KkmResponse]:
        return self.RESPONSE_TYPE

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "Command": self.COMMAND,
            "NumDevice": self.num_device,
            "InnKkm": self.inn_kkm,
        }
        if self.timeout is not None:
            payload["Timeout"] = self.timeout
        if self.id_command:
            payload["IdCommand"] = self.id_command
        payload.update(self._extra_payload())
        return payload

    def _extra_payload(self) -> Dict[str, Any]:
        return {}


@dataclass(frozen=True, slots=True, kw_only=True)
class ListCommand(KkmCommand):
    COMMAND: ClassVar[str] = CommandNames.LIST
    RESPONSE_TYPE: ClassVar[Type[KkmResponse]] = ListResponse

    active: bool = True
    on_off: bool = True
    ofd_error: bool = False
    fn_is_fiscal: bool = True

    def _extra_payload(self) -> Dict[str, Any]:
        return {
            "Active": self.active,
            "OnOff": self.on_off,
            "OFD_Error": self.ofd_error,
            "FN_IsFiscal": self.fn_is_fiscal,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class _ShiftCommand(KkmCommand):
    RESPONSE_TYPE: ClassVar[Type[KkmResponse]] = ShiftResponse

    tax_variant: str = ""
    id_device: str = ""
    cashier_name: str = ""
    cashier_vatin: str = ""
    not_print: bool = False

    def _extra_payload(self) -> Dict[str, Any]:
        return {
            "TaxVariant": self.tax_variant,
            "IdDevice": self.id_device,
            "CashierName": self.cashier_name,
            "CashierVATIN": self.cashier_vatin,
            "NotPrint": self.not_print,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class OpenShiftCommand(_ShiftCommand):
    COMMAND: ClassVar[str] = CommandNames.OPEN_SHIFT


@dataclass(frozen=True, slots=True, kw_only=True)
class CloseShiftCommand(_ShiftCommand):
    COMMAND: ClassVar[str] = CommandNames.CLOSE_SHIFT


@dataclass(frozen=True, slots=True, kw_only=True)
class PayByPaymentCardCommand(KkmCommand):
    COMMAND: ClassVar[str] = CommandNames.PAY_BY_PAYMENT_CARD
    RESPONSE_TYPE: ClassVar[Type[KkmResponse]] = PaymentResponse
    # Card payments wait on the terminal and the cardholder, so they poll longer.
    IS_PAYMENT: ClassVar[bool] = True

    amount: float
    receipt_number: str = ""

    def _extra_payload(self) -> Dict[str, Any]:
        return {"Amount": self.amount, "ReceiptNumber": self.receipt_number}


@dataclass(frozen=True, slots=True, kw_only=True)
class _PaymentReversalCommand(KkmCommand):
    RESPONSE_TYPE: ClassVar[Type[KkmResponse]] = PaymentResponse

    amount: float
    universal_id: str

    def _extra_payload(self) -> Dict[str, Any]:
        return {"Amount": self.amount, "UniversalID": self.universal_id}


@dataclass(frozen=True, slots=True, kw_only=True)
class ReturnPaymentByPaymentCardCommand(_PaymentReversalCommand):
    COMMAND: ClassVar[str] = CommandNames.RETURN_PAYMENT_BY_PAYMENT_CARD


@dataclass(frozen=True, slots=True, kw_only=True)
class CancelPaymentByPaymentCardCommand(_PaymentReversalCommand):
    COMMAND: ClassVar[str] = CommandNames.CANCEL_PAYMENT_BY_PAYMENT_CARD


# ---------------------------------------------------------------------------
# Receipt lines
# ---------------------------------------------------------------------------


def _compact(values: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


@dataclass(frozen=True, slots=True)
class PrintText:
    text: str
    font: Optional[int] = None
    intensity: Optional[int] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "PrintText": _compact(
                {"Text": self.text, "Font": self.font, "Intensity": self.intensity}
            )
        }


@dataclass(frozen=True, slots=True)
class PrintImage:
    image: str  # base64 encoded

    def to_payload(self) -> Dict[str, Any]:
        return {"PrintImage": {"Image": self.image}}


@dataclass(frozen=True, slots=True)
class GoodCodeData:
    bar_code: str
    contains_serial_number: Optional[bool] = None
    accept_on_bad: Optional[bool] = None

    def to_payload(self) -> Dict[str, Any]:
        return _compact(
            {
                "BarCode": self.bar_code,
                "ContainsSerialNumber": self.contains_serial_number,
                "AcceptOnBad": self.accept_on_bad,
            }
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class Register:
    """A fiscal line item."""

    name: str
    quantity: float
    price: float
    amount: float
    tax: int
    sign_method_calculation: int
    sign_calculation_object: int
    department: Optional[int] = None
    measure_of_quantity: Optional[int] = None
    country_of_origin: Optional[str] = None
    customs_declaration: Optional[str] = None
    excise_amount: Optional[float] = None
    good_code_data: Optional[GoodCodeData] = None

    def to_payload(self) -> Dict[str, Any]:
        body = _compact(
            {
                "Name": self.name,
                "Quantity": self.quantity,
                "Price": self.price,
                "Amount": self.amount,
                "Department": self.department,
                "Tax": self.tax,
                "SignMethodCalculation": self.sign_method_calculation,
                "SignCalculationObject": self.sign_calculation_object,
                "MeasureOfQuantity": self.measure_of_quantity,
                "CountryOfOrigin": self.country_of_origin,
                "CustomsDeclaration": self.customs_declaration,
                "ExciseAmount": self.excise_amount,
            }
        )
        if self.good_code_data is not None:
            body["GoodCodeData"] = self.good_code_data.to_payload()
        return {"Register": body}


BARCODE_TYPES = frozenset({"EAN13", "CODE39", "CODE128", "QR", "PDF417"})


@dataclass(frozen=True, slots=True)
class BarCode:
    barcode_type: str
    barcode: str

    def __post_init__(self) -> None:
        if self.barcode_type not in BARCODE_TYPES:
            raise ValueError(f"Unsupported barcode type: {self.barcode_type!r}")

    def to_payload(self) -> Dict[str, Any]:
        return {"BarCode": {"BarcodeType": self.barcode_type, "Barcode": self.barcode}}


CheckString = Union[PrintText, PrintImage, Register, BarCode]


@dataclass(frozen=True, slots=True, kw_only=True)
class RegisterCheckCommand(KkmCommand):
    COMMAND: ClassVar[str] = CommandNames.REGISTER_CHECK
    RESPONSE_TYPE: ClassVar[Type[KkmResponse]] = CheckResponse

    timeout: Optional[int] = 30
    kkt_number: str = ""
    is_fiscal_check: bool = True
    type_check: int = 0  # 0 = sale
    not_print: bool = False
    number_copies: int = 0
    cashier_name: str = ""
    cashier_vatin: str = ""
    client_address: str = ""
    tax_variant: str = ""
    check_strings: Tuple[CheckString, ...] = ()
    cash: float = 0
    electronic_payment: float = 0
    advance_payment: float = 0
    credit: float = 0
    cash_provision: float = 0

    def _extra_payload(self) -> Dict[str, Any]:
        return {
            "KktNumber": self.kkt_number,
            "IsFiscalCheck": self.is_fiscal_check,
            "TypeCheck": self.type_check,
            "NotPrint": self.not_print,
            "NumberCopies": self.number_copies,
            "CashierName": self.cashier_name,
            "CashierVATIN": self.cashier_vatin,
            "ClientAddress": self.client_address,
            "TaxVariant": self.tax_variant,
            "CheckStrings": [line.to_payload() for line in self.check_strings],
            "Cash": self.cash,
            "ElectronicPayment": self.electronic_payment,
            "AdvancePayment": self.advance_payment,
            "Credit": self.credit,
            "CashProvision": self.cash_provision,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class GetResultCommand(KkmCommand):
    """Status query for a command started asynchronously.

    ``result_type`` selects how the final response is decoded; it never goes
    over the wire.
    """

    COMMAND: ClassVar[str] = CommandNames.GET_RESULT

    id_command: str
    result_type: Type[KkmResponse] = field(default=KkmResponse, compare=False)

    def response_type(self) -> Type[KkmResponse]:
        return self.result_type

    def to_payload(self) -> Dict[str, Any]:
        return {"Command": self.COMMAND, "IdCommand": self.id_command}
