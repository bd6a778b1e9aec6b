"""Typed responses returned by KKM Server.

Every response shares the status/error/id fields. Each command kind adds a
closed set of well-known payload fields; anything else the server sends is
dropped and its name recorded in ``ignored_fields``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Type, TypeVar

from ..errors import ProtocolError
from ..status import status_text

LOGGER = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound="KkmResponse")


@dataclass(frozen=True, slots=True, kw_only=True)
class DeviceInfo:
    """One entry of the ``ListUnit`` array returned by the ``List`` command."""

    num_device: int
    id_device: str = ""
    on_off: bool = False
    active: bool = False
    type_device: str = ""
    id_type_device: str = ""
    ip: str = ""
    name_device: str = ""
    kkt_number: str = ""
    inn: str = ""
    tax_variant: str = ""
    add_date: str = ""
    ofd_error: str = ""
    ofd_num_error_doc: int = 0
    ofd_date_error_doc: str = ""
    fn_date_end: str = ""
    fn_mem_overflow: bool = False
    fn_is_fiscal: bool = False
    paper_over: bool = False

    # The server spells a couple of these names oddly; they are kept verbatim.
    WIRE_FIELDS: ClassVar[Mapping[str, str]] = {
        "NumDevice": "num_device",
        "IdDevice": "id_device",
        "OnOf": "on_off",
        "Active": "active",
        "TypeDevice": "type_device",
        "IdTypeDevice": "id_type_device",
        "IP": "ip",
        "NameDevice": "name_device",
        "KktNumber": "kkt_number",
        "INN": "inn",
        "TaxVariant": "tax_variant",
        "AddDate": "add_date",
        "OFD_Error": "ofd_error",
        "OFD_NumErrorDoc": "ofd_num_error_doc",
        "OFD_DateErrorDoc": "ofd_date_error_doc",
        "FN_DateEnd": "fn_date_end",
        "FN_MemOverflowl": "fn_mem_overflow",
        "FN_IsFiscal": "fn_is_fiscal",
        "PaperOver": "paper_over",
    }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "DeviceInfo":
        if not isinstance(payload, Mapping):
            raise ProtocolError(f"Device entry must be an object, got {payload!r}")
        values = {
            attr: payload[key]
            for key, attr in cls.WIRE_FIELDS.items()
            if key in payload
        }
        values.setdefault("num_device", 0)
        return cls(**values)

    def to_payload(self) -> Dict[str, Any]:
        return {key: getattr(self, attr) for key, attr in self.WIRE_FIELDS.items()}


@dataclass(frozen=True, slots=True, kw_only=True)
class KkmResponse:
    status: int
    error: str = ""
    message: Optional[str] = None
    command: Optional[str] = None
    id_command: Optional[str] = None
    num_device: Optional[int] = None
    ignored_fields: Tuple[str, ...] = ()

    WIRE_FIELDS: ClassVar[Mapping[str, str]] = {
        "Status": "status",
        "Error": "error",
        "Message": "message",
        "Command": "command",
        "IdCommand": "id_command",
        "NumDevice": "num_device",
    }

    @property
    def status_text(self) -> str:
        return status_text(self.status)

    @classmethod
    def from_payload(cls: Type[ResponseT], payload: Any) -> ResponseT:
        """Build a response from the decoded JSON body."""

        if not isinstance(payload, Mapping):
            raise ProtocolError(
                f"Expected a JSON object from KKM Server, got {type(payload).__name__}"
            )
        if "Status" not in payload:
            raise ProtocolError("Response is missing the Status field")

        raw_status = payload["Status"]
        if isinstance(raw_status, bool):
            raise ProtocolError(f"Invalid Status value: {raw_status!r}")
        try:
            status = int(raw_status)
        except (TypeError, ValueError) as exc:
            raise ProtocolError(f"Invalid Status value: {raw_status!r}") from exc

        values: Dict[str, Any] = {}
        ignored: list[str] = []
        for key, value in payload.items():
            attr = cls.WIRE_FIELDS.get(key)
            if attr is None:
                ignored.append(key)
                continue
            values[attr] = cls._convert(attr, value)

        values["status"] = status
        error = values.get("error")
        values["error"] = "" if error is None else str(error)
        if ignored:
            LOGGER.debug(
                "Ignoring unknown %s fields: %s", cls.__name__, ", ".join(ignored)
            )

        return cls(ignored_fields=tuple(ignored), **values)

    @classmethod
    def _convert(cls, attr: str, value: Any) -> Any:
        return value

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        for key, attr in self.WIRE_FIELDS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            if attr == "list_unit":
                value = [device.to_payload() for device in value]
            payload[key] = value
        return payload


@dataclass(frozen=True, slots=True, kw_only=True)
class ListResponse(KkmResponse):
    list_unit: Tuple[DeviceInfo, ...] = ()

    WIRE_FIELDS: ClassVar[Mapping[str, str]] = {
        **KkmResponse.WIRE_FIELDS,
        "ListUnit": "list_unit",
    }

    @classmethod
    def _convert(cls, attr: str, value: Any) -> Any:
        if attr == "list_unit":
            if value is None:
                return ()
            if not isinstance(value, list):
                raise ProtocolError("ListUnit must be an array")
            return tuple(DeviceInfo.from_payload(item) for item in value)
        return value


@dataclass(frozen=True, slots=True, kw_only=True)
class ShiftResponse(KkmResponse):
    check_number: Optional[int] = None
    session_number: Optional[int] = None
    qr_code: Optional[str] = None

    WIRE_FIELDS: ClassVar[Mapping[str, str]] = {
        **KkmResponse.WIRE_FIELDS,
        "CheckNumber": "check_number",
        "SessionNumber": "session_number",
        "QRCode": "qr_code",
    }


@dataclass(frozen=True, slots=True, kw_only=True)
class PaymentResponse(KkmResponse):
    universal_id: Optional[str] = None
    amount: Optional[float] = None
    slip: Optional[str] = None

    WIRE_FIELDS: ClassVar[Mapping[str, str]] = {
        **KkmResponse.WIRE_FIELDS,
        "UniversalID": "universal_id",
        "Amount": "amount",
        "Slip": "slip",
    }


@dataclass(frozen=True, slots=True, kw_only=True)
class CheckResponse(KkmResponse):
    check_number: Optional[int] = None
    session_number: Optional[int] = None
    session_check_number: Optional[int] = None
    url: Optional[str] = None
    qr_code: Optional[str] = None
    cash: Optional[float] = None
    electronic_payment: Optional[float] = None
    advance_payment: Optional[float] = None
    credit: Optional[float] = None
    cash_provision: Optional[float] = None

    WIRE_FIELDS: ClassVar[Mapping[str, str]] = {
        **KkmResponse.WIRE_FIELDS,
        "CheckNumber": "check_number",
        "SessionNumber": "session_number",
        "SessionCheckNumber": "session_check_number",
        "URL": "url",
        "QRCode": "qr_code",
        "Cash": "cash",
        "ElectronicPayment": "electronic_payment",
        "AdvancePayment": "advance_payment",
        "Credit": "credit",
        "CashProvision": "cash_provision",
    }
