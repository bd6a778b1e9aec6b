"""In-process stand-in for KKM Server.

Answers every command with a plausible response so the client can run with no
device attached. It models nothing of the fiscal logic; shift, payment and
receipt commands just succeed or fail at random.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .. import constants
from ..models import CommandNames, GetResultCommand, KkmCommand, KkmResponse
from ..status import KkmStatus
from .base import dump_payload

LOGGER = logging.getLogger(__name__)

SHIFT_FAILURE_RATE = 0.10
PAYMENT_FAILURE_RATE = 0.15
CHECK_FAILURE_RATE = 0.05

PAYMENT_FAILURES = (
    "Card cannot be read",
    "Declined by issuer",
    "Insufficient funds",
    "Terminal unavailable",
)

FN_NUMBER = "9999078900002838"
OFD_RECEIPT_URL = (
    "https://ofd-ya.ru/getFiscalDoc?kktRegId=0000000000061716&fiscalSign=839499349"
)


def mock_device_list() -> List[Dict[str, Any]]:
    added = datetime.now(timezone.utc).isoformat(timespec="seconds")
    return [
        {
            "NumDevice": 1,
            "IdDevice": "6a6151a5-b352-485c-8f01-45da05d3df18",
            "OnOf": True,
            "Active": True,
            "TypeDevice": "Fiscal register",
            "IdTypeDevice": "KkmStrihM",
            "IP": "192.168.1.100",
            "NameDevice": "SHTRIH-M-PTK",
            "KktNumber": "123456789",
            "INN": "123456789012",
            "TaxVariant": "0",
            "AddDate": added,
            "OFD_Error": "",
            "OFD_NumErrorDoc": 0,
            "OFD_DateErrorDoc": "0001-01-01T00:00:00",
            "FN_DateEnd": "2030-12-31T23:59:59",
            "FN_MemOverflowl": False,
            "FN_IsFiscal": True,
            "PaperOver": False,
        },
        {
            "NumDevice": 2,
            "IdDevice": "7b7252b6-c463-596d-9a12-56eb16e4ea29",
            "OnOf": True,
            "Active": False,
            "TypeDevice": "Payment terminal",
            "IdTypeDevice": "PaymentTerminal",
            "IP": "192.168.1.101",
            "NameDevice": "Acquiring terminal",
            "KktNumber": "",
            "INN": "",
            "TaxVariant": "",
            "AddDate": added,
            "OFD_Error": "",
            "OFD_NumErrorDoc": 0,
            "OFD_DateErrorDoc": "0001-01-01T00:00:00",
            "FN_DateEnd": "0001-01-01T00:00:00",
            "FN_MemOverflowl": False,
            "FN_IsFiscal": False,
            "PaperOver": False,
        },
    ]


@dataclass(slots=True)
class _PendingResult:
    remaining_polls: int
    payload: Dict[str, Any]


class EmulatorTransport:
    """Answers commands locally with the same contract as the real transports.

    With ``async_commands`` enabled every mutating command first reports
    ``Run``; ``GetRezult`` then reports ``Run`` ``pending_polls`` more times
    before handing back the final response.
    """

    def __init__(
        self,
        *,
        rng: Optional[random.Random] = None,
        min_delay_ms: int = 500,
        max_delay_ms: int = 1500,
        random_failures: bool = True,
        async_commands: bool = False,
        pending_polls: int = 1,
    ) -> None:
        self._rng = rng or random.Random()
        self._min_delay_ms = max(0, min_delay_ms)
        self._max_delay_ms = max(self._min_delay_ms, max_delay_ms)
        self._random_failures = random_failures
        self._async_commands = async_commands
        self._pending_polls = max(0, pending_polls)
        self._pending: Dict[str, _PendingResult] = {}
        self._handlers: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
            CommandNames.LIST: self._list,
            CommandNames.OPEN_SHIFT: self._open_shift,
            CommandNames.CLOSE_SHIFT: self._close_shift,
            CommandNames.PAY_BY_PAYMENT_CARD: self._pay,
            CommandNames.RETURN_PAYMENT_BY_PAYMENT_CARD: self._return_payment,
            CommandNames.CANCEL_PAYMENT_BY_PAYMENT_CARD: self._cancel_payment,
            CommandNames.REGISTER_CHECK: self._register_check,
        }

    async def execute(
        self,
        command: KkmCommand,
        timeout_ms: int = constants.DEFAULT_REQUEST_TIMEOUT_MS,
    ) -> KkmResponse:
        await self._simulate_latency()

        payload = command.to_payload()
        LOGGER.debug("Emulator handling %s", command.name)

        if isinstance(command, GetResultCommand):
            result = self._get_result(payload)
        else:
            result = self._respond(payload)

        LOGGER.debug("<- emulator %s\n%s", command.name, dump_payload(result))
        return command.response_type().from_payload(result)

    async def aclose(self) -> None:
        self._pending.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _simulate_latency(self) -> None:
        if self._max_delay_ms <= 0:
            return
        delay_ms = self._rng.uniform(self._min_delay_ms, self._max_delay_ms)
        await asyncio.sleep(delay_ms / 1000)

    def _respond(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        name = payload.get("Command", "")
        handler = self._handlers.get(name)
        if handler is None:
            return {
                "Status": KkmStatus.OK,
                "Error": "",
                "Message": f"Command {name} executed (emulated)",
                "Command": name,
                "IdCommand": payload.get("IdCommand"),
            }

        result = handler(payload)
        id_command = payload.get("IdCommand")
        if self._async_commands and name != CommandNames.LIST and id_command:
            self._pending[id_command] = _PendingResult(self._pending_polls, result)
            return {
                "Status": KkmStatus.RUN,
                "Error": "",
                "Message": "Command started",
                "Command": name,
                "IdCommand": id_command,
            }
        return result

    def _get_result(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        id_command = payload.get("IdCommand") or ""
        pending = self._pending.get(id_command)
        if pending is None:
            return {
                "Status": KkmStatus.NOT_FOUND,
                "Error": "Command not found or already completed",
                "Command": CommandNames.GET_RESULT,
                "IdCommand": id_command,
            }
        if pending.remaining_polls > 0:
            pending.remaining_polls -= 1
            return {
                "Status": KkmStatus.RUN,
                "Error": "",
                "Command": CommandNames.GET_RESULT,
                "IdCommand": id_command,
            }
        del self._pending[id_command]
        return pending.payload

    def _fails(self, rate: float) -> bool:
        return self._random_failures and self._rng.random() < rate

    def _qr_code(self, total: float) -> str:
        stamp = datetime.now().strftime("%Y%m%dT%H%M%S")
        return (
            f"t={stamp}&s={total:.2f}&fn={FN_NUMBER}"
            f"&i={self._rng.randint(0, 999)}&fp={self._rng.randint(0, 999999998)}"
        )

    def _error(self, payload: Dict[str, Any], message: str) -> Dict[str, Any]:
        return {
            "Status": KkmStatus.ERROR,
            "Error": message,
            "Command": payload["Command"],
            "IdCommand": payload.get("IdCommand"),
            "NumDevice": payload.get("NumDevice") or 1,
        }

    def _list(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        num_device = payload.get("NumDevice") or 0
        active = payload.get("Active")
        on_off = payload.get("OnOff")

        devices = [
            device
            for device in mock_device_list()
            if (not num_device or device["NumDevice"] == num_device)
            and (active is None or device["Active"] == active)
            and (on_off is None or device["OnOf"] == on_off)
        ]
        return {
            "Status": KkmStatus.OK,
            "Error": "",
            "Message": "",
            "Command": CommandNames.LIST,
            "IdCommand": payload.get("IdCommand"),
            "ListUnit": devices,
        }

    def _shift(
        self, payload: Dict[str, Any], failure: str, message: str
    ) -> Dict[str, Any]:
        if self._fails(SHIFT_FAILURE_RATE):
            return self._error(payload, failure)
        return {
            "Status": KkmStatus.OK,
            "Error": "",
            "Message": message,
            "Command": payload["Command"],
            "CheckNumber": self._rng.randint(1, 1000),
            "SessionNumber": self._rng.randint(1, 100),
            "QRCode": self._qr_code(0),
            "IdCommand": payload.get("IdCommand"),
            "NumDevice": payload.get("NumDevice") or 1,
        }

    def _open_shift(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._shift(payload, "Shift is already open", "Shift opened")

    def _close_shift(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._shift(payload, "Shift is not open", "Shift closed")

    def _pay(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if self._fails(PAYMENT_FAILURE_RATE):
            return self._error(payload, self._rng.choice(PAYMENT_FAILURES))

        amount = payload.get("Amount")
        card_number = f"1254********{self._rng.randint(1000, 9999)}"
        rrn = self._rng.randint(1_000_000_000, 9_999_999_999)
        auth_code = self._rng.randint(100_000, 999_999)
        receipt = self._rng.randint(0, 99)
        slip = "\n".join(
            [
                "=" * 36,
                "Merchant: Test organisation",
                "INN: 123456789012",
                "Terminal: 21094544",
                "-" * 36,
                " PAYMENT ",
                f"Card: {card_number}",
                f"Amount: {amount}",
                "-" * 36,
                "Status: Approved",
                f"Auth code: {auth_code}",
                f"RRN: {rrn}",
                f"Receipt: {receipt}",
                "=" * 36,
            ]
        )
        return {
            "Status": KkmStatus.OK,
            "Error": "",
            "Message": "Payment approved",
            "Command": CommandNames.PAY_BY_PAYMENT_CARD,
            "UniversalID": f"CN:{card_number};RN:{receipt};RRN:{rrn};AC:{auth_code}",
            "Amount": amount,
            "Slip": slip,
            "IdCommand": payload.get("IdCommand"),
            "NumDevice": payload.get("NumDevice") or 1,
        }

    def _reversal(
        self, payload: Dict[str, Any], message: str, slip: str
    ) -> Dict[str, Any]:
        return {
            "Status": KkmStatus.OK,
            "Error": "",
            "Message": message,
            "Command": payload["Command"],
            "UniversalID": payload.get("UniversalID"),
            "Amount": payload.get("Amount"),
            "Slip": slip,
            "IdCommand": payload.get("IdCommand"),
            "NumDevice": payload.get("NumDevice") or 1,
        }

    def _return_payment(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._reversal(payload, "Refund completed", "Refund slip")

    def _cancel_payment(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._reversal(payload, "Payment cancelled", "Cancellation slip")

    def _register_check(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if self._fails(CHECK_FAILURE_RATE):
            return self._error(payload, "Printer is out of paper")

        cash = payload.get("Cash") or 0
        electronic = payload.get("ElectronicPayment") or 0
        return {
            "Status": KkmStatus.OK,
            "Error": "",
            "Message": "Receipt printed",
            "Command": CommandNames.REGISTER_CHECK,
            "CheckNumber": self._rng.randint(1, 1000),
            "SessionNumber": self._rng.randint(1, 100),
            "SessionCheckNumber": self._rng.randint(1, 50),
            "URL": OFD_RECEIPT_URL,
            "QRCode": self._qr_code(cash + electronic),
            "Cash": cash,
            "ElectronicPayment": electronic,
            "AdvancePayment": 0,
            "Credit": 0,
            "CashProvision": 0,
            "IdCommand": payload.get("IdCommand"),
            "NumDevice": payload.get("NumDevice") or 1,
        }
