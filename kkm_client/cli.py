"""Command-line interface for kkm-client."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from . import constants
from .client import KkmServerClient
from .commands import KkmCommands
from .config import ConnectionMode, KkmConfig, load_config
from .errors import KkmError
from .logging import configure_logging
from .models import KkmResponse
from .status import KkmStatus

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kkm-client", description="Client for KKM Server fiscal devices"
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=constants.DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {constants.DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--log-level", default=None, help="Override the configured log level"
    )
    parser.add_argument(
        "--device", type=int, default=0, help="Device number (0 = any device)"
    )
    parser.add_argument("--inn", default="", help="INN of the cash register")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("devices", help="List devices known to KKM Server")

    for name, help_text in (
        ("open-shift", "Open a shift"),
        ("close-shift", "Close the current shift"),
    ):
        shift_parser = subparsers.add_parser(name, help=help_text)
        shift_parser.add_argument("--cashier", default="", help="Cashier name")
        shift_parser.add_argument("--cashier-vatin", default="", help="Cashier INN")
        shift_parser.add_argument(
            "--no-print", action="store_true", help="Do not print the report"
        )

    pay_parser = subparsers.add_parser("pay", help="Take a card payment")
    pay_parser.add_argument("amount", type=float)
    pay_parser.add_argument("--receipt-number", default=None)

    for name, help_text in (
        ("refund", "Refund a card payment"),
        ("cancel", "Cancel a card payment"),
    ):
        reversal_parser = subparsers.add_parser(name, help=help_text)
        reversal_parser.add_argument("amount", type=float)
        reversal_parser.add_argument("universal_id", help="UniversalID of the payment")

    result_parser = subparsers.add_parser(
        "result", help="Query the status of a previously issued command"
    )
    result_parser.add_argument("id_command")

    connection_parser = subparsers.add_parser(
        "set-connection", help="Choose how to reach KKM Server"
    )
    connection_parser.add_argument(
        "mode", choices=[mode.value for mode in ConnectionMode]
    )
    connection_parser.add_argument("endpoint", nargs="?", default=None)

    subparsers.add_parser(
        "show-config", help="Print the resolved configuration and exit"
    )

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)
    configure_logging(
        args.log_level or config.logging.level,
        log_path=config.logging.path,
        log_network=config.logging.log_network,
    )

    if args.command == "show-config":
        print(f"Configuration loaded from {config.path!s}\n")
        for section in config.raw.sections():
            print(f"[{section}]")
            for key, value in config.raw[section].items():
                if key == "password" and value:
                    value = "********"
                print(f"{key} = {value}")
            print()
        return 0

    try:
        return asyncio.run(_run(args, config))
    except KkmError as exc:
        LOGGER.error("%s failed: %s", args.command, exc)
        return 1


async def _run(args: argparse.Namespace, config: KkmConfig) -> int:
    async with KkmServerClient.from_config(config) as client:
        if args.command == "set-connection":
            client.set_connection(args.mode, args.endpoint)
            return 0

        commands = KkmCommands(client)
        device = {"num_device": args.device, "inn_kkm": args.inn}

        if args.command == "devices":
            response: KkmResponse = await commands.get_device_list(**device)
        elif args.command in {"open-shift", "close-shift"}:
            operation = (
                commands.open_shift
                if args.command == "open-shift"
                else commands.close_shift
            )
            response = await operation(
                cashier_name=args.cashier,
                cashier_vatin=args.cashier_vatin,
                not_print=args.no_print,
                **device,
            )
        elif args.command == "pay":
            response = await commands.pay_by_payment_card(
                args.amount, receipt_number=args.receipt_number, **device
            )
        elif args.command == "refund":
            response = await commands.return_payment_by_payment_card(
                args.amount, args.universal_id, **device
            )
        elif args.command == "cancel":
            response = await commands.cancel_payment_by_payment_card(
                args.amount, args.universal_id, **device
            )
        elif args.command == "result":
            response = await client.get_result(args.id_command)
        else:
            LOGGER.error("Unknown command: %s", args.command)
            return 1

    print(json.dumps(response.to_payload(), ensure_ascii=False, indent=2))
    print(f"Status: {response.status_text}", file=sys.stderr)
    return 1 if response.status == KkmStatus.ERROR else 0


if __name__ == "__main__":
    sys.exit(main())
