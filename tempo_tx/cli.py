"""Command-line interface for composing and previewing Tempo transactions.

Every command is read-only against the chain: transactions are built,
estimated and simulated, never signed or broadcast. Running ``tempo-tx``
without a command opens the interactive console.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import replace
from typing import Sequence

from .builder import (
    build_flow_interactively,
    build_transaction_interactively,
    prompt_transaction_source,
    transaction_from_flags,
)
from .config import ConfigurationError, load_rpc_config, set_default_config_path
from .fees import describe_cost, estimate_cost, format_gas_hex
from .flow import execute_flow, format_flow_summary, simulate_flow
from .model import Flow, Transaction
from .prompts import prompt_confirm, prompt_str
from .rpc_client import RPCError, RPCTransportError, TempoRPCClient, format_rpc_hint
from .simulator import GasEstimationError, estimate_gas, simulate_transaction
from .storage import (
    StorageError,
    dumps_flow,
    dumps_transaction,
    load_flow,
    load_transaction,
    save_flow,
    save_transaction,
)
from .tokens import UnknownTokenError

logger = logging.getLogger(__name__)

DEBUG_ENV = "TEMPO_TX_DEBUG"


class CLIError(RuntimeError):
    """Raised when CLI arguments are invalid."""


def _add_transaction_source_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-f", "--file", help="Load transaction from a JSON file")
    parser.add_argument("-a", "--address", help="From address")
    parser.add_argument("-t", "--to", help="To address")
    parser.add_argument("-d", "--data", help="Transaction calldata (hex)")
    parser.add_argument("-v", "--value", help="Value in wei")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tempo-tx", description="Tempo Transaction Builder & Simulator CLI"
    )
    parser.add_argument("--config", help="Path to a YAML config file (default: ~/.tempo-tx.yaml)")
    parser.add_argument("--rpc-url", help="JSON-RPC endpoint; overrides TEMPO_RPC_URL")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("console", help="Launch the interactive menu")

    build_parser_ = subparsers.add_parser("build", help="Build a transaction interactively")
    build_parser_.add_argument("-o", "--output", help="Save transaction to file")
    build_parser_.add_argument("-n", "--nonce", type=int, help="Set nonce manually")

    simulate_parser = subparsers.add_parser(
        "simulate", help="Simulate a transaction before execution"
    )
    _add_transaction_source_args(simulate_parser)

    estimate_parser = subparsers.add_parser("estimate", help="Estimate gas for a transaction")
    _add_transaction_source_args(estimate_parser)

    flow_parser = subparsers.add_parser(
        "flow", help="Build and preview multi-step transaction flows"
    )
    flow_parser.add_argument("-f", "--file", help="Load flow from file")
    flow_parser.add_argument(
        "-e", "--execute", action="store_true", help="Execute the flow after building"
    )

    return parser


def _client_from_args(args: argparse.Namespace) -> TempoRPCClient:
    overrides = {"url": args.rpc_url} if getattr(args, "rpc_url", None) else None
    return TempoRPCClient(load_rpc_config(overrides=overrides))


def _resolve_transaction(args: argparse.Namespace, batched: bool = True) -> Transaction:
    if args.file:
        return load_transaction(args.file)
    if args.address:
        return transaction_from_flags(args.address, to=args.to, data=args.data, value=args.value)
    return prompt_transaction_source(batched=batched)


def cmd_build(args: argparse.Namespace, client: TempoRPCClient) -> None:
    transaction = build_transaction_interactively(client)
    if args.nonce is not None:
        transaction = replace(transaction, nonce=args.nonce)

    if transaction.gas is None and transaction.from_address:
        print("\nEstimating gas...")
        try:
            gas = estimate_gas(client, transaction)
        except GasEstimationError as exc:
            print(f"Could not estimate gas: {exc}")
        else:
            transaction = transaction.with_gas(gas)
            print(f"Estimated gas: {gas}")

    print("\nTransaction Summary:\n")
    print(dumps_transaction(transaction))

    if args.output:
        save_transaction(args.output, transaction)
        print(f"\nTransaction saved to {args.output}")


def cmd_simulate(args: argparse.Namespace, client: TempoRPCClient) -> None:
    transaction = _resolve_transaction(args)

    print("\nSimulating Transaction...\n")
    print(dumps_transaction(transaction))

    print("\nEstimating gas...")
    gas = estimate_gas(client, transaction)
    print(f"Estimated gas: {gas}")

    print("\nRunning simulation...")
    result = simulate_transaction(client, transaction)
    if result.success:
        print("\nSimulation successful!\n")
        if result.return_data:
            print(f"Return data: {result.return_data}")
        if result.gas_used:
            print(f"Gas used: {result.gas_used}")
    else:
        print("\nSimulation failed!\n")
        if result.error:
            print(f"Error: {result.error}")


def cmd_estimate(args: argparse.Namespace, client: TempoRPCClient) -> None:
    transaction = _resolve_transaction(args, batched=False)
    if not transaction.from_address:
        raise CLIError("From address is required for gas estimation")

    print("\nEstimating Gas...\n")
    gas = estimate_gas(client, transaction)
    print(f"Estimated gas: {gas}")
    print(f"Estimated gas (hex): {format_gas_hex(gas)}")

    cost = estimate_cost(gas, transaction)
    if cost is not None:
        print(describe_cost(cost))


def _compose_flow(client: TempoRPCClient) -> Flow:
    flow = build_flow_interactively(client)
    if prompt_confirm("Save flow to file?"):
        filename = prompt_str("Filename", default="flow.json")
        save_flow(filename, flow)
        print(f"\nFlow saved to {filename}")
    return flow


def cmd_flow(args: argparse.Namespace, client: TempoRPCClient) -> None:
    flow = load_flow(args.file) if args.file else _compose_flow(client)

    print("\nFlow Summary:\n")
    print(format_flow_summary(flow))

    print("\nSimulating Flow Steps...")
    reports = simulate_flow(client, flow, progress=print)
    passed = sum(1 for report in reports if report.success)
    logger.debug("Flow %r: %d/%d steps passed", flow.name, passed, len(reports))
    logger.debug("Flow after estimation:\n%s", dumps_flow(flow))

    if args.execute:
        execute_flow(flow, progress=print)


COMMANDS = {
    "build": cmd_build,
    "simulate": cmd_simulate,
    "estimate": cmd_estimate,
    "flow": cmd_flow,
}


def _format_error(exc: BaseException) -> str:
    message = str(exc)
    rpc_error = exc if isinstance(exc, RPCError) else exc.__cause__
    hint = format_rpc_hint(rpc_error) if isinstance(rpc_error, RPCError) else None
    if hint:
        message = f"{message}\nHint: {hint}"
    return message


def _configure_logging(debug: bool) -> None:
    level = logging.DEBUG if debug or os.environ.get(DEBUG_ENV) == "1" else logging.INFO
    logging.basicConfig(level=level)


def _global_args(args: argparse.Namespace) -> list[str]:
    forwarded: list[str] = []
    if args.config:
        forwarded += ["--config", args.config]
    if args.rpc_url:
        forwarded += ["--rpc-url", args.rpc_url]
    if args.debug:
        forwarded.append("--debug")
    return forwarded


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.debug)
    try:
        if args.config:
            set_default_config_path(args.config)
        if args.command in (None, "console"):
            from .console import console_main

            console_main(_global_args(args), rpc_url=args.rpc_url)
            return
        handler = COMMANDS.get(args.command)
        if handler is None:  # pragma: no cover - argparse enforces choices
            raise CLIError(f"Unknown command: {args.command}")
        handler(args, _client_from_args(args))
    except (KeyboardInterrupt, EOFError):
        logger.info("Interrupted by user")
        parser.exit(1, "\nerror: aborted by user\n")
    except (
        CLIError,
        ConfigurationError,
        RPCError,
        RPCTransportError,
        StorageError,
        GasEstimationError,
        UnknownTokenError,
        RuntimeError,
        ValueError,
        OSError,
    ) as exc:
        parser.exit(1, f"error: {_format_error(exc)}\n")
    except Exception as exc:
        logger.debug("Unhandled error in %s", args.command, exc_info=True)
        parser.exit(1, f"error: {str(exc) or exc.__class__.__name__}\n")


if __name__ == "__main__":
    main(sys.argv[1:])
