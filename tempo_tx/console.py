"""Interactive menu for tempo-tx, shown when the CLI runs without a command."""

from __future__ import annotations

import logging
import os
import textwrap
import traceback
from typing import Sequence

from . import cli
from .config import ConfigurationError, load_rpc_config
from .rpc_client import RPCError, RPCTransportError, TempoRPCClient
from .prompts import prompt_confirm

logger = logging.getLogger(__name__)

MENU_ACTIONS = {
    "1": "build",
    "2": "simulate",
    "3": "estimate",
    "4": "flow",
}


def _should_debug() -> bool:
    return os.environ.get(cli.DEBUG_ENV) == "1"


def run_tempo_cli(args: Sequence[str]) -> int:
    """Run a CLI command in-process and return its exit code."""

    try:
        cli.main(list(args))
    except SystemExit as exc:  # parser.exit surfaces as SystemExit
        return int(exc.code or 0)
    return 0


def _get_block_height(rpc_url: str | None = None) -> int | None:
    """Fetch the current block height via RPC, returning None on error."""

    try:
        overrides = {"url": rpc_url} if rpc_url else None
        return TempoRPCClient(load_rpc_config(overrides=overrides)).block_number()
    except (ConfigurationError, RPCError, RPCTransportError):
        if _should_debug():
            traceback.print_exc()
        return None


def _render_menu(rpc_url: str | None = None) -> None:
    block_height = _get_block_height(rpc_url)
    block_line = (
        f"Current block height: {block_height}"
        if block_height is not None
        else "Block height: unavailable (RPC)"
    )
    print(
        "=" * 44
        + "\nTempo Transaction Builder & Simulator\n"
        + "=" * 44
        + f"\n{block_line}\n"
        + textwrap.dedent(
            """
            [1] Build Transaction - Create a new transaction interactively
            [2] Simulate Transaction - Test a transaction before execution
            [3] Estimate Gas - Get gas estimate for a transaction
            [4] Multi-Step Flow - Build complex transaction sequences
            [H] Help
            [Q] Quit
            --------
            """
        )
    )


def handle_help() -> None:
    print(
        textwrap.dedent(
            """
            tempo-tx help

            Transactions are only built, estimated and simulated here; use a
            wallet or the explorer to sign and send them.

            Configuration:
              * TEMPO_RPC_URL (or RPC_URL) - JSON-RPC endpoint
              * ~/.tempo-tx.yaml with an 'rpc:' section, or --config PATH
              * TEMPO_TX_DEBUG=1 for debug logging
            """
        )
    )


def console_main(global_args: Sequence[str] = (), rpc_url: str | None = None) -> None:
    """Launch the interactive menu loop.

    ``global_args`` are prepended to every command the menu dispatches.
    """

    while True:
        _render_menu(rpc_url)
        selection = input("Select an option: ").strip().lower()
        if selection in {"q", "quit"}:
            print("Goodbye!")
            return
        if selection in MENU_ACTIONS:
            code = run_tempo_cli([*global_args, MENU_ACTIONS[selection]])
            logger.debug("Command %s finished with exit code %s", MENU_ACTIONS[selection], code)
        elif selection in {"h", "?"}:
            handle_help()
        else:
            print("Invalid selection, please try again.\n")
            continue
        if not prompt_confirm("Would you like to do something else?", default=True):
            print("Goodbye!")
            return
