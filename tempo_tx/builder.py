"""Interactive and flag-driven construction of :class:`Transaction` records.

Prompts collect each field into local variables and a single frozen
transaction is built at the end, so callers never see a half-filled record.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .flow import next_step_id
from .model import (
    TEMPO_TX_TYPE,
    Call,
    Flow,
    FlowStep,
    Transaction,
    is_zero_address,
    parse_uint,
)
from .prompts import (
    prompt_address,
    prompt_amount,
    prompt_confirm,
    prompt_hex,
    prompt_int,
    prompt_multi_select,
    prompt_optional_str,
    prompt_select,
    prompt_str,
)
from .rpc_client import RPCError, RPCTransportError
from .simulator import ChainClient
from .storage import load_transaction
from .tokens import TIP20_TOKENS, Token, calculate_token_amount, encode_transfer_calldata

logger = logging.getLogger(__name__)

KIND_TOKEN_TRANSFER = "token-transfer"
KIND_CONTRACT_CALL = "contract-call"
KIND_OTHER = "other"

SOURCE_FILE = "file"
SOURCE_MANUAL = "manual"


def build_token_transfer(
    from_address: str | None,
    token: Token,
    recipient: str,
    amount_input: str,
    batched: bool = True,
) -> Transaction:
    """Return a transaction moving ``amount_input`` of ``token`` to ``recipient``.

    With ``batched=False`` the transfer uses the legacy ``to``/``value``/``data``
    fields instead of a single-call batch.
    """

    amount = calculate_token_amount(amount_input, token.decimals)
    calldata = encode_transfer_calldata(recipient, amount)
    if not batched:
        return Transaction(from_address=from_address, to=token.address, value=0, data=calldata)
    call = Call(to=token.address, value=0, input=calldata)
    return Transaction(
        tx_type=TEMPO_TX_TYPE,
        calls=(call,),
        nonce_key=0,
        from_address=from_address,
    )


def transaction_from_flags(
    from_address: str,
    to: str | None = None,
    data: str | None = None,
    value: str | None = None,
) -> Transaction:
    """Build a legacy-encoded transaction from ``--address/--to/--data/--value``."""

    return Transaction(
        from_address=from_address,
        to=to,
        data=data,
        value=parse_uint(value, "--value"),
    )


def _token_choices() -> list[tuple[str, Token]]:
    return [
        (f"{token.name} ({token.symbol}) - {token.address}", token)
        for token in TIP20_TOKENS.values()
    ]


def prompt_token_transfer(from_address: str | None, batched: bool = True) -> Transaction:
    print("\nTIP-20 Token Transfer\n")
    print("Note: Tempo uses TIP-20 tokens instead of native value transfers.\n")
    token = prompt_select("Select token:", _token_choices())
    recipient = prompt_address("Recipient address")
    amount_input = prompt_amount(f"Amount (in {token.symbol}, e.g., 100 or 100.5)")
    transaction = build_token_transfer(
        from_address, token, recipient, amount_input, batched=batched
    )
    calldata = transaction.calls[0].input if transaction.calls else transaction.data
    print(f"\nGenerated transfer calldata for {amount_input} {token.symbol} to {recipient}")
    print(f"Token contract: {token.address}")
    print(f"Calldata: {calldata}")
    return transaction


def prompt_manual_transaction(batched: bool = True) -> Transaction:
    """Prompt for a single call, batched or as legacy fields."""

    from_address = prompt_address("From address")
    to = prompt_address("To address") if prompt_confirm("Does this transaction have a recipient?") else None
    data = (
        prompt_hex("Calldata (hex)", required=True)
        if prompt_confirm("Does this transaction include calldata?")
        else None
    )
    value = (
        prompt_int("Value (in wei)", required=True)
        if prompt_confirm("Does this transaction send value?")
        else None
    )
    if not batched:
        return Transaction(from_address=from_address, to=to, data=data, value=value)
    return Transaction(
        tx_type=TEMPO_TX_TYPE,
        from_address=from_address,
        calls=(Call(to=to, value=value, input=data),),
        nonce_key=0,
    )


def prompt_transaction_file() -> Transaction:
    while True:
        filename = prompt_str("Transaction file path")
        if Path(filename).exists():
            return load_transaction(filename)
        print("File does not exist")


def prompt_transaction_source(batched: bool = True) -> Transaction:
    """Ask whether to load the transaction from a file, a token transfer or manual entry.

    ``batched`` selects the encoding for prompted transactions; files are
    loaded as written.
    """

    source = prompt_select(
        "Load transaction from:",
        [
            ("File", SOURCE_FILE),
            ("TIP-20 Token Transfer", KIND_TOKEN_TRANSFER),
            ("Enter manually", SOURCE_MANUAL),
        ],
    )
    if source == SOURCE_FILE:
        return prompt_transaction_file()
    if source == KIND_TOKEN_TRANSFER:
        return prompt_token_transfer(prompt_address("From address"), batched=batched)
    return prompt_manual_transaction(batched=batched)


def _prompt_custom_call(kind: str) -> Call:
    to = None
    if prompt_confirm("Does this transaction have a recipient?"):
        to = prompt_address("To address")

    value = None
    if kind == KIND_CONTRACT_CALL and prompt_confirm("Does this transaction send native value?"):
        print(
            "\nNote: Tempo may not support native value transfers. "
            "Use TIP-20 tokens for transfers instead."
        )
        requested = prompt_int("Value (in wei)")
        if requested:
            if is_zero_address(to):
                print(
                    "\nWarning: Sending value to the zero address is not allowed on Tempo. "
                    "Value will be set to 0."
                )
                value = 0
            else:
                value = requested

    data = None
    if prompt_confirm("Does this transaction include calldata?"):
        data = prompt_hex("Calldata (hex)", required=True)
    return Call(to=to, value=value, input=data)


def _prompt_nonce(client: ChainClient, from_address: str) -> int | None:
    try:
        current = client.get_transaction_count(from_address)
    except (RPCError, RPCTransportError) as exc:
        logger.debug("Nonce lookup failed for %s: %s", from_address, exc)
        print("Could not fetch nonce automatically")
        return None
    print(f"\nCurrent nonce: {current}")
    if prompt_confirm("Use custom nonce?"):
        return prompt_int("Nonce", required=True)
    return int(current)


def build_transaction_interactively(
    client: ChainClient, from_address: str | None = None
) -> Transaction:
    """Walk the user through every field of a batched Tempo transaction."""

    print("\nBuilding Transaction\n")
    if from_address:
        print(f"From: {from_address}")
    else:
        from_address = prompt_address("From address")

    kind = prompt_select(
        "Transaction type:",
        [
            ("TIP-20 Token Transfer", KIND_TOKEN_TRANSFER),
            ("Contract Call (with calldata)", KIND_CONTRACT_CALL),
            ("Other / Custom", KIND_OTHER),
        ],
    )
    if kind == KIND_TOKEN_TRANSFER:
        calls = prompt_token_transfer(from_address).calls
    else:
        calls = (_prompt_custom_call(kind),)

    nonce = _prompt_nonce(client, from_address)

    nonce_key = 0
    if prompt_confirm("Use custom nonce key? (0 = protocol nonce, >0 = user nonce)"):
        nonce_key = prompt_int("Nonce key", required=True)

    max_fee_per_gas = None
    max_priority_fee_per_gas = None
    gas = None
    if prompt_confirm("Customize gas settings?"):
        max_fee_per_gas = prompt_int("Max fee per gas (wei)")
        max_priority_fee_per_gas = prompt_int("Max priority fee per gas (wei)")
        gas = prompt_int("Gas limit")

    return Transaction(
        tx_type=TEMPO_TX_TYPE,
        calls=calls,
        nonce_key=nonce_key,
        from_address=from_address,
        nonce=nonce,
        gas=gas,
        max_fee_per_gas=max_fee_per_gas,
        max_priority_fee_per_gas=max_priority_fee_per_gas,
    )


def build_flow_interactively(client: ChainClient) -> Flow:
    """Collect a flow name, description and one or more transaction steps."""

    print("\nBuilding Multi-Step Transaction Flow\n")
    flow = Flow(
        name=prompt_str("Flow name", default="My Transaction Flow"),
        description=prompt_optional_str("Flow description (optional)"),
    )
    while True:
        print(f"\nStep {len(flow.steps) + 1}\n")
        step_name = prompt_str("Step name", default=f"Step {len(flow.steps) + 1}")
        step_id = next_step_id(flow)
        transaction = build_transaction_interactively(client)

        dependencies: tuple[str, ...] = ()
        if flow.steps and prompt_confirm("Does this step depend on previous steps?"):
            dependencies = tuple(
                prompt_multi_select(
                    "Select dependent steps:",
                    [(step.name, step.id) for step in flow.steps],
                )
            )
        flow.steps.append(
            FlowStep(id=step_id, name=step_name, transaction=transaction, dependencies=dependencies)
        )
        if not prompt_confirm("Add another step?"):
            return flow
