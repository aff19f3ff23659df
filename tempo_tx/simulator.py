"""Validate, gas-estimate and simulate transactions against a chain client.

Only read-only RPC methods are used. When a transaction carries a batch of
calls, only the first call is estimated or simulated; the zero-address check
still covers every call in the batch.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Dict, Protocol

from .model import BatchedEncoding, Transaction, TransactionResult, is_zero_address
from .rpc_client import RPCError

logger = logging.getLogger(__name__)

ZERO_ADDRESS_VALUE_REASON = "Sending value to the zero address is not allowed"
NATIVE_VALUE_UNSUPPORTED_MESSAGE = (
    "Tempo does not support native value transfers. Use TIP-20 tokens for transfers instead."
)
# Fallback text match; node error wording is not a stable interface.
NATIVE_VALUE_ERROR_TEXT = "value transfer not allowed"


class ChainClient(Protocol):
    def eth_call(self, params: Dict[str, Any]) -> Dict[str, Any]: ...

    def estimate_gas(self, params: Dict[str, Any]) -> int: ...

    def get_transaction_count(self, address: str) -> int: ...


class TransactionValidationError(ValueError):
    """Raised when a transaction must not be sent to the chain for estimation."""


class GasEstimationError(RuntimeError):
    """Raised when a gas estimate cannot be produced."""


class NativeValueTransferError(GasEstimationError):
    """Raised when the chain refuses a native value transfer."""

    def __init__(self) -> None:
        super().__init__(NATIVE_VALUE_UNSUPPORTED_MESSAGE)


class ChainErrorKind(enum.Enum):
    NATIVE_VALUE_UNSUPPORTED = "native-value-unsupported"
    OTHER = "other"


def classify_chain_error(exc: BaseException) -> ChainErrorKind:
    """Map a chain client failure onto a :class:`ChainErrorKind`.

    Structured RPC error data is checked first; the message substring match
    is the fallback for nodes that only report text.
    """

    if isinstance(exc, RPCError):
        data = exc.data
        if isinstance(data, dict):
            data = data.get("reason") or data.get("message")
        if isinstance(data, str) and NATIVE_VALUE_ERROR_TEXT in data.lower():
            return ChainErrorKind.NATIVE_VALUE_UNSUPPORTED
    if NATIVE_VALUE_ERROR_TEXT in str(exc).lower():
        return ChainErrorKind.NATIVE_VALUE_UNSUPPORTED
    return ChainErrorKind.OTHER


def _error_message(exc: BaseException) -> str:
    if isinstance(exc, RPCError):
        return exc.message
    return str(exc) or exc.__class__.__name__


def validate_transaction(transaction: Transaction) -> None:
    """Reject transactions that send a positive value to the zero address."""

    for to, value in transaction.targets():
        if is_zero_address(to) and value is not None and value > 0:
            raise TransactionValidationError(ZERO_ADDRESS_VALUE_REASON)


def derive_call_params(transaction: Transaction) -> Dict[str, Any]:
    """Build the ``{to, data, value, account}`` request for the chain client.

    Absent fields are left out of the mapping.
    """

    encoding = transaction.encoding
    if isinstance(encoding, BatchedEncoding):
        first = encoding.calls[0]
        to, data, value = first.to, first.input, first.value
    else:
        to, data, value = encoding.to, encoding.data, encoding.value

    params: Dict[str, Any] = {}
    if to is not None:
        params["to"] = to
    if data is not None:
        params["data"] = data
    if value is not None:
        params["value"] = value
    if transaction.from_address:
        params["account"] = transaction.from_address
    return params


def estimate_gas(client: ChainClient, transaction: Transaction) -> int:
    """Return the node's gas estimate for ``transaction``.

    Raises :class:`GasEstimationError` (or its subclass
    :class:`NativeValueTransferError`) on every failure.
    """

    try:
        validate_transaction(transaction)
    except TransactionValidationError as exc:
        raise GasEstimationError(f"Gas estimation failed: {exc}") from exc

    params = derive_call_params(transaction)
    logger.debug("Estimating gas with %s", params)
    try:
        return int(client.estimate_gas(params))
    except Exception as exc:
        if classify_chain_error(exc) is ChainErrorKind.NATIVE_VALUE_UNSUPPORTED:
            raise NativeValueTransferError() from exc
        raise GasEstimationError(f"Gas estimation failed: {_error_message(exc)}") from exc


def _simulate(client: ChainClient, transaction: Transaction) -> TransactionResult:
    try:
        validate_transaction(transaction)
    except TransactionValidationError as exc:
        return TransactionResult.failure(str(exc))

    params = derive_call_params(transaction)
    logger.debug("Simulating call with %s", params)
    try:
        response = client.eth_call(params)
    except Exception as exc:
        if classify_chain_error(exc) is ChainErrorKind.NATIVE_VALUE_UNSUPPORTED:
            return TransactionResult.failure(NATIVE_VALUE_UNSUPPORTED_MESSAGE)
        return TransactionResult.failure(_error_message(exc))

    data = (response or {}).get("data")
    return TransactionResult.ok(return_data=data if data and data != "0x" else None)


def simulate_transaction(client: ChainClient, transaction: Transaction) -> TransactionResult:
    """Preview ``transaction`` with a read-only call. Never raises."""

    try:
        return _simulate(client, transaction)
    except Exception as exc:
        logger.exception("Unexpected simulation failure")
        return TransactionResult.failure(_error_message(exc))
