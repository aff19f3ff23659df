"""Tempo transaction builder and simulator."""

from .model import (
    TEMPO_TX_TYPE,
    ZERO_ADDRESS,
    BatchedEncoding,
    Call,
    Flow,
    FlowStep,
    LegacyEncoding,
    Transaction,
    TransactionResult,
)
from .simulator import (
    GasEstimationError,
    NativeValueTransferError,
    TransactionValidationError,
    derive_call_params,
    estimate_gas,
    simulate_transaction,
    validate_transaction,
)
from .tokens import (
    TIP20_TOKENS,
    Token,
    calculate_token_amount,
    encode_transfer_calldata,
    get_token,
)

__all__ = [
    "TEMPO_TX_TYPE",
    "ZERO_ADDRESS",
    "BatchedEncoding",
    "Call",
    "Flow",
    "FlowStep",
    "LegacyEncoding",
    "Transaction",
    "TransactionResult",
    "GasEstimationError",
    "NativeValueTransferError",
    "TransactionValidationError",
    "derive_call_params",
    "estimate_gas",
    "simulate_transaction",
    "validate_transaction",
    "TIP20_TOKENS",
    "Token",
    "calculate_token_amount",
    "encode_transfer_calldata",
    "get_token",
]
