"""Known TIP-20 tokens, amount scaling and transfer calldata."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector

TRANSFER_SIGNATURE = "transfer(address,uint256)"
AMOUNT_PATTERN = re.compile(r"^\d+(\.\d+)?$")


class UnknownTokenError(KeyError):
    """Raised when a token key is not in the registry."""


@dataclass(frozen=True)
class Token:
    name: str
    symbol: str
    address: str
    decimals: int


TIP20_TOKENS: Dict[str, Token] = {
    "AlphaUSD": Token(
        name="AlphaUSD",
        symbol="AUSD",
        address="0x20c0000000000000000000000000000000000001",
        decimals=6,
    ),
    "BetaUSD": Token(
        name="BetaUSD",
        symbol="BUSD",
        address="0x20c0000000000000000000000000000000000002",
        decimals=6,
    ),
    "ThetaUSD": Token(
        name="ThetaUSD",
        symbol="TUSD",
        address="0x20c0000000000000000000000000000000000003",
        decimals=6,
    ),
}


def get_token(key: str) -> Token:
    """Return the registry entry stored under ``key``."""

    try:
        return TIP20_TOKENS[key]
    except KeyError:
        known = ", ".join(sorted(TIP20_TOKENS))
        raise UnknownTokenError(f"Unknown token {key!r}; known tokens: {known}") from None


def calculate_token_amount(amount: str, decimals: int) -> int:
    """Scale a decimal string such as ``"100.5"`` into integer token units.

    Fractional digits beyond ``decimals`` are dropped, never rounded. The
    input is expected to match :data:`AMOUNT_PATTERN`; anything else fails in
    the final ``int`` parse.
    """

    whole, _, fraction = amount.partition(".")
    adjusted = fraction.ljust(decimals, "0")[:decimals]
    return int((whole or "0") + adjusted)


def encode_transfer_calldata(to: str, amount: int) -> str:
    """Return ``transfer(to, amount)`` calldata as a ``0x`` hex string."""

    selector = function_signature_to_4byte_selector(TRANSFER_SIGNATURE)
    arguments = encode(["address", "uint256"], [to, amount])
    return "0x" + (selector + arguments).hex()
