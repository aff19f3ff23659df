"""Gas cost helpers for estimate reports."""

from __future__ import annotations

from dataclasses import dataclass

from .model import Transaction


@dataclass(frozen=True)
class CostEstimate:
    """Wei cost for a gas estimate.

    ``is_upper_bound`` is true when the cost was derived from
    ``maxFeePerGas`` rather than a fixed legacy gas price.
    """

    gas: int
    price_per_gas: int
    cost_wei: int
    is_upper_bound: bool


def format_gas_hex(gas: int) -> str:
    return hex(gas)


def estimate_cost(gas: int, transaction: Transaction) -> CostEstimate | None:
    """Return the wei cost of ``gas`` under the transaction's pricing.

    A legacy ``gas_price`` wins when both pricing models are set. Returns
    ``None`` when neither is set.
    """

    if transaction.gas_price:
        return CostEstimate(
            gas=gas,
            price_per_gas=transaction.gas_price,
            cost_wei=gas * transaction.gas_price,
            is_upper_bound=False,
        )
    if transaction.max_fee_per_gas:
        return CostEstimate(
            gas=gas,
            price_per_gas=transaction.max_fee_per_gas,
            cost_wei=gas * transaction.max_fee_per_gas,
            is_upper_bound=True,
        )
    return None


def describe_cost(cost: CostEstimate) -> str:
    label = "Estimated cost (max)" if cost.is_upper_bound else "Estimated cost"
    return f"{label}: {cost.cost_wei} wei"
