from tempo_tx.fees import CostEstimate, describe_cost, estimate_cost, format_gas_hex
from tempo_tx.model import Transaction


def test_legacy_gas_price_wins() -> None:
    cost = estimate_cost(21000, Transaction(gas_price=3, max_fee_per_gas=10))

    assert cost == CostEstimate(gas=21000, price_per_gas=3, cost_wei=63000, is_upper_bound=False)
    assert describe_cost(cost) == "Estimated cost: 63000 wei"


def test_fee_market_cost_is_upper_bound() -> None:
    cost = estimate_cost(21000, Transaction(max_fee_per_gas=2**200))

    assert cost.is_upper_bound
    assert cost.cost_wei == 21000 * 2**200
    assert describe_cost(cost).startswith("Estimated cost (max): ")


def test_no_pricing_means_no_cost() -> None:
    assert estimate_cost(21000, Transaction()) is None


def test_format_gas_hex() -> None:
    assert format_gas_hex(21000) == "0x5208"
