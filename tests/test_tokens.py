from __future__ import annotations

import pytest

from tempo_tx.tokens import (
    AMOUNT_PATTERN,
    TIP20_TOKENS,
    UnknownTokenError,
    calculate_token_amount,
    encode_transfer_calldata,
    get_token,
)

RECIPIENT = "0x" + "22" * 20


@pytest.mark.parametrize(
    "amount, decimals, expected",
    [
        ("100", 6, 100_000_000),
        ("100.5", 6, 100_500_000),
        ("0.000001", 6, 1),
        ("1.239", 2, 123),
        ("1.9999999", 2, 199),
        ("7.5", 0, 7),
        ("0", 18, 0),
    ],
)
def test_calculate_token_amount_truncates(amount, decimals, expected) -> None:
    assert calculate_token_amount(amount, decimals) == expected


def test_calculate_token_amount_handles_large_values() -> None:
    assert calculate_token_amount("123456789012345678901234567890.5", 18) == int(
        "123456789012345678901234567890" + "5" + "0" * 17
    )


def test_calculate_token_amount_rejects_malformed_input() -> None:
    with pytest.raises(ValueError):
        calculate_token_amount("12a", 6)


def test_amount_pattern_matches_prompt_rules() -> None:
    assert AMOUNT_PATTERN.match("100")
    assert AMOUNT_PATTERN.match("100.5")
    assert not AMOUNT_PATTERN.match("100.")
    assert not AMOUNT_PATTERN.match(".5")
    assert not AMOUNT_PATTERN.match("-1")


def test_encode_transfer_calldata_layout() -> None:
    calldata = encode_transfer_calldata(RECIPIENT, 100_000_000)

    assert calldata == (
        "0xa9059cbb" + "00" * 12 + "22" * 20 + format(100_000_000, "064x")
    )
    assert len(calldata) == 2 + 8 + 64 * 2


def test_registry_entries() -> None:
    alpha = get_token("AlphaUSD")
    assert alpha.symbol == "AUSD"
    assert alpha.decimals == 6
    assert alpha.address == "0x20c0000000000000000000000000000000000001"
    assert {token.symbol for token in TIP20_TOKENS.values()} == {"AUSD", "BUSD", "TUSD"}


def test_unknown_token_lists_known_keys() -> None:
    with pytest.raises(UnknownTokenError) as excinfo:
        get_token("GammaUSD")
    assert "AlphaUSD" in str(excinfo.value)
