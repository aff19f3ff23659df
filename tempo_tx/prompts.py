"""Line-based prompts that loop until the user enters a valid value."""

from __future__ import annotations

import re
from typing import Sequence, Tuple, TypeVar

from eth_utils import is_address

from .tokens import AMOUNT_PATTERN

T = TypeVar("T")

HEX_PATTERN = re.compile(r"^0x[0-9a-fA-F]*$")
UINT_PATTERN = re.compile(r"^[0-9]+$")


def _is_uint(raw: str) -> bool:
    return bool(UINT_PATTERN.match(raw))


def prompt_str(prompt: str, default: str | None = None) -> str:
    """Prompt for a string value, honoring an optional default."""

    suffix = f" [{default}]" if default is not None else ""
    while True:
        raw = input(f"{prompt}{suffix}: ").strip()
        if raw:
            return raw
        if default is not None:
            return default
        print("Please enter a value or provide a default.")


def prompt_optional_str(prompt: str) -> str | None:
    raw = input(f"{prompt}: ").strip()
    return raw or None


def prompt_address(prompt: str, required: bool = True) -> str | None:
    """Prompt for a 20-byte hex address; mixed-case input must be checksummed."""

    while True:
        raw = input(f"{prompt}: ").strip()
        if not raw and not required:
            return None
        if is_address(raw):
            return raw
        print("Invalid address format. Must be a valid Ethereum address.")


def prompt_hex(prompt: str, required: bool = False) -> str | None:
    while True:
        raw = input(f"{prompt}: ").strip()
        if not raw and not required:
            return None
        if not raw.startswith("0x"):
            print("Must start with 0x")
            continue
        if not HEX_PATTERN.match(raw):
            print("Invalid hex string")
            continue
        return raw


def prompt_int(prompt: str, required: bool = False) -> int | None:
    """Prompt for an unsigned integer of any size, returning ``None`` on blank input."""

    while True:
        raw = input(f"{prompt}: ").strip()
        if not raw and not required:
            return None
        if _is_uint(raw):
            return int(raw)
        print("Invalid number format")


def prompt_amount(prompt: str) -> str:
    """Prompt for a decimal token amount such as ``100`` or ``100.5``."""

    while True:
        raw = input(f"{prompt}: ").strip()
        if not raw:
            print("Amount is required")
            continue
        if not AMOUNT_PATTERN.match(raw):
            print("Invalid number format")
            continue
        return raw


def prompt_confirm(prompt: str, default: bool = False) -> bool:
    hint = "[Y/n]" if default else "[y/N]"
    raw = input(f"{prompt} {hint}: ").strip().lower()
    if not raw:
        return default
    return raw in {"y", "yes"}


def prompt_select(prompt: str, choices: Sequence[Tuple[str, T]]) -> T:
    """Show numbered ``(label, value)`` choices and return the chosen value."""

    if not choices:
        raise ValueError("prompt_select requires at least one choice")
    print(prompt)
    for index, (label, _) in enumerate(choices, start=1):
        print(f"  [{index}] {label}")
    while True:
        raw = input("Select an option: ").strip()
        if _is_uint(raw) and 1 <= int(raw) <= len(choices):
            return choices[int(raw) - 1][1]
        print("Invalid selection, please try again.")


def prompt_multi_select(prompt: str, choices: Sequence[Tuple[str, T]]) -> list[T]:
    """Return the values for a comma-separated list of choice numbers."""

    print(prompt)
    for index, (label, _) in enumerate(choices, start=1):
        print(f"  [{index}] {label}")
    while True:
        raw = input("Enter numbers separated by commas (blank for none): ").strip()
        if not raw:
            return []
        pieces = [piece.strip() for piece in raw.split(",") if piece.strip()]
        if all(_is_uint(piece) and 1 <= int(piece) <= len(choices) for piece in pieces):
            return [choices[int(piece) - 1][1] for piece in pieces]
        print("Invalid selection, please try again.")
