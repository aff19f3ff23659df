"""Domain models for tempo-tx transactions, simulation results and flows.

A :class:`Transaction` can carry two encodings: the Tempo ``0x76`` batch of
:class:`Call` entries, or the legacy flat ``to``/``value``/``data`` triple.
Files written by other tools may populate both, so the record keeps every
field and :attr:`Transaction.encoding` decides which one is in effect.

The ``to_dict``/``from_dict`` helpers produce the persisted JSON shape. All
unsigned 256-bit quantities are written as decimal strings so they survive
JSON readers that parse numbers as floats.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterator, List, Mapping, Tuple, Union

TEMPO_TX_TYPE = 0x76
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def is_zero_address(address: str | None) -> bool:
    return address is not None and address.lower() == ZERO_ADDRESS


def parse_uint(raw: Any, field_name: str) -> int | None:
    """Parse an unsigned integer from a JSON value.

    Accepts JSON integers, decimal strings and ``0x`` hex strings. ``None``
    and the empty string mean "absent".
    """

    if raw is None or raw == "":
        return None
    if isinstance(raw, bool):
        raise ValueError(f"{field_name} must be an integer, not a boolean")
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str):
        text = raw.strip()
        try:
            value = int(text, 16) if text.lower().startswith("0x") else int(text, 10)
        except ValueError as exc:
            raise ValueError(f"{field_name} is not an integer: {raw!r}") from exc
    else:
        raise ValueError(f"{field_name} must be an integer or numeric string: {raw!r}")
    if value < 0:
        raise ValueError(f"{field_name} must not be negative: {raw!r}")
    return value


def _parse_int(raw: Any, field_name: str) -> int | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, bool):
        raise ValueError(f"{field_name} must be an integer, not a boolean")
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field_name} is not an integer: {raw!r}") from exc


def _require(data: Mapping[str, Any], key: str, context: str) -> Any:
    if key not in data:
        raise ValueError(f"{context} is missing required field {key!r}")
    return data[key]


def _optional_str(data: Mapping[str, Any], key: str, context: str) -> str | None:
    raw = data.get(key)
    if raw is None or isinstance(raw, str):
        return raw
    raise ValueError(f"{context} field {key!r} must be a string, got {raw!r}")


@dataclass(frozen=True)
class Call:
    """One call inside a batched transaction. ``to=None`` creates a contract."""

    to: str | None = None
    value: int | None = None
    input: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.to is not None:
            payload["to"] = self.to
        if self.value is not None:
            payload["value"] = str(self.value)
        if self.input is not None:
            payload["input"] = self.input
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Call":
        if not isinstance(data, Mapping):
            raise ValueError(f"Call entries must be JSON objects, got {data!r}")
        return cls(
            to=_optional_str(data, "to", "Call"),
            value=parse_uint(data.get("value"), "call.value"),
            input=_optional_str(data, "input", "Call"),
        )


@dataclass(frozen=True)
class BatchedEncoding:
    calls: Tuple[Call, ...]


@dataclass(frozen=True)
class LegacyEncoding:
    to: str | None
    value: int | None
    data: str | None


TransactionEncoding = Union[BatchedEncoding, LegacyEncoding]


@dataclass(frozen=True)
class Transaction:
    """A pending transaction as composed by the builder or read from disk."""

    tx_type: int | None = None
    calls: Tuple[Call, ...] | None = None
    nonce_key: int = 0
    fee_token: str | None = None
    from_address: str | None = None
    to: str | None = None
    value: int | None = None
    data: str | None = None
    gas: int | None = None
    gas_price: int | None = None
    max_fee_per_gas: int | None = None
    max_priority_fee_per_gas: int | None = None
    nonce: int | None = None
    chain_id: int | None = None

    @property
    def encoding(self) -> TransactionEncoding:
        """The encoding in effect: a non-empty ``calls`` batch wins over legacy fields."""

        if self.calls:
            return BatchedEncoding(calls=tuple(self.calls))
        return LegacyEncoding(to=self.to, value=self.value, data=self.data)

    def targets(self) -> Iterator[Tuple[str | None, int | None]]:
        """Yield every ``(to, value)`` pair the transaction would touch."""

        encoding = self.encoding
        if isinstance(encoding, BatchedEncoding):
            for call in encoding.calls:
                yield call.to, call.value
        else:
            yield encoding.to, encoding.value

    def with_gas(self, gas: int) -> "Transaction":
        return replace(self, gas=gas)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.tx_type is not None:
            payload["type"] = self.tx_type
        if self.calls is not None:
            payload["calls"] = [call.to_dict() for call in self.calls]
        payload["nonceKey"] = str(self.nonce_key)
        if self.fee_token is not None:
            payload["feeToken"] = self.fee_token
        for key, value in (
            ("from", self.from_address),
            ("to", self.to),
            ("data", self.data),
        ):
            if value is not None:
                payload[key] = value
        for key, number in (
            ("value", self.value),
            ("gas", self.gas),
            ("gasPrice", self.gas_price),
            ("maxFeePerGas", self.max_fee_per_gas),
            ("maxPriorityFeePerGas", self.max_priority_fee_per_gas),
        ):
            if number is not None:
                payload[key] = str(number)
        if self.nonce is not None:
            payload["nonce"] = self.nonce
        if self.chain_id is not None:
            payload["chainId"] = self.chain_id
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Transaction":
        if not isinstance(data, Mapping):
            raise ValueError("Transaction JSON must be an object")
        raw_calls = data.get("calls")
        calls: Tuple[Call, ...] | None = None
        if raw_calls is not None:
            if not isinstance(raw_calls, list):
                raise ValueError("Transaction 'calls' must be a list")
            calls = tuple(Call.from_dict(entry) for entry in raw_calls)
        nonce_key = parse_uint(data.get("nonceKey"), "nonceKey")
        return cls(
            tx_type=_parse_int(data.get("type"), "type"),
            calls=calls,
            nonce_key=nonce_key if nonce_key is not None else 0,
            fee_token=_optional_str(data, "feeToken", "Transaction"),
            from_address=_optional_str(data, "from", "Transaction"),
            to=_optional_str(data, "to", "Transaction"),
            value=parse_uint(data.get("value"), "value"),
            data=_optional_str(data, "data", "Transaction"),
            gas=parse_uint(data.get("gas"), "gas"),
            gas_price=parse_uint(data.get("gasPrice"), "gasPrice"),
            max_fee_per_gas=parse_uint(data.get("maxFeePerGas"), "maxFeePerGas"),
            max_priority_fee_per_gas=parse_uint(
                data.get("maxPriorityFeePerGas"), "maxPriorityFeePerGas"
            ),
            nonce=_parse_int(data.get("nonce"), "nonce"),
            chain_id=_parse_int(data.get("chainId"), "chainId"),
        )


@dataclass(frozen=True)
class TransactionResult:
    """Outcome of a simulated call; ``error`` is set only when ``success`` is false."""

    success: bool
    return_data: str | None = None
    gas_used: int | None = None
    error: str | None = None

    @classmethod
    def ok(cls, return_data: str | None = None, gas_used: int | None = None) -> "TransactionResult":
        return cls(success=True, return_data=return_data, gas_used=gas_used)

    @classmethod
    def failure(cls, error: str) -> "TransactionResult":
        return cls(success=False, error=error)


@dataclass
class FlowStep:
    """A named transaction within a flow.

    ``dependencies`` lists ids of other steps. They are informational only:
    nothing orders or gates steps by them.
    """

    id: str
    name: str
    transaction: Transaction
    dependencies: Tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "transaction": self.transaction.to_dict(),
        }
        if self.dependencies:
            payload["dependencies"] = list(self.dependencies)
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FlowStep":
        if not isinstance(data, Mapping):
            raise ValueError("Flow steps must be JSON objects")
        step_id = str(_require(data, "id", "Flow step"))
        dependencies = data.get("dependencies") or []
        if not isinstance(dependencies, list):
            raise ValueError(f"Flow step {step_id} dependencies must be a list")
        return cls(
            id=step_id,
            name=str(data.get("name") or step_id),
            transaction=Transaction.from_dict(_require(data, "transaction", f"Flow step {step_id}")),
            dependencies=tuple(str(dep) for dep in dependencies),
        )


@dataclass
class Flow:
    """An ordered list of transaction steps composed together."""

    name: str
    description: str | None = None
    steps: List[FlowStep] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": self.name}
        if self.description:
            payload["description"] = self.description
        payload["steps"] = [step.to_dict() for step in self.steps]
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Flow":
        if not isinstance(data, Mapping):
            raise ValueError("Flow JSON must be an object")
        raw_steps = data.get("steps") or []
        if not isinstance(raw_steps, list):
            raise ValueError("Flow 'steps' must be a list")
        steps = [FlowStep.from_dict(entry) for entry in raw_steps]
        seen: set[str] = set()
        for step in steps:
            if step.id in seen:
                raise ValueError(f"Flow has duplicate step id {step.id!r}")
            seen.add(step.id)
        return cls(
            name=str(_require(data, "name", "Flow")),
            description=data.get("description") or None,
            steps=steps,
        )
