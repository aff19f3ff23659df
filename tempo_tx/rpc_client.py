"""JSON-RPC client for Tempo-style EVM nodes.

The client backs the estimator, simulator and interactive builder. It only
exposes the read paths the tool needs (``eth_call``, ``eth_estimateGas``,
``eth_getTransactionCount`` and ``eth_blockNumber``); nothing here
signs or broadcasts. Connection settings come from
:func:`tempo_tx.config.load_rpc_config`.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Dict, Mapping, Optional

import requests
from requests import RequestException, Response

from .config import ConfigurationError, RPCConfig

logger = logging.getLogger(__name__)

__all__ = [
    "ConfigurationError",
    "RPCError",
    "RPCTransportError",
    "TempoRPCClient",
    "format_rpc_hint",
    "to_rpc_call_object",
]


class RPCError(RuntimeError):
    """Raised when the node responds with a JSON-RPC error object."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(f"RPC error {code}: {message}")
        self.code = code
        self.message = message
        self.data = data


class RPCTransportError(RuntimeError):
    """Raised when the RPC endpoint is unreachable or returns malformed data."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def format_rpc_hint(error_obj: dict[str, Any] | RPCError | None) -> str | None:
    """Return a human-friendly hint for common EVM JSON-RPC errors.

    Only well-known failure modes get a hint; everything else returns
    ``None`` and the caller shows the raw error.
    """

    if error_obj is None:
        return None

    code = None
    message = ""
    if isinstance(error_obj, RPCError):
        code = error_obj.code
        message = error_obj.message
    elif isinstance(error_obj, dict):
        code = error_obj.get("code")
        message = str(error_obj.get("message", ""))

    lowered = message.lower()
    if "value transfer not allowed" in lowered:
        return "Tempo rejects native value transfers. Send a TIP-20 token transfer instead."
    if code == 3 or "execution reverted" in lowered:
        return (
            "The call reverted. Check the calldata, the target contract, and that the sender "
            "holds enough of the token being moved."
        )
    if "insufficient funds" in lowered:
        return "The sender cannot cover gas or value. Fund the account or lower the fee settings."
    if "nonce too low" in lowered:
        return "The nonce is already used. Re-run without a custom nonce to fetch the current one."
    if code == -32601:
        return "The node does not expose this method. Check that --rpc-url points at a Tempo node."
    return None


def to_rpc_call_object(params: Mapping[str, Any]) -> Dict[str, Any]:
    """Translate ``{to, data, value, account}`` into a JSON-RPC call object."""

    call_object: Dict[str, Any] = {}
    if params.get("account") is not None:
        call_object["from"] = params["account"]
    if params.get("to") is not None:
        call_object["to"] = params["to"]
    data = params.get("data", params.get("input"))
    if data is not None:
        call_object["data"] = data
    if params.get("value") is not None:
        call_object["value"] = hex(int(params["value"]))
    return call_object


def _parse_quantity(raw: Any, *, method: str) -> int:
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        try:
            return int(raw, 16) if raw.lower().startswith("0x") else int(raw)
        except ValueError:
            pass
    raise RPCTransportError(f"{method} returned a non-numeric result: {raw!r}")


class TempoRPCClient:
    """Typed JSON-RPC client for Tempo compatible nodes.

    Each helper maps directly to an RPC method and returns parsed results.
    Connection defaults can be overridden via ``TEMPO_RPC_URL`` (or
    ``RPC_URL``), a ``.env`` file, or the ``rpc`` section of
    ``~/.tempo-tx.yaml``.
    """

    def __init__(self, config: RPCConfig) -> None:
        self.config = config
        self._session = requests.Session()

    def call(self, method: str, params: Optional[list[Any]] = None) -> Any:
        """Perform a JSON-RPC request."""

        payload = {
            "jsonrpc": "2.0",
            "id": str(uuid.uuid4()),
            "method": method,
            "params": params or [],
        }
        logger.debug("RPC call %s params=%s", method, params)
        try:
            response = self._session.post(
                self.config.url,
                data=json.dumps(payload),
                headers={"content-type": "application/json"},
                timeout=self.config.timeout,
            )
        except RequestException as exc:
            logger.error(
                "RPC connection failed: %s",
                exc,
                exc_info=logger.isEnabledFor(logging.DEBUG),
            )
            raise RPCTransportError(
                f"RPC connection to {self.config.url} failed. Check TEMPO_RPC_URL or --rpc-url."
            ) from exc
        try:
            body = self._decode_body(response)
        except ValueError as exc:
            logger.debug("RPC JSON parse error: %s", response.text, exc_info=True)
            raise RPCTransportError("RPC server returned malformed JSON") from exc
        if isinstance(body, dict) and body.get("error"):
            error = body["error"]
            raise RPCError(
                error.get("code", -1), error.get("message", "unknown"), error.get("data")
            )
        if not response.ok:
            logger.error("RPC HTTP error %s from %s", response.status_code, response.url)
            raise RPCTransportError(
                f"RPC server returned HTTP {response.status_code}; check the endpoint URL.",
                status_code=response.status_code,
            )
        if not isinstance(body, dict):
            raise RPCTransportError("RPC server returned an unexpected payload")
        return body.get("result")

    @staticmethod
    def _decode_body(response: Response) -> Any:
        # Non-2xx responses may still carry a JSON-RPC error body.
        try:
            return response.json()
        except ValueError:
            if not response.ok:
                return None
            raise

    # Chain service ------------------------------------------------------

    def eth_call(self, params: Mapping[str, Any], block: str = "latest") -> Dict[str, Any]:
        """Run a read-only call and return ``{"data": <hex or None>}``."""

        result = self.call("eth_call", [to_rpc_call_object(params), block])
        return {"data": result}

    def estimate_gas(self, params: Mapping[str, Any]) -> int:
        result = self.call("eth_estimateGas", [to_rpc_call_object(params)])
        return _parse_quantity(result, method="eth_estimateGas")

    def get_transaction_count(self, address: str, block: str = "latest") -> int:
        result = self.call("eth_getTransactionCount", [address, block])
        return _parse_quantity(result, method="eth_getTransactionCount")

    # Chain info ---------------------------------------------------------

    def block_number(self) -> int:
        return _parse_quantity(self.call("eth_blockNumber"), method="eth_blockNumber")
