"""Read and write transactions and flows as UTF-8 JSON files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .model import Flow, Transaction

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised when a transaction or flow file cannot be read."""


def dumps_transaction(transaction: Transaction) -> str:
    return json.dumps(transaction.to_dict(), indent=2)


def dumps_flow(flow: Flow) -> str:
    return json.dumps(flow.to_dict(), indent=2)


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise StorageError(f"File does not exist: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def _write_text(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    logger.debug("Wrote %d bytes to %s", len(text), path)
    return path


def load_transaction(path: str | Path) -> Transaction:
    """Load a transaction previously written by :func:`save_transaction`."""

    return Transaction.from_dict(_read_json(Path(path)))


def save_transaction(path: str | Path, transaction: Transaction) -> Path:
    return _write_text(Path(path), dumps_transaction(transaction))


def load_flow(path: str | Path) -> Flow:
    return Flow.from_dict(_read_json(Path(path)))


def save_flow(path: str | Path, flow: Flow) -> Path:
    return _write_text(Path(path), dumps_flow(flow))
