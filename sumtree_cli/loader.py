"""
Leaf input loading.

Reads ordered (label, amount) rows from JSON or CSV. Row order defines
leaf index.

JSON: [{"label": "alice", "amount": 20}, {"label_hex": "0x...", "amount": 5}]
CSV:  header row "label,amount" (or "label_hex,amount")
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any

from sumtree.crypto.hashing import from_hex
from sumtree.schemas.errors import SchemaValidationException


logger = logging.getLogger(__name__)


def load_leaves(path: str | Path) -> list[tuple[bytes, int]]:
    """
    Load (label, amount) pairs from a .json or .csv file.

    Raises:
        FileNotFoundError: If the file does not exist
        SchemaValidationException: If a row is malformed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    if path.suffix.lower() == ".csv":
        leaves = _load_csv(path)
    else:
        leaves = _load_json(path)

    logger.info(f"Loaded {len(leaves)} leaves from {path}")
    return leaves


def _load_json(path: Path) -> list[tuple[bytes, int]]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise SchemaValidationException(f"Invalid JSON in {path}: {e}") from e

    if isinstance(data, dict) and "leaves" in data:
        data = data["leaves"]
    if not isinstance(data, list):
        raise SchemaValidationException(
            f"Expected a list of leaves in {path}, got {type(data).__name__}"
        )
    return [parse_row(row, f"[{i}]") for i, row in enumerate(data)]


def _load_csv(path: Path) -> list[tuple[bytes, int]]:
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        return [parse_row(row, f"line {i + 2}") for i, row in enumerate(reader)]


def parse_row(row: Any, where: str) -> tuple[bytes, int]:
    """Convert one decoded row into a (label, amount) pair."""
    if not isinstance(row, dict):
        raise SchemaValidationException(
            f"Leaf {where} must be an object", field_path=where
        )

    if row.get("label_hex") not in (None, ""):
        try:
            label = from_hex(str(row["label_hex"]))
        except ValueError as e:
            raise SchemaValidationException(
                f"Leaf {where}: {e}", field_path=f"{where}.label_hex"
            ) from e
    elif row.get("label") is not None:
        label = str(row["label"]).encode("utf-8")
    else:
        raise SchemaValidationException(
            f"Leaf {where} needs a 'label' or 'label_hex'", field_path=where
        )

    amount = row.get("amount")
    if isinstance(amount, str):
        try:
            amount = int(amount.strip())
        except ValueError as e:
            raise SchemaValidationException(
                f"Leaf {where}: amount {amount!r} is not an integer",
                field_path=f"{where}.amount",
            ) from e
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise SchemaValidationException(
            f"Leaf {where}: amount must be an integer", field_path=f"{where}.amount"
        )

    return label, amount
