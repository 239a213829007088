"""JSON import/export of Account records."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from totp_extractor.account import Account

EXPORT_FILENAME = "accounts.json"


def dumps_accounts(accounts: Iterable[Account]) -> str:
    """Serialize accounts as a compact JSON array of interchange records."""
    return json.dumps(
        [acct.to_dict() for acct in accounts],
        separators=(",", ":"),
        ensure_ascii=False,
    )


def loads_accounts(text: str) -> list[Account]:
    """Parse a JSON array produced by :func:`dumps_accounts`."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Deserializing JSON into accounts failed: {e}") from e
    if not isinstance(data, list):
        raise ValueError("Expected a JSON array of accounts")

    accounts: list[Account] = []
    for i, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise ValueError(f"Account {i} is not a JSON object")
        accounts.append(Account.from_dict(entry))
    return accounts


def export_json(accounts: list[Account], output_path: Path) -> Path:
    """Write accounts to ``accounts.json`` inside ``output_path``."""
    output_path.mkdir(parents=True, exist_ok=True)
    filepath = output_path / EXPORT_FILENAME
    filepath.write_text(dumps_accounts(accounts) + "\n", encoding="utf-8")
    return filepath
