"""Tests for the JSON interchange format."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from totp_extractor.account import Account, Algorithm
from totp_extractor.errors import MissingParameter
from totp_extractor.exporter import dumps_accounts, export_json, loads_accounts

SAMPLE_ACCOUNTS = [
    Account(secret="JBSWY3DPEHPK3PXP", issuer="Test1"),
    Account(secret="JBSWY3DPEHPK3PXQ", issuer="Test2"),
    Account(secret="JBSWY3DPEHPK3PXR", issuer="Test3"),
]

SAMPLE_JSON = (
    '[{"secret":"JBSWY3DPEHPK3PXP","issuer":"Test1","sha":"SHA1","digits":6,"period":30},'
    '{"secret":"JBSWY3DPEHPK3PXQ","issuer":"Test2","sha":"SHA1","digits":6,"period":30},'
    '{"secret":"JBSWY3DPEHPK3PXR","issuer":"Test3","sha":"SHA1","digits":6,"period":30}]'
)


class TestDumpsAccounts:
    def test_exact_format(self) -> None:
        assert dumps_accounts(SAMPLE_ACCOUNTS) == SAMPLE_JSON

    def test_empty(self) -> None:
        assert dumps_accounts([]) == "[]"

    def test_non_ascii_issuer_kept(self) -> None:
        out = dumps_accounts([Account(secret="JBSWY3DPEHPK3PXP", issuer="Café")])
        assert '"issuer":"Café"' in out


class TestLoadsAccounts:
    def test_sample(self) -> None:
        assert loads_accounts(SAMPLE_JSON) == SAMPLE_ACCOUNTS

    def test_round_trip(self) -> None:
        accounts = [
            Account(
                secret="HXDMVJECJJWSRB3HWIZR4IFUGFTMXBOZ",
                issuer="ACME Co",
                algorithm=Algorithm.SHA512,
                digits=8,
                period=60,
            ),
            Account(secret="NBSWY3DP", issuer=""),
        ]
        assert loads_accounts(dumps_accounts(accounts)) == accounts

    def test_invalid_json(self) -> None:
        with pytest.raises(ValueError, match="Deserializing JSON"):
            loads_accounts("[{")

    def test_not_an_array(self) -> None:
        with pytest.raises(ValueError, match="JSON array"):
            loads_accounts('{"secret": "AB"}')

    def test_entry_not_an_object(self) -> None:
        with pytest.raises(ValueError, match="Account 1"):
            loads_accounts('[{"secret":"A","issuer":"","sha":"SHA1","digits":6,"period":30}, 3]')

    def test_missing_key(self) -> None:
        with pytest.raises(MissingParameter):
            loads_accounts('[{"secret":"JBSWY3DPEHPK3PXP","issuer":"x"}]')


class TestExportJson:
    def test_writes_file(self, tmp_path: Path) -> None:
        path = export_json(SAMPLE_ACCOUNTS, tmp_path / "out")
        assert path.exists()
        assert path.name == "accounts.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert len(data) == 3
        assert data[0]["secret"] == "JBSWY3DPEHPK3PXP"
        assert loads_accounts(path.read_text(encoding="utf-8")) == SAMPLE_ACCOUNTS
