"""Tests for the extractor module (QR image scanning and input sniffing)."""

from __future__ import annotations

from pathlib import Path

import pytest
import qrcode
from PIL import Image

from totp_extractor.account import Account
from totp_extractor.extractor import (
    InputKind,
    QrGridCountError,
    classify_bytes,
    extract_accounts,
    read_single_uri,
    read_uris,
    scan_directory,
    scan_image,
)

MIGRATION_URI = (
    "otpauth-migration://offline?data=Ci0KCkhlbGxvId6tvu8SEnRlc3QxQGV4YW1wbGUxLmNvbRoF"
    "VGVzdDEgASgBMAIKLQoKSGVsbG8h3q2%2B8BISdGVzdDJAZXhhbXBsZTIuY29tGgVUZXN0MiABKAEwAgot"
    "CgpIZWxsbyHerb7xEhJ0ZXN0M0BleGFtcGxlMy5jb20aBVRlc3QzIAEoATACEAIYASAA"
)
TOTP_URI = "otpauth://totp/GitHub:alice@github.com?secret=JBSWY3DPEHPK3PXP&issuer=GitHub"


def _make_qr_image(uri: str, path: Path) -> Path:
    """Generate a QR code image file from a URI string."""
    img = qrcode.make(uri)
    img.save(path)
    return path


def _blank_png(path: Path) -> Path:
    Image.new("L", (64, 64), color=255).save(path)
    return path


class TestClassifyBytes:
    def test_png(self, tmp_path: Path) -> None:
        data = _make_qr_image(TOTP_URI, tmp_path / "a.png").read_bytes()
        assert classify_bytes(data) is InputKind.IMAGE

    def test_text(self) -> None:
        assert classify_bytes(TOTP_URI.encode()) is InputKind.TEXT

    def test_empty(self) -> None:
        assert classify_bytes(b"") is InputKind.TEXT


class TestReadUris:
    def test_single_grid(self, tmp_path: Path) -> None:
        data = _make_qr_image(MIGRATION_URI, tmp_path / "m.png").read_bytes()
        assert read_single_uri(data) == MIGRATION_URI
        assert read_uris(data, "m.png") == [MIGRATION_URI]

    def test_no_grid(self, tmp_path: Path) -> None:
        data = _blank_png(tmp_path / "blank.png").read_bytes()
        with pytest.raises(QrGridCountError, match="found 0 grids") as exc:
            read_uris(data, "blank.png")
        assert exc.value.count == 0

    def test_text_lines(self) -> None:
        data = f"{TOTP_URI}\n\n  {MIGRATION_URI}  \n".encode()
        assert read_uris(data) == [TOTP_URI, MIGRATION_URI]


class TestScanImage:
    def test_round_trip(self, tmp_path: Path) -> None:
        img_path = _make_qr_image(MIGRATION_URI, tmp_path / "test.png")
        assert scan_image(img_path) == MIGRATION_URI

    def test_standard_otpauth_totp_qr(self, tmp_path: Path) -> None:
        img_path = _make_qr_image(TOTP_URI, tmp_path / "totp.png")
        assert scan_image(img_path) == TOTP_URI

    def test_non_otpauth_qr_rejected(self, tmp_path: Path) -> None:
        img_path = _make_qr_image("https://example.com", tmp_path / "url.png")
        with pytest.raises(ValueError, match="not an otpauth URI"):
            scan_image(img_path)

    def test_blank_image_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(QrGridCountError):
            scan_image(_blank_png(tmp_path / "blank.png"))


class TestScanDirectory:
    def test_skips_images_without_one_grid(self, tmp_path: Path) -> None:
        _make_qr_image(TOTP_URI, tmp_path / "a.png")
        _blank_png(tmp_path / "b.png")
        _make_qr_image("https://example.com", tmp_path / "c.png")
        assert scan_directory(tmp_path) == [TOTP_URI]

    def test_deduplicates_uris(self, tmp_path: Path) -> None:
        _make_qr_image(TOTP_URI, tmp_path / "a.png")
        _make_qr_image(TOTP_URI, tmp_path / "b.png")
        assert scan_directory(tmp_path) == [TOTP_URI]


class TestExtractAccounts:
    def test_single_file(self, tmp_path: Path) -> None:
        _make_qr_image(TOTP_URI, tmp_path / "code.png")
        accounts = extract_accounts(tmp_path / "code.png")
        assert accounts == [Account(secret="JBSWY3DPEHPK3PXP", issuer="GitHub")]

    def test_directory_keeps_sorted_order(self, tmp_path: Path) -> None:
        _make_qr_image(MIGRATION_URI, tmp_path / "img1.png")
        _make_qr_image(TOTP_URI, tmp_path / "img2.png")
        (tmp_path / "notes.txt").write_text("ignored")
        accounts = extract_accounts(tmp_path)
        assert [a.issuer for a in accounts] == ["Test1", "Test2", "Test3", "GitHub"]

    def test_same_account_from_different_uris(self, tmp_path: Path) -> None:
        _make_qr_image(TOTP_URI, tmp_path / "a.png")
        _make_qr_image(TOTP_URI + "&period=30", tmp_path / "b.png")
        assert len(extract_accounts(tmp_path)) == 1

    def test_single_file_without_grid(self, tmp_path: Path) -> None:
        with pytest.raises(QrGridCountError):
            extract_accounts(_blank_png(tmp_path / "blank.png"))

    def test_nonexistent_path(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            extract_accounts(tmp_path / "nope.png")
