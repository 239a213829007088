"""Turn raw input bytes (QR images or text) into otpauth URIs and Accounts."""

from __future__ import annotations

import io
import logging
from enum import Enum
from pathlib import Path

import zxingcpp
from PIL import Image, UnidentifiedImageError

from totp_extractor.account import Account
from totp_extractor.decoder import decode_uri

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".webp", ".tiff"}
URI_PREFIXES = ("otpauth-migration://", "otpauth://")


class InputKind(Enum):
    IMAGE = "image"
    TEXT = "text"


class QrGridCountError(ValueError):
    """Raised when an image does not hold exactly one QR grid."""

    def __init__(self, count: int, source: str = "image") -> None:
        self.count = count
        super().__init__(f"expected 1 image grid in {source}, found {count} grids")


def classify_bytes(data: bytes) -> InputKind:
    """Coarse sniff: anything Pillow recognises as an image, else text."""
    try:
        with Image.open(io.BytesIO(data)):
            return InputKind.IMAGE
    except (UnidentifiedImageError, OSError):
        return InputKind.TEXT


def scan_qr(data: bytes) -> list[str]:
    """Return the text of every QR grid found in the image bytes."""
    with Image.open(io.BytesIO(data)) as img:
        results = zxingcpp.read_barcodes(img.convert("L"))
    return [r.text for r in results]


def read_single_uri(data: bytes, source: str = "image") -> str:
    """Decode the one QR grid an image must contain."""
    texts = scan_qr(data)
    if len(texts) != 1:
        raise QrGridCountError(len(texts), source)
    return texts[0]


def read_uris(data: bytes, source: str = "<stdin>") -> list[str]:
    """Sniff ``data`` and return the otpauth URIs it carries.

    Images must contain exactly one QR grid; text is split into lines and
    blank lines are dropped.
    """
    if classify_bytes(data) is InputKind.IMAGE:
        logger.debug("%s looks like an image", source)
        return [read_single_uri(data, source)]
    text = data.decode("utf-8")
    return [line.strip() for line in text.splitlines() if line.strip()]


def scan_image(path: Path) -> str:
    """Decode the otpauth URI held by the single QR grid in an image file."""
    text = read_single_uri(path.read_bytes(), path.name)
    if not text.startswith(URI_PREFIXES):
        raise ValueError(f"QR grid in {path.name} is not an otpauth URI")
    return text


def scan_directory(directory: Path) -> list[str]:
    """Decode every image in ``directory`` in name order, deduplicated.

    Images that fail :func:`scan_image` are logged and skipped.
    """
    uris: list[str] = []
    for path in sorted(directory.iterdir()):
        if not path.is_file() or path.suffix.lower() not in IMAGE_EXTENSIONS:
            continue
        try:
            uris.append(scan_image(path))
        except ValueError as e:
            logger.warning("Skipping %s, %s", path.name, e)
    return list(dict.fromkeys(uris))


def extract_accounts(path: Path) -> list[Account]:
    """Decode the image, or every image in the directory, at ``path``.

    Accounts are deduplicated by value, first occurrence kept.
    """
    if path.is_dir():
        uris = scan_directory(path)
    elif path.is_file():
        uris = [scan_image(path)]
    else:
        raise FileNotFoundError(f"No image or directory at {path}")
    return list(dict.fromkeys(acct for uri in uris for acct in decode_uri(uri)))
