"""Time-based one-time password generation (RFC 6238 over RFC 4226)."""

from __future__ import annotations

import base64
import binascii
import datetime
import time

import pyotp

from totp_extractor.account import Account
from totp_extractor.errors import DigestTruncationError, MalformedEncoding

# Dynamic truncation reads four bytes starting at most this far into the digest
MAX_TRUNCATION_OFFSET = 0x0F


def decode_secret(secret: str) -> bytes:
    """Decode an unpadded RFC 4648 base32 secret into key bytes."""
    stripped = secret.rstrip("=")
    padded = stripped + "=" * (-len(stripped) % 8)
    try:
        key = base64.b32decode(padded, casefold=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedEncoding("base32", str(exc), "secret=") from exc
    if not key:
        raise MalformedEncoding("base32", "secret decodes to zero bytes", "secret=")
    return key


def check_digest_size(digest_size: int) -> None:
    """Reject a digest too short for dynamic truncation at every offset."""
    if MAX_TRUNCATION_OFFSET + 4 > digest_size:
        raise DigestTruncationError(MAX_TRUNCATION_OFFSET, digest_size)


def totp_for(account: Account) -> pyotp.TOTP:
    """Build the pyotp generator for ``account`` after validating its secret."""
    key = decode_secret(account.secret)
    check_digest_size(account.algorithm.digest_size)
    return pyotp.TOTP(
        base64.b32encode(key).decode("ascii"),
        digits=account.digits,
        digest=account.algorithm.digest,
        interval=account.period,
    )


def time_token(account: Account, timestamp: int) -> str:
    """Return the code for ``account`` in the window containing ``timestamp``."""
    if timestamp < 0:
        raise ValueError(f"timestamp must be non-negative, got {timestamp}")
    # An aware datetime keeps pyotp on UTC arithmetic instead of local time
    when = datetime.datetime.fromtimestamp(int(timestamp), tz=datetime.timezone.utc)
    return totp_for(account).at(when)


def current_token(account: Account, now: float | None = None) -> str:
    if now is None:
        now = time.time()
    return time_token(account, int(now))


def seconds_remaining(account: Account, now: float | None = None) -> int:
    """Seconds left before the current code rolls over."""
    if now is None:
        now = time.time()
    return account.period - int(now) % account.period
