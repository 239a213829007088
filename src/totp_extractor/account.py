"""The Account value type and the rules that build it from decoded input."""

from __future__ import annotations

import base64
import hashlib
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any
from urllib.parse import quote

from totp_extractor.errors import InvalidPeriod, MissingParameter
from totp_extractor.params import uri_param
from totp_extractor.payload import MigrationRecord

DEFAULT_PERIOD = 30
DEFAULT_DIGITS = 6
ALLOWED_DIGITS = (6, 8)

# Digit-count code in the migration payload that selects eight digits
MIGRATION_EIGHT_DIGITS = 2

_PERIOD_RE = re.compile(r"[0-9]+")


class Algorithm(str, Enum):
    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA512 = "SHA512"

    @classmethod
    def from_name(cls, name: str | None) -> Algorithm:
        """Case-insensitive lookup; anything unrecognised falls back to SHA1."""
        if name is not None:
            upper = name.upper()
            if upper == "SHA256":
                return cls.SHA256
            if upper == "SHA512":
                return cls.SHA512
        return cls.SHA1

    @property
    def digest(self) -> Callable[..., Any]:
        """The hashlib constructor for this algorithm."""
        return HASH_MAP[self]

    @property
    def digest_size(self) -> int:
        return HASH_MAP[self]().digest_size


HASH_MAP = {
    Algorithm.SHA1: hashlib.sha1,
    Algorithm.SHA256: hashlib.sha256,
    Algorithm.SHA512: hashlib.sha512,
}

DEFAULT_ALGORITHM = Algorithm.SHA1


def resolve_digits(value: str | int | None) -> int:
    """Only an explicit 8 selects eight digits; everything else means six."""
    if value == 8 or value == "8":
        return 8
    return DEFAULT_DIGITS


def parse_period(value: str | int | None) -> int:
    """Return the time step in seconds, defaulting to 30 when absent."""
    if value is None:
        return DEFAULT_PERIOD
    if isinstance(value, bool):
        raise InvalidPeriod(value)
    if isinstance(value, int):
        period = value
    elif isinstance(value, str) and _PERIOD_RE.fullmatch(value):
        period = int(value)
    else:
        raise InvalidPeriod(value)
    if period <= 0:
        raise InvalidPeriod(value)
    return period


@dataclass(frozen=True)
class Account:
    secret: str
    issuer: str
    algorithm: Algorithm = DEFAULT_ALGORITHM
    digits: int = DEFAULT_DIGITS
    period: int = DEFAULT_PERIOD

    def __post_init__(self) -> None:
        if not isinstance(self.algorithm, Algorithm):
            raise TypeError(f"algorithm must be an Algorithm, got {self.algorithm!r}")
        if self.digits not in ALLOWED_DIGITS:
            raise ValueError(f"digits must be 6 or 8, got {self.digits!r}")
        if isinstance(self.period, bool) or not isinstance(self.period, int):
            raise InvalidPeriod(self.period)
        if self.period <= 0:
            raise InvalidPeriod(self.period)

    @classmethod
    def from_record(cls, record: MigrationRecord) -> Account:
        """Build an Account from one decoded migration entry.

        The entry's algorithm code is not honoured and the period is fixed at
        30 seconds; migration accounts are always SHA1.
        """
        secret = base64.b32encode(record.secret).decode("ascii").rstrip("=")
        digits = 8 if record.digits == MIGRATION_EIGHT_DIGITS else DEFAULT_DIGITS
        return cls(
            secret=secret,
            issuer=record.issuer or record.name,
            algorithm=Algorithm.SHA1,
            digits=digits,
            period=DEFAULT_PERIOD,
        )

    @classmethod
    def from_uri(cls, uri: str) -> Account:
        """Build an Account from a single-account ``otpauth://`` URI."""
        secret = uri_param(uri, "secret=")
        if secret is None:
            raise MissingParameter("secret=", uri)
        return cls(
            secret=secret,
            issuer=uri_param(uri, "issuer=") or "",
            algorithm=Algorithm.from_name(uri_param(uri, "algorithm=")),
            digits=resolve_digits(uri_param(uri, "digits=")),
            period=parse_period(uri_param(uri, "period=")),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Account:
        """Inverse of :meth:`to_dict`."""
        for key in ("secret", "issuer", "sha", "digits", "period"):
            if key not in data:
                raise MissingParameter(key)
        return cls(
            secret=str(data["secret"]),
            issuer=str(data["issuer"]),
            algorithm=Algorithm.from_name(str(data["sha"])),
            digits=resolve_digits(data["digits"]),
            period=parse_period(data["period"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "secret": self.secret,
            "issuer": self.issuer,
            "sha": self.algorithm.value,
            "digits": self.digits,
            "period": self.period,
        }

    def to_uri(self) -> str:
        """Build a standard otpauth://totp URI that decodes back to this Account."""
        params = {
            "secret": self.secret,
            "issuer": self.issuer,
            "algorithm": self.algorithm.value,
            "digits": str(self.digits),
            "period": str(self.period),
        }
        query = "&".join(f"{k}={quote(v, safe='')}" for k, v in params.items())
        return f"otpauth://totp/{quote(self.issuer, safe='')}?{query}"
