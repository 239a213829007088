"""Route otpauth URIs to the right decoder and return Accounts."""

from __future__ import annotations

import base64
import binascii
import logging

from totp_extractor.account import Account
from totp_extractor.errors import MalformedEncoding, MissingParameter
from totp_extractor.params import uri_param
from totp_extractor.payload import decode_payload

logger = logging.getLogger(__name__)

MIGRATION_PREFIX = "otpauth-migration://offline"


def is_migration_uri(uri: str) -> bool:
    return MIGRATION_PREFIX in uri


def extract_payload(uri: str) -> bytes:
    """Return the raw bytes carried in the ``data=`` parameter of a migration URI."""
    data = uri_param(uri, "data=")
    if data is None:
        raise MissingParameter("data=", uri)
    try:
        return base64.b64decode(data, validate=True)
    except binascii.Error as exc:
        raise MalformedEncoding("base64", str(exc), "data=") from exc


def decode_migration_uri(uri: str) -> list[Account]:
    """Decode every account in an otpauth-migration URI, in payload order."""
    records = decode_payload(extract_payload(uri))
    logger.debug("migration payload holds %d entries", len(records))
    return [Account.from_record(record) for record in records]


def decode_uri(uri: str) -> list[Account]:
    """Decode an otpauth-migration or otpauth URI into Account objects."""
    uri = uri.strip()
    if is_migration_uri(uri):
        return decode_migration_uri(uri)
    return [Account.from_uri(uri)]
