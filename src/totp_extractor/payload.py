"""Decode the binary payload carried by otpauth-migration URIs."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from google.protobuf.message import DecodeError

from totp_extractor.errors import PayloadDecodeError
from totp_extractor.migration_pb2 import MigrationPayload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MigrationRecord:
    secret: bytes
    name: str
    issuer: str
    algorithm: int
    digits: int
    otp_type: int
    counter: int
    index: int


def parse_payload(data: bytes) -> MigrationPayload:
    """Parse raw bytes into a MigrationPayload message.

    Unknown fields, groups included, are skipped by the protobuf runtime.
    Truncated or malformed structure and invalid UTF-8 in the text fields
    raise :class:`PayloadDecodeError`.
    """
    payload = MigrationPayload()
    try:
        payload.ParseFromString(data)
    except (DecodeError, UnicodeDecodeError) as exc:
        raise PayloadDecodeError(str(exc)) from exc
    return payload


def decode_payload(data: bytes) -> list[MigrationRecord]:
    """Decode a raw MigrationPayload into records, in payload order."""
    payload = parse_payload(data)
    records: list[MigrationRecord] = []
    for index, otp in enumerate(payload.otp_parameters):
        if not otp.secret:
            raise PayloadDecodeError(f"entry {index} has no secret")
        record = MigrationRecord(
            secret=otp.secret,
            name=otp.name,
            issuer=otp.issuer,
            algorithm=otp.algorithm,
            digits=otp.digits,
            otp_type=otp.type,
            counter=otp.counter,
            index=index,
        )
        logger.debug("decoded entry %d issuer=%r", index, record.issuer)
        records.append(record)
    return records
