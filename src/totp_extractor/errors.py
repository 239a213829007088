"""Error types raised while decoding otpauth URIs and generating codes."""

from __future__ import annotations


class OtpauthError(ValueError):
    """Base class for every decode or generation failure."""


class MissingParameter(OtpauthError):
    def __init__(self, parameter: str, uri: str | None = None) -> None:
        self.parameter = parameter
        message = f"missing {parameter.rstrip('=')} parameter"
        if uri is not None:
            message += f", otpauth = {uri}"
        super().__init__(message)


class MalformedEncoding(OtpauthError):
    def __init__(
        self, encoding: str, detail: str, parameter: str | None = None
    ) -> None:
        self.encoding = encoding
        self.parameter = parameter
        where = f" in {parameter.rstrip('=')}" if parameter else ""
        super().__init__(f"invalid {encoding} encoding{where}: {detail}")


class PayloadDecodeError(OtpauthError):
    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"payload decode failed: {detail}")


class InvalidPeriod(OtpauthError):
    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"period must be a positive integer, got {value!r}")


class DigestTruncationError(OtpauthError):
    def __init__(self, offset: int, length: int) -> None:
        self.offset = offset
        self.length = length
        super().__init__(
            f"truncation offset {offset} out of range for {length}-byte digest"
        )
