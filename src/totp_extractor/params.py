"""Pull named query parameters out of otpauth URIs."""

from __future__ import annotations

import re
from urllib.parse import unquote

from totp_extractor.errors import MalformedEncoding

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def percent_decode(text: str, parameter: str | None = None) -> str:
    """Strictly percent-decode ``text``.

    A ``%`` that does not start a two-digit hex escape, or escapes that do
    not form valid UTF-8, raise MalformedEncoding. ``+`` is left alone.
    """
    bad = _BAD_ESCAPE.search(text)
    if bad is not None:
        raise MalformedEncoding(
            "percent", f"bad escape at position {bad.start()}", parameter
        )
    try:
        return unquote(text, errors="strict")
    except UnicodeDecodeError as exc:
        raise MalformedEncoding("percent", str(exc), parameter) from exc


def uri_param(uri: str, name: str) -> str | None:
    """Return the decoded value following the first ``name`` token in ``uri``.

    ``name`` includes the trailing ``=`` (e.g. ``"secret="``). The value runs
    to the next ``&`` or the end of the string.
    """
    _, sep, tail = uri.partition(name)
    if not sep:
        return None
    raw = tail.split("&", 1)[0]
    return percent_decode(raw, name)
