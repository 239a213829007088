"""totp_extractor package.

This package can be used both as a CLI tool and as an importable library.
"""

__version__ = "0.1.0"

from totp_extractor.account import Account, Algorithm
from totp_extractor.decoder import decode_uri
from totp_extractor.totp import time_token

__all__ = ["Account", "Algorithm", "__version__", "decode_uri", "time_token"]
