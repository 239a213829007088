"""Command-line interface for totp_extractor."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from totp_extractor import __version__
from totp_extractor.account import Account
from totp_extractor.decoder import decode_uri
from totp_extractor.exporter import dumps_accounts, loads_accounts
from totp_extractor.extractor import QrGridCountError, read_uris
from totp_extractor.totp import seconds_remaining, time_token

logger = logging.getLogger(__name__)

STDIN = "-"


@dataclass
class Source:
    """Accounts decoded from one input, with the URI they came from if any."""

    name: str
    accounts: list[Account] = field(default_factory=list)
    uri: str | None = None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="totp-extractor",
        description="Decode otpauth and otpauth-migration URIs and print TOTP codes.",
    )
    parser.add_argument(
        "-a",
        "--auth",
        metavar="URI",
        help='"otpauth-migration://offline?data=..." or "otpauth://totp/...?secret=SECRET"',
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument(
        "-e", "--export", action="store_true", help="Export account information as JSON"
    )
    parser.add_argument(
        "-i",
        "--import",
        dest="import_json",
        action="store_true",
        help="Import JSON accounts",
    )
    parser.add_argument("-u", "--uri", action="store_true", help="Output account URIs")
    parser.add_argument(
        "--tui", action="store_true", help="Launch the interactive terminal UI"
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "files",
        nargs="*",
        default=[STDIN],
        help='image or text files; a filename of "-" reads stdin',
    )
    return parser


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    logging.getLogger("totp_extractor").setLevel(
        logging.DEBUG if verbose else logging.WARNING
    )


def _read_input(name: str) -> bytes:
    if name == STDIN:
        return sys.stdin.buffer.read()
    path = Path(name)
    try:
        return path.read_bytes()
    except OSError as e:
        raise OSError(f"could not read file `{name}`: {e.strerror or e}") from e


def collect_sources(args: argparse.Namespace) -> tuple[list[Source], bool]:
    """Decode every input named on the command line.

    Returns the decoded sources and whether any input failed. A failing input
    is logged and skipped; the rest of the batch is still processed.
    """
    sources: list[Source] = []
    failed = False

    if args.auth:
        try:
            sources.append(Source(args.auth, decode_uri(args.auth), uri=args.auth))
        except ValueError as e:
            logger.error("%s", e)
            failed = True
        return sources, failed

    for name in args.files:
        label = "<stdin>" if name == STDIN else name
        try:
            data = _read_input(name)
            if args.import_json:
                sources.append(Source(label, loads_accounts(data.decode("utf-8"))))
                continue
            uris = read_uris(data, label)
        except QrGridCountError as e:
            logger.warning("Skipping %s, %s", label, e)
            continue
        except (OSError, ValueError) as e:
            logger.error("%s: %s", label, e)
            failed = True
            continue

        for uri in uris:
            try:
                sources.append(Source(label, decode_uri(uri), uri=uri))
            except ValueError as e:
                logger.error("%s: %s", label, e)
                failed = True
    return sources, failed


def display(sources: list[Source], args: argparse.Namespace, now: int) -> bool:
    """Print sources in the requested format. Returns False if any code failed."""
    if args.uri:
        for src in sources:
            if src.uri is not None:
                print(src.uri)
            else:
                for acct in src.accounts:
                    print(acct.to_uri())
        return True

    if args.export:
        print(dumps_accounts(acct for src in sources for acct in src.accounts))
        return True

    ok = True
    for src in sources:
        if args.verbose and src.uri is not None:
            print(f"otpauth = {src.uri}")
        for acct in src.accounts:
            try:
                token = time_token(acct, now)
            except ValueError as e:
                logger.error("%s: %s", acct.issuer or src.name, e)
                ok = False
                continue
            if args.verbose:
                print(f"{token}, {acct!r}, {seconds_remaining(acct, now)}s left")
            else:
                print(f"{token}, {acct.issuer}")
        if args.verbose:
            print("~" * 40)
    return ok


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    if args.tui:
        from totp_extractor.ui import TokenApp

        TokenApp().run()
        return 0

    sources, failed = collect_sources(args)
    if not display(sources, args, int(time.time())):
        failed = True
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
