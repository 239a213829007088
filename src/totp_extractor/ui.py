"""Textual TUI for totp_extractor."""

from __future__ import annotations

import math
import time
from collections.abc import Iterable
from pathlib import Path
from typing import ClassVar

import pyperclip
from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import (
    Button,
    DataTable,
    DirectoryTree,
    Footer,
    Header,
    Input,
    Label,
    Static,
)

from totp_extractor.account import DEFAULT_PERIOD, Account
from totp_extractor.decoder import decode_uri
from totp_extractor.exporter import export_json, loads_accounts
from totp_extractor.extractor import (
    IMAGE_EXTENSIONS,
    URI_PREFIXES,
    extract_accounts,
    read_uris,
)
from totp_extractor.totp import seconds_remaining, time_token

TEXT_EXTENSIONS = {".txt", ".json"}

# Cells in the countdown bar, whatever the period
BAR_WIDTH = 30

CODE_STYLE = "bold cyan"


def load_path(path: Path) -> list[Account]:
    """Load accounts from a QR image, a directory of images, or a text/JSON file."""
    if path.is_dir() or path.suffix.lower() in IMAGE_EXTENSIONS:
        return extract_accounts(path)
    if not path.is_file():
        raise FileNotFoundError(f"Path not found: {path}")
    data = path.read_bytes()
    if data.lstrip().startswith(b"["):
        return loads_accounts(data.decode("utf-8"))
    accounts: list[Account] = []
    for uri in read_uris(data, str(path)):
        accounts.extend(decode_uri(uri))
    return accounts


def load_source(source: str) -> list[Account]:
    """Treat ``source`` as a pasted URI when it looks like one, else as a path."""
    if source.startswith(URI_PREFIXES):
        return decode_uri(source)
    return load_path(Path(source).expanduser())


def countdown_bar(remaining: int, period: int) -> str:
    filled = math.ceil(remaining * BAR_WIDTH / period)
    return f" {period}s " + "█" * filled + "░" * (BAR_WIDTH - filled) + f" {remaining:3d}s"


class _PickerTree(DirectoryTree):
    ALLOW_SELECT = True

    def __init__(self, path: Path, dirs_only: bool) -> None:
        self.suffixes = set() if dirs_only else IMAGE_EXTENSIONS | TEXT_EXTENSIONS
        super().__init__(path, id="picker-tree")

    def filter_paths(self, paths: Iterable[Path]) -> Iterable[Path]:
        return [p for p in paths if p.is_dir() or p.suffix.lower() in self.suffixes]


class PathPickerScreen(ModalScreen[Path | None]):
    """Browse for a source file or an export directory; dismisses with None on cancel."""

    DEFAULT_CSS = """
    PathPickerScreen { align: center middle; }
    PathPickerScreen > Vertical {
        width: 80%; height: 80%; padding: 1;
        border: heavy $accent; background: $surface;
    }
    PathPickerScreen DirectoryTree { height: 1fr; }
    PathPickerScreen Horizontal { height: auto; align-horizontal: right; }
    """

    BINDINGS: ClassVar[list[Binding]] = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, start_path: str | Path = "~", *, dirs_only: bool = False) -> None:
        super().__init__()
        self.start_path = Path(start_path).expanduser().resolve()
        self.dirs_only = dirs_only
        self.chosen: Path | None = None

    def compose(self) -> ComposeResult:
        what = "an export directory" if self.dirs_only else "a QR image, text/JSON file or directory"
        with Vertical():
            yield Label(f"Select {what}:")
            yield _PickerTree(self.start_path, self.dirs_only)
            yield Static("Nothing chosen", id="picker-status")
            with Horizontal():
                yield Button("Current Directory", id="pick-here")
                yield Button("Select", id="pick-select", variant="primary")
                yield Button("Cancel", id="pick-cancel")

    def _choose(self, path: Path) -> None:
        self.chosen = path
        self.query_one("#picker-status", Static).update(str(path))

    def on_directory_tree_file_selected(self, event: DirectoryTree.FileSelected) -> None:
        self._choose(event.path)

    def on_directory_tree_directory_selected(
        self, event: DirectoryTree.DirectorySelected
    ) -> None:
        self._choose(event.path)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "pick-here":
            self.dismiss(Path(self.query_one(_PickerTree).path).resolve())
        elif event.button.id == "pick-select":
            self.dismiss(self.chosen)
        else:
            self.dismiss(None)

    def action_cancel(self) -> None:
        self.dismiss(None)


class TokenApp(App[None]):
    """TUI showing live TOTP codes for decoded accounts."""

    TITLE = "TOTP Extractor"
    CSS = """
    .row { height: 3; margin: 0 1; }
    .row Input { width: 1fr; }
    #timer-bar { margin: 1 1 0 1; color: $warning; }
    #accounts-table { height: 1fr; margin: 0 1; border: solid $accent; }
    """

    BINDINGS: ClassVar[list[Binding]] = [
        Binding("ctrl+q", "quit", "Quit"),
        Binding("ctrl+l", "load", "Load"),
        Binding("ctrl+o", "browse_source", "Browse"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._accounts: list[Account] = []

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(classes="row"):
            yield Input(
                placeholder="otpauth URI, QR image, text/JSON file or directory",
                id="source-input",
            )
            yield Button("Browse…", id="browse-btn")
            yield Button("Load", id="load-btn", variant="primary")
        yield Static(id="timer-bar")
        yield DataTable(id="accounts-table", cursor_type="cell")
        with Horizontal(classes="row"):
            yield Input(placeholder="Export directory", id="export-dir")
            yield Button("Browse…", id="browse-export-btn")
            yield Button("Export JSON", id="btn-export")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        for label in ("Issuer", "Algorithm", "Digits", "Secret", "Code", "Left"):
            table.add_column(label, key=label.lower())
        self.set_interval(1.0, self._tick)
        self._tick()

    def _code_cell(self, acct: Account, now: int) -> Text:
        try:
            code = time_token(acct, now)
        except ValueError:
            code = "-" * acct.digits
        return Text(code, style=CODE_STYLE)

    def _timer_period(self) -> int:
        """Period of the account under the cursor, so the bar matches its row."""
        row = self.query_one(DataTable).cursor_row
        if 0 <= row < len(self._accounts):
            return self._accounts[row].period
        return DEFAULT_PERIOD

    def _tick(self) -> None:
        now = int(time.time())
        period = self._timer_period()
        self.query_one("#timer-bar", Static).update(
            countdown_bar(period - now % period, period)
        )
        table = self.query_one(DataTable)
        for row, acct in enumerate(self._accounts):
            table.update_cell(str(row), "code", self._code_cell(acct, now))
            table.update_cell(str(row), "left", f"{seconds_remaining(acct, now)}s")

    def _show(self, accounts: list[Account]) -> None:
        self._accounts = accounts
        table = self.query_one(DataTable)
        table.clear()
        now = int(time.time())
        for row, acct in enumerate(accounts):
            table.add_row(
                acct.issuer,
                acct.algorithm.value,
                str(acct.digits),
                acct.secret,
                self._code_cell(acct, now),
                f"{seconds_remaining(acct, now)}s",
                key=str(row),
            )

    def on_data_table_cell_selected(self, event: DataTable.CellSelected) -> None:
        value = event.value
        text = value.plain if isinstance(value, Text) else str(value)
        if text:
            pyperclip.copy(text)
            self.notify(f"Copied: {text}")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        handlers = {
            "load-btn": self.action_load,
            "browse-btn": self.action_browse_source,
            "browse-export-btn": self._browse_export,
            "btn-export": self._export,
        }
        handler = handlers.get(event.button.id or "")
        if handler is not None:
            handler()

    def _pick_into(self, input_id: str, *, dirs_only: bool) -> None:
        field = self.query_one(input_id, Input)
        start = Path(field.value.strip() or Path.home()).expanduser()
        if start.is_file():
            start = start.parent
        if not start.is_dir():
            start = Path.home()

        def fill(path: Path | None) -> None:
            if path is not None:
                field.value = str(path)

        self.push_screen(PathPickerScreen(start, dirs_only=dirs_only), callback=fill)

    def action_browse_source(self) -> None:
        self._pick_into("#source-input", dirs_only=False)

    def _browse_export(self) -> None:
        self._pick_into("#export-dir", dirs_only=True)

    def action_load(self) -> None:
        source = self.query_one("#source-input", Input).value.strip()
        if not source:
            self.notify("Paste a URI or enter a path first.", severity="warning")
            return
        try:
            accounts = load_source(source)
        except (OSError, ValueError) as e:
            self.notify(f"Error: {e}", severity="error")
            return
        self._show(accounts)
        self.notify(f"Loaded {len(accounts)} account(s).")

    def _export(self) -> None:
        target = self.query_one("#export-dir", Input).value.strip()
        if not self._accounts or not target:
            self.notify("Load accounts and choose an export directory first.", severity="warning")
            return
        try:
            path = export_json(self._accounts, Path(target).expanduser().resolve())
        except OSError as e:
            self.notify(f"Export error: {e}", severity="error")
            return
        self.notify(f"Exported to {path}")
