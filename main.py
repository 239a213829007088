"""Entry point for running the TUI directly with `python main.py`."""

from totp_extractor.ui import TokenApp


def main() -> None:
    app = TokenApp()
    app.run()


if __name__ == "__main__":
    main()
