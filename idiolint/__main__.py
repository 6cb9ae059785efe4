"""Entry point for running idiolint as a module: python -m idiolint."""

from __future__ import annotations


def main() -> None:
    """Main entry point for module execution."""
    from idiolint.cli import main as cli_main

    cli_main()


if __name__ == "__main__":
    main()
