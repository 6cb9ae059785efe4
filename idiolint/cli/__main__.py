"""Entry point for the idiolint CLI when run as python -m idiolint.cli."""

if __name__ == "__main__":
    from idiolint.cli.main import main

    main()
