"""Entry point for running loopmatch as a module."""

from .cli import app


def main() -> None:
    """Main entry point for the loopmatch CLI application."""
    app()


if __name__ == "__main__":
    main()
