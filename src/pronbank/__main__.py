"""Main entry point for pronbank."""
from pronbank.cli import app
from pronbank.config import ensure_directories
from pronbank.logging_config import setup_logging


def main() -> None:
    """Run the CLI."""
    ensure_directories()
    setup_logging("Starting pronbank ...")
    app()


if __name__ == "__main__":
    main()
