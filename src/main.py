"""
ATS Assist Main Entry Point

Initializes logging and configuration, then hands over to the CLI.
"""

import sys


def main() -> int:
    """
    Main entry point for ATS Assist.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    try:
        from src.utils.logger import setup_logging, log

        setup_logging()

        from src.utils.config import get_settings

        settings = get_settings()
        log.debug(f"Environment: {settings.environment}")
        log.debug(f"Assistant endpoint: {settings.backend.assistant_endpoint}")

        from src.cli import app

        app()
        return 0

    except ImportError as e:
        print(f"Error: Missing required dependency: {e}")
        print("Please install all dependencies with: pip install -e .")
        return 1


if __name__ == "__main__":
    sys.exit(main())
