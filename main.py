"""Entry point for Bingo Musical: song library, card generator and game master console."""

import logging
import os
import sys


def main():
    logging.basicConfig(
        level=os.getenv("BINGO_MUSICAL_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from src.adapters.config.json_config_adapter import JsonConfigAdapter
    from src.config import data_path
    from src.version import __version__

    print(f"Bingo Musical {__version__}")
    print(f"Data folder: {data_path('')}")

    config = JsonConfigAdapter()
    if not config.is_configured():
        print("Audio source not configured yet; open the Settings tab to finish setup.")

    print("Launching Bingo Musical GUI...")
    try:
        from src.ui.app import run_app

        run_app()
    except KeyboardInterrupt:
        print("Interrupted.")
        sys.exit(130)


if __name__ == "__main__":
    main()
