#!/usr/bin/env python3
"""
DTR Tracker - A personal daily time record application

Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Import general purpose libraries
import sys
import logging

# Internal libraries
import bootstrap

logger = logging.getLogger("main")


def main() -> int:
    """
    Program entry, returns the exit code.
    """
    app = None

    try:
        # App bootstrap (logging, config, backend, frontend)
        app = bootstrap.app_bootstrap()
        app.run()

    except Exception:
        logger.exception("An unhandled exception occurred.")

        # Try to terminate the app
        if app:
            try:
                app.stop()
            except Exception as ex:
                logger.warning(f"Exception stopping '{app}': {ex}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
