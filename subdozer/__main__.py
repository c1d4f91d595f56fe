"""``python -m subdozer`` launcher."""

import logging
import os

from .ui.main_window import run


def main():
    level = os.getenv("SUBDOZER_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run()


if __name__ == "__main__":
    main()
