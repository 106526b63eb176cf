#!/usr/bin/env python
"""Development server with hot reload and DEBUG console output."""

import logging

from merknad import main

if __name__ in {"__main__", "__mp_main__"}:
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    # Pillow logs every plugin it probes at DEBUG
    for noisy in ("watchfiles", "PIL", "multipart"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    main()
