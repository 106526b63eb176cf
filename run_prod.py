#!/usr/bin/env python
"""Production server: hot reload off."""

import os

os.environ["MERKNAD_RELOAD"] = "0"

from merknad import main  # noqa: E402

if __name__ in {"__main__", "__mp_main__"}:
    main()
