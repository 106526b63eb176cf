"""Merknad - rich-text comment editor with image intake and Word paste cleanup.

Comment authoring for review workflows: pasted images are downscaled and
size-checked, Word clipboard content is cleaned, and saved comments are
reduced to plain text.
"""

import logging
import os
import subprocess
from logging.handlers import RotatingFileHandler
from pathlib import Path

__version__ = "0.1.0"

_LOG_FILE_BYTES = 5 * 1024 * 1024
_LOG_FILE_BACKUPS = 3


def get_version_string() -> str:
    """Version plus short commit hash, e.g. ``0.1.0+a1b2c3d``."""
    try:
        commit = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            capture_output=True,
            text=True,
            check=True,
            timeout=5,
        ).stdout.strip()
    except (
        subprocess.CalledProcessError,
        FileNotFoundError,
        subprocess.TimeoutExpired,
    ):
        commit = "unknown"
    return f"{__version__}+{commit}"


def _setup_logging(log_dir: Path) -> Path:
    """Send DEBUG and up to a rotating file, INFO and up to the console.

    Returns the log file path.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "merknad.log"

    to_file = RotatingFileHandler(
        log_file,
        maxBytes=_LOG_FILE_BYTES,
        backupCount=_LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    to_file.setLevel(logging.DEBUG)
    to_file.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)s [%(process)d] %(name)s: %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )

    to_console = logging.StreamHandler()
    to_console.setLevel(logging.INFO)
    to_console.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.addHandler(to_file)
    root.addHandler(to_console)
    return log_file


def main() -> None:
    """Start the comment editor web app."""
    from nicegui import ui

    from merknad.config import get_settings

    settings = get_settings()
    log_file = _setup_logging(settings.app.log_dir)
    logger = logging.getLogger(__name__)
    logger.info("Merknad %s, logging to %s", get_version_string(), log_file)

    import merknad.pages  # noqa: F401 - registers routes

    logger.info("Serving /comment on port %d", settings.app.port)
    ui.run(
        host="0.0.0.0",  # nosec B104
        port=settings.app.port,
        reload=os.environ.get("MERKNAD_RELOAD", "1") != "0",
        storage_secret=settings.app.storage_secret.get_secret_value(),
        language=settings.editor.language,
        title="Merknad",
    )


if __name__ in {"__main__", "__mp_main__"}:
    main()
