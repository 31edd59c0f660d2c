"""Logging setup shared by the API process and the scripts."""
import logging


def configure_logging(level: str | int = logging.INFO, *, force: bool = False) -> None:
    """Initialise the root logger once with a terse, greppable format.

    ``level`` accepts either a logging constant or its name (``"DEBUG"``),
    so the value can come straight from settings.  Pass ``force=True`` to
    reconfigure during tests.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        force=force,
    )
