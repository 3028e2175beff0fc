"""Root logging setup for the service and the CLI."""
import logging
import sys

# Loggers that are noisy at INFO under uvicorn
_QUIET_LOGGERS = ("uvicorn.access", "asyncio", "httpx")


def configure_structured_logging(level: str = "INFO"):
    """
    Send log lines to stdout at ``level``.

    StructuredLogger entries are already JSON, so the format is the bare
    message. Replaces any handlers installed earlier, such as uvicorn's.
    """
    logging.basicConfig(
        level=logging.getLevelName(level.upper()),
        format="%(message)s",
        stream=sys.stdout,
        force=True,
    )

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
