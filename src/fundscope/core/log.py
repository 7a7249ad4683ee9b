"""Root logger setup shared by the CLI and the API server."""

from __future__ import annotations

import logging
import sys

from fundscope.core.config import LoggingConfig

# Third-party loggers that are noisy at INFO
_QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(config: LoggingConfig | None = None, verbose: bool = False) -> None:
    """Configure the root logger for console output.

    ``verbose`` forces DEBUG regardless of the configured level. Safe to call
    more than once; later calls replace earlier handlers.
    """
    config = config or LoggingConfig()
    level = logging.DEBUG if verbose else logging.getLevelName(config.level)

    logging.basicConfig(
        level=level,
        format=config.format,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
