"""Opt-in log output for jarfetch and, optionally, its aiohttp transport."""

import logging
import sys
from pathlib import Path
from typing import Callable, Optional, Union

DEFAULT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# aiohttp's client-side loggers, attached only with include_transport
TRANSPORT_LOGGERS = ("aiohttp.client",)


def _build_handlers(
    level: int,
    log_file: Optional[Union[str, Path]],
    formatter: logging.Formatter,
) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(Path(log_file), encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def _install(
    logger: logging.Logger,
    level: int,
    handlers: Callable[[], list[logging.Handler]],
    force: bool,
) -> None:
    logger.setLevel(level)
    if force or not logger.handlers:
        for handler in logger.handlers:
            handler.close()
        logger.handlers[:] = handlers()
    logger.propagate = False


def setup_logging(
    level: Union[str, int] = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    format_string: Optional[str] = None,
    force: bool = False,
    include_transport: bool = False,
) -> logging.Logger:
    """
    Send jarfetch log records (exchanges, redirect hops, jar restores) to stdout.

    Library modules only create child loggers of "jarfetch"; nothing is
    printed until an application calls this function or configures logging
    itself. Existing handlers are kept unless ``force`` is set.

    Args:
        level: Level name (DEBUG, INFO, ...) or number; unknown names mean INFO
        log_file: Also append records to this file (UTF-8)
        format_string: Record format, DEFAULT_FORMAT when omitted
        force: Replace handlers installed by an earlier call
        include_transport: Route aiohttp's client logger through the same handlers

    Returns:
        The configured "jarfetch" logger
    """
    numeric_level = level if isinstance(level, int) else getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)

    # Built on first use and shared, so one file handle serves every logger
    shared: list[logging.Handler] = []

    def handlers() -> list[logging.Handler]:
        if not shared:
            shared.extend(_build_handlers(numeric_level, log_file, formatter))
        return list(shared)

    logger = logging.getLogger("jarfetch")
    _install(logger, numeric_level, handlers, force)

    if include_transport:
        for name in TRANSPORT_LOGGERS:
            _install(logging.getLogger(name), numeric_level, handlers, force)

    return logger
