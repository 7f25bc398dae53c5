"""Logging utilities for profconv."""

import argparse
import logging
import os
from collections.abc import Iterable

__all__ = [
    "LOG_FORMAT",
    "add_logging_args",
    "configure_logging",
    "configure_logging_from_args",
]


LOG_FORMAT = "Profconv [%(levelname)-8s] %(name)s: %(message)s"


def add_logging_args(parser: argparse.ArgumentParser):
    """
    Add profconv logging args to an args parser.

    Args:
        parser: An ``argparse.ArgumentParser`` instance.
    """

    group = parser.add_argument_group("logging args")
    group.add_argument(
        "--logging",
        type=lambda s: s.upper(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        help="Logging verbosity: %(choices)s (default: %(default)s)"
    )
    group.add_argument(
        "--log-file",
        type=str,
        default=None,
        metavar="FILE",
        help="Also write log records to FILE"
    )


def configure_logging(
    verbosity: str,
    loggers: Iterable[logging.Logger] | None = None,
    handlers: Iterable[logging.Handler] | None = None,
    log_file: str | os.PathLike | None = None,
):
    """
    Configure profconv logging.

    **Note**: Formatters and handlers in provided ``loggers`` will be overwritten.

    Args:
        verbosity: Logging level as a string.
        loggers: An optional iterable of ``logging.Logger`` instances to configure. If ``None``, the root is used.
        handlers: An optional iterable of ``logging.Handler`` instances to attach to each logger. If ``None``, a single ``logging.StreamHandler`` is used.
        log_file: An optional path, records are appended to it in addition to ``handlers``.

    Raises:
        ValueError: If ``verbosity`` is not a valid logging level name.
    """

    level = getattr(logging, verbosity.upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"Invalid log level: {verbosity}")

    handlers = list(handlers or [logging.StreamHandler()])
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)

    loggers = loggers or [logging.getLogger()]
    for logger in loggers:
        logger.setLevel(level)
        logger.handlers.clear()
        for handler in handlers:
            logger.addHandler(handler)


def configure_logging_from_args(args: argparse.Namespace):
    configure_logging(args.logging, log_file=args.log_file)
