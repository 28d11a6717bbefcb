"""
Log sinks - the ``(message, severity)`` logging capability passed to servers.

Every server component takes a sink at construction instead of reaching for
a global logger, so the host decides where notifications end up.
"""

import logging
from enum import IntEnum
from typing import Callable

LogSink = Callable[[str, int], None]


class Severity(IntEnum):
    """Severity scale shared with the host application."""

    INFO = 0
    WARNING = 1
    ERROR = 2
    FATAL = 3


_LOGGING_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
    Severity.FATAL: logging.CRITICAL,
}


def _coerce(severity: int) -> Severity:
    try:
        return Severity(severity)
    except ValueError:
        return Severity.FATAL if severity > Severity.FATAL else Severity.INFO


def print_sink(tag: str) -> LogSink:
    """
    Console sink in the ``[Tag] message`` style.

    Args:
        tag: Component name shown in brackets

    Returns:
        A sink printing INFO messages plainly and prefixing the rest
        with the severity name.
    """
    def sink(message: str, severity: int = Severity.INFO) -> None:
        level = _coerce(severity)
        if level == Severity.INFO:
            print(f"[{tag}] {message}")
        else:
            print(f"[{tag}] {level.name}: {message}")

    return sink


def logging_sink(logger: logging.Logger) -> LogSink:
    """Forward sink messages to a standard ``logging.Logger``."""
    def sink(message: str, severity: int = Severity.INFO) -> None:
        logger.log(_LOGGING_LEVELS[_coerce(severity)], message)

    return sink


def prefixed_sink(sink: LogSink) -> LogSink:
    """
    Wrap a sink so messages carry their severity as ``[n] message``.

    This is the format host log events use, where the severity digit is
    parsed back out of the second character.
    """
    def wrapped(message: str, severity: int = Severity.INFO) -> None:
        sink(f"[{int(severity)}] {message}", severity)

    return wrapped
