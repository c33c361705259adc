"""Logging helpers."""

import logging
from collections.abc import MutableMapping
from typing import Any

LoggerLike = logging.Logger | logging.LoggerAdapter


class CounterLogAdapter(logging.LoggerAdapter):
    """Prefix every message with the name of the counter that emitted it."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        return f"{self.extra['counter']} - {msg}", kwargs


def counter_logger(name: str, counter: str, logger: LoggerLike | None = None) -> LoggerLike:
    """Return the injected logger, or a prefixed module logger when none is given.

    Args:
        name: Module name used for the default logger
        counter: Label prefixed to default log messages (e.g. the platform name)
        logger: Logger supplied by the caller, used unchanged
    """
    if logger is not None:
        return logger
    return CounterLogAdapter(logging.getLogger(name), {"counter": counter})
