"""Error types and logging helpers shared by the forwarder components."""

from __future__ import annotations

import logging

__all__ = [
    "ForwarderError",
    "ForwardingError",
    "InvalidEventError",
    "log_exception",
]


class ForwarderError(Exception):
    """Base class for errors raised while forwarding email."""


class ForwardingError(ForwarderError):
    """The delegated forwarder reported a failure through its callback."""


class InvalidEventError(ForwarderError):
    """The Lambda event does not describe a stored email message."""


def log_exception(message: str, exc: BaseException, logger: logging.Logger) -> None:
    """Log ``exc`` with ``message`` using ``logger``."""

    logger.error("%s: %s", message, exc)
