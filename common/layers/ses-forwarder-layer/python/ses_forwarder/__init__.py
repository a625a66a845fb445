"""Forward email stored by SES receipt rules using SES SendRawEmail."""

from .forwarder import DEFAULT_CONFIG, DEFAULT_STEPS, handler
from .steps import (
    fetch_message,
    lookup_destinations,
    parse_event,
    process_message,
    send_message,
    transform_recipients,
)

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_STEPS",
    "handler",
    "parse_event",
    "fetch_message",
    "transform_recipients",
    "process_message",
    "send_message",
    "lookup_destinations",
]
