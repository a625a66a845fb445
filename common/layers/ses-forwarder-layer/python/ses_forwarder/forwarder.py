"""Forward email received by SES to the addresses of a forwarding mapping.

:func:`handler` runs the steps of :mod:`ses_forwarder.steps` in order and
reports the outcome through an error-first ``callback``: ``callback(None)``
when the message was sent or there was nothing to send, ``callback(exc)``
when a step failed.

Configuration keys
------------------
``from_email``
    Verified SES identity used in the rewritten ``From`` header.
``subject_prefix``
    Text prepended to the ``Subject`` header.
``email_bucket``
    Bucket holding messages stored by the SES receipt rule.
``email_key_prefix``
    Prefix of the stored message keys, followed by the SES message id.
``allow_plus_sign``
    Ignore ``+tag`` suffixes of local parts when matching recipients.
``forward_mapping``
    Recipient address, ``@domain``, local part or ``@`` mapped to one or
    more destination addresses.
``to_email``
    Replacement value for the ``To`` header.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Sequence

import boto3

from common_utils import configure_logger, log_exception
from models import ForwardJob

from .steps import (
    fetch_message,
    parse_event,
    process_message,
    send_message,
    transform_recipients,
)

__author__ = "Koushik Sinha"
__version__ = "1.0.0"

logger = configure_logger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "from_email": None,
    "subject_prefix": "",
    "email_bucket": None,
    "email_key_prefix": "",
    "allow_plus_sign": True,
    "forward_mapping": {},
    "to_email": None,
}

DEFAULT_STEPS: Sequence[Callable[[ForwardJob], Optional[ForwardJob]]] = (
    parse_event,
    fetch_message,
    transform_recipients,
    process_message,
    send_message,
)

_clients: Dict[str, Any] = {}


def _client(name: str) -> Any:
    if name not in _clients:
        _clients[name] = boto3.client(name)
    return _clients[name]


def handler(
    event: Any,
    context: Any,
    callback: Callable[..., Any],
    overrides: Optional[Dict[str, Any]] = None,
) -> None:
    """Forward the message described by ``event`` and call ``callback``."""
    overrides = overrides or {}
    config = {**DEFAULT_CONFIG, **(overrides.get("config") or {})}
    job = ForwardJob(
        event=event,
        context=context,
        config=config,
        log=overrides.get("log") or logger,
        s3=overrides.get("s3") or _client("s3"),
        ses=overrides.get("ses") or _client("ses"),
    )
    steps = overrides.get("steps") or DEFAULT_STEPS

    try:
        for step in steps:
            job = step(job)
            if job is None:
                break
    except Exception as exc:
        name = getattr(step, "__name__", repr(step))
        log_exception(f"Forwarding failed in step {name}", exc, logger)
        callback(exc)
        return
    callback(None)
