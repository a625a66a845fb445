# ------------------------------------------------------------------------------
# email_forwarder_lambda.py
# ------------------------------------------------------------------------------

"""Email forwarder Lambda.

Triggered for each email SES stores in S3. The forwarding mapping is read
from Parameter Store on every invocation and the message is handed to
:func:`ses_forwarder.handler`, which rewrites and resends it through SES.

Environment variables
---------------------
``EMAIL_MAPPING_SSM_KEY``
    Name of the SSM parameter holding the JSON forwarding mapping. **Required.**
``FROM_EMAIL``
    Verified sender address for forwarded mail. **Required.**
``BUCKET_NAME``
    Bucket the SES receipt rule stores raw messages in. **Required.**
``BUCKET_PREFIX``
    Key prefix of the stored messages.
``ENABLE_LOGGING``
    ``"true"`` enables diagnostic logging of events and forwarding config.
"""

from __future__ import annotations

import json
from concurrent.futures import Future
from typing import Any, Callable, Dict, Optional

import ses_forwarder
from common_utils import (
    ForwardingError,
    configure_logger,
    get_values_from_ssm,
    lambda_response,
)
from models import ForwarderSettings, ForwardRequest

__author__ = "Koushik Sinha"
__version__ = "1.0.0"

logger = configure_logger(__name__)

SETTINGS = ForwarderSettings.from_env()


def _get_mapping_parameter(name: str) -> Optional[str]:
    return get_values_from_ssm(name, decrypt=True)


def forward_email(
    event: Any,
    context: Any,
    request: ForwardRequest,
    forwarder: Optional[Callable[..., Any]] = None,
) -> None:
    """Run ``forwarder`` and block until its callback reports the outcome.

    The first callback resolves a one-shot future; later calls are ignored.
    An error reported by the forwarder is raised as :class:`ForwardingError`.
    """
    forwarder = forwarder or ses_forwarder.handler
    outcome: Future = Future()

    def _callback(err: Any = None, *_: Any) -> None:
        if outcome.done():
            logger.warning("Forwarder reported completion more than once; ignoring")
            return
        if err:
            failure = ForwardingError("Email forwarding failed")
            if isinstance(err, BaseException):
                failure.__cause__ = err
            outcome.set_exception(failure)
        else:
            outcome.set_result(None)

    forwarder(event, context, _callback, {"config": request.to_config()})
    if not outcome.done():
        logger.warning("Forwarder returned before reporting completion; waiting for its callback")
    outcome.result()


def handle(
    event: Any,
    context: Any,
    settings: ForwarderSettings,
    get_parameter: Optional[Callable[[str], Optional[str]]] = None,
    forwarder: Optional[Callable[..., Any]] = None,
) -> Dict[str, Any]:
    """Forward the email described by ``event`` using ``settings``."""
    if settings.logging_enabled:
        logger.info("Received SES event: %s", json.dumps(event, default=str))

    missing = settings.missing()
    if missing:
        logger.error(
            "Missing required environment variables: %s", ", ".join(missing)
        )
        return lambda_response(500, "Forwarder not configured")

    get_parameter = get_parameter or _get_mapping_parameter
    raw_mapping = get_parameter(settings.ssm_key)
    if not raw_mapping:
        if settings.logging_enabled:
            logger.info(
                "Not forwarding mail. Reason: No email mapping found in SSM parameter %s",
                settings.ssm_key,
            )
        return lambda_response(200, "No forwarding mapping")

    request = ForwardRequest(
        from_email=settings.from_email,
        email_bucket=settings.bucket_name,
        email_key_prefix=settings.bucket_prefix,
        forward_mapping=json.loads(raw_mapping),
    )
    if settings.logging_enabled:
        logger.info("Forwarding email with config: %s", json.dumps(request.to_config()))

    forward_email(event, context, request, forwarder)
    return lambda_response(200, "Forwarded")


def lambda_handler(event: dict, context: object) -> dict:
    return handle(event, context, SETTINGS)
