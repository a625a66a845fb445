"""Pipeline steps of the SES forwarder.

Each step receives the :class:`models.ForwardJob` of the current run and
returns it for the next step, or returns ``None`` to end the run early
without an error. Failures are raised and reported by
:func:`ses_forwarder.forwarder.handler` through its callback.

For S3-triggered events the original recipients are read from the ``To``
and ``Cc`` headers of the stored message. Receiving servers strip ``Bcc``, so
a forwarding address that was only blind-copied is never matched for
those events; SES events carry the envelope recipients and are not
affected.
"""

from __future__ import annotations

import re
from email.utils import getaddresses, parseaddr
from typing import Any, List, Optional

from common_utils import InvalidEventError, iter_s3_records, record_location
from models import ForwardJob

from .headers import RawHeaders, format_address

__all__ = [
    "parse_event",
    "fetch_message",
    "transform_recipients",
    "process_message",
    "send_message",
    "lookup_destinations",
]

_PLUS_TAG = re.compile(r"\+.*?@")


def parse_event(job: ForwardJob) -> ForwardJob:
    """Validate the event and record where the raw message is stored."""
    records = list(iter_s3_records(job.event or {}))
    if not records:
        raise InvalidEventError("Event contains no records")
    record = records[0]
    source = record.get("eventSource")

    if source == "aws:ses" and record.get("eventVersion") == "1.0":
        ses = record.get("ses") or {}
        if "mail" not in ses or "receipt" not in ses:
            raise InvalidEventError("SES record is missing mail or receipt data")
        job.mail = ses["mail"]
        job.original_recipients = list(ses["receipt"].get("recipients") or [])
        job.bucket = job.config.get("email_bucket")
        if not job.bucket:
            raise InvalidEventError("No email_bucket configured for SES events")
        job.key = (job.config.get("email_key_prefix") or "") + job.mail["messageId"]
    elif source == "aws:s3" and "s3" in record:
        try:
            location = record_location(record)
        except KeyError as exc:
            raise InvalidEventError(f"S3 record is missing {exc}") from exc
        job.bucket, job.key = location.bucket, location.key
    else:
        raise InvalidEventError(
            f"Unsupported event source {source!r}; expected an SES or S3 record"
        )

    job.record = record
    job.log.info("Parsed %s event for s3://%s/%s", source, job.bucket, job.key)
    return job


def fetch_message(job: ForwardJob) -> ForwardJob:
    """Download the raw message from S3."""
    job.log.info("Fetching email at s3://%s/%s", job.bucket, job.key)
    obj = job.s3.get_object(Bucket=job.bucket, Key=job.key)
    job.email_data = obj["Body"].read()

    if job.record.get("eventSource") == "aws:s3":
        headers = RawHeaders.from_bytes(job.email_data)
        pairs = getaddresses(headers.get_all("To") + headers.get_all("Cc"))
        job.original_recipients = [addr for _name, addr in pairs if addr]
    return job


def _normalize(address: str, allow_plus_sign: bool) -> str:
    key = address.lower()
    if allow_plus_sign:
        key = _PLUS_TAG.sub("@", key, count=1)
    return key


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def lookup_destinations(
    address: str, mapping: dict, allow_plus_sign: bool = True
) -> Optional[List[str]]:
    """Return the forwarding destinations for ``address``.

    Keys are tried in order: full address, ``@domain``, local part and the
    catch-all ``@``. ``None`` means the address is not mapped.
    """
    key = _normalize(address, allow_plus_sign)
    if key in mapping:
        return _as_list(mapping[key])

    user, sep, domain = key.rpartition("@")
    if not sep:
        user, domain = key, ""
    candidates = []
    if domain:
        candidates.append("@" + domain)
    if user:
        candidates.append(user)
    candidates.append("@")
    for candidate in candidates:
        if candidate in mapping:
            return _as_list(mapping[candidate])
    return None


def transform_recipients(job: ForwardJob) -> Optional[ForwardJob]:
    """Replace the original recipients with their forwarding destinations."""
    mapping = job.config.get("forward_mapping") or {}
    allow_plus_sign = job.config.get("allow_plus_sign", True)

    recipients: List[str] = []
    for original in job.original_recipients:
        destinations = lookup_destinations(original, mapping, allow_plus_sign)
        if destinations is None:
            continue
        recipients.extend(destinations)
        job.original_recipient = original

    if not recipients:
        job.log.info(
            "Finishing process. No new recipients found for original destinations: %s",
            ", ".join(job.original_recipients),
        )
        return None

    job.recipients = recipients
    return job


def _rewrite_from(value: str, from_email: Optional[str], original_recipient: str) -> str:
    name, address = parseaddr(value)
    if from_email:
        return format_address(name or address, from_email)
    display = f"{name} at {address}" if name else address
    return format_address(display, original_recipient)


def process_message(job: ForwardJob) -> ForwardJob:
    """Rewrite the headers so SES accepts the message for sending."""
    headers = RawHeaders.from_bytes(job.email_data)
    config = job.config

    original_from = headers.get("From")
    if headers.get("Reply-To") is None and original_from:
        headers.append("Reply-To", original_from)

    # SES only sends from verified identities
    if original_from is not None:
        headers.replace(
            "From",
            _rewrite_from(original_from, config.get("from_email"), job.original_recipient),
        )

    subject_prefix = config.get("subject_prefix")
    subject = headers.get("Subject")
    if subject_prefix and subject is not None:
        headers.replace("Subject", subject_prefix + subject)

    to_email = config.get("to_email")
    if to_email and headers.get("To") is not None:
        headers.replace("To", to_email)

    for name in ("Return-Path", "Sender", "Message-ID", "DKIM-Signature"):
        headers.remove(name)

    job.email_data = headers.to_bytes()
    return job


def send_message(job: ForwardJob) -> ForwardJob:
    """Send the rewritten message to the new recipients via SES."""
    job.log.info(
        "Sending email via SES. Original recipients: %s. Transformed recipients: %s.",
        ", ".join(job.original_recipients),
        ", ".join(job.recipients),
    )
    result = job.ses.send_raw_email(
        Destinations=job.recipients,
        Source=job.original_recipient,
        RawMessage={"Data": job.email_data},
    )
    job.log.info("SendRawEmail succeeded. MessageId: %s", result.get("MessageId"))
    return job
