"""Utilities for handling S3 and SES event records."""

from typing import Iterable, Dict, Any, Union
from urllib.parse import unquote_plus

from models import S3Event, S3Record

__all__ = ["iter_s3_records", "record_location"]


def iter_s3_records(event: Union[S3Event, Dict[str, Any]]) -> Iterable[Dict[str, Any]]:
    """Yield each record contained in ``event``.

    Parameters
    ----------
    event : :class:`models.S3Event`
        Event object or dictionary from an S3- or SES-triggered Lambda.
    """
    records = event.Records if hasattr(event, "Records") else event.get("Records", [])
    for record in records or []:
        yield record


def record_location(record: Dict[str, Any]) -> S3Record:
    """Return the bucket and key of an S3 notification record.

    Object keys arrive URL-encoded in S3 notifications and are decoded here.
    """
    s3 = record["s3"]
    return S3Record(bucket=s3["bucket"]["name"], key=unquote_plus(s3["object"]["key"]))
