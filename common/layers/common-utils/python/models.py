"""Shared dataclasses describing Lambda events, settings and responses."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


@dataclass
class LambdaResponse:
    """Standard HTTP-style Lambda response."""

    statusCode: int
    body: Any


@dataclass
class S3Record:
    """Single record from an S3 event."""

    bucket: str
    key: str


@dataclass
class S3Event:
    """Wrapper for S3 or SES event records."""

    Records: List[Dict[str, Any]]


@dataclass(frozen=True)
class ForwarderSettings:
    """Process-wide configuration of the email forwarder Lambda.

    Built once when the Lambda module is imported and passed to every
    invocation. ``ssm_key``, ``from_email`` and ``bucket_name`` are required;
    :meth:`missing` reports which of them are empty.
    """

    ssm_key: Optional[str] = None
    from_email: Optional[str] = None
    bucket_name: Optional[str] = None
    bucket_prefix: Optional[str] = None
    logging_enabled: bool = False

    ENV_NAMES = {
        "ssm_key": "EMAIL_MAPPING_SSM_KEY",
        "from_email": "FROM_EMAIL",
        "bucket_name": "BUCKET_NAME",
    }

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ForwarderSettings":
        env = os.environ if environ is None else environ
        return cls(
            ssm_key=env.get("EMAIL_MAPPING_SSM_KEY"),
            from_email=env.get("FROM_EMAIL"),
            bucket_name=env.get("BUCKET_NAME"),
            bucket_prefix=env.get("BUCKET_PREFIX"),
            logging_enabled=env.get("ENABLE_LOGGING") == "true",
        )

    def missing(self) -> List[str]:
        """Return the environment variable names of unset required values."""
        return [env for attr, env in self.ENV_NAMES.items() if not getattr(self, attr)]


@dataclass(frozen=True)
class ForwardRequest:
    """Configuration handed to the delegated forwarder for one invocation."""

    from_email: str
    email_bucket: str
    forward_mapping: Any
    email_key_prefix: Optional[str] = None

    def to_config(self) -> Dict[str, Any]:
        config = {
            "from_email": self.from_email,
            "email_bucket": self.email_bucket,
            "forward_mapping": self.forward_mapping,
        }
        # an unset prefix falls back to the forwarder default
        if self.email_key_prefix is not None:
            config["email_key_prefix"] = self.email_key_prefix
        return config


@dataclass
class ForwardJob:
    """State threaded through the steps of one forwarder run."""

    event: Any
    context: Any
    config: Dict[str, Any]
    log: Any
    s3: Any = None
    ses: Any = None
    record: Dict[str, Any] = field(default_factory=dict)
    mail: Dict[str, Any] = field(default_factory=dict)
    bucket: Optional[str] = None
    key: Optional[str] = None
    original_recipients: List[str] = field(default_factory=list)
    original_recipient: Optional[str] = None
    recipients: List[str] = field(default_factory=list)
    email_data: bytes = b""
