"""Shared helper for reading parameters from SSM Parameter Store."""

from typing import Any, Optional
import boto3

from .logging_utils import configure_logger

__author__ = "Koushik Sinha"
__version__ = "1.1.0"
__modified_by__ = "Koushik Sinha"

logger = configure_logger(__name__)
_ssm_client = None


def _get_client() -> Any:
    global _ssm_client
    if _ssm_client is None:
        _ssm_client = boto3.client("ssm")
    return _ssm_client


def get_values_from_ssm(
    name: str, decrypt: bool = False, client: Any = None
) -> Optional[str]:
    """Retrieve a parameter value from SSM with optional decryption.

    Every call goes to SSM; values are never cached between invocations.
    Returns ``None`` when the parameter exists but carries no value. Errors
    from SSM (including ``ParameterNotFound``) are logged and re-raised.
    """
    ssm = client or _get_client()
    try:
        resp = ssm.get_parameter(Name=name, WithDecryption=decrypt)
    except Exception as exc:
        logger.error("Error retrieving parameter %s: %s", name, exc)
        raise
    value = resp.get("Parameter", {}).get("Value")
    logger.debug("Retrieved parameter %s (%s)", name, "set" if value else "empty")
    return value
