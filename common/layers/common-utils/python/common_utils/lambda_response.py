"""Utilities for building Lambda-style responses."""

from dataclasses import asdict
from typing import Any, Dict

from models import LambdaResponse

__all__ = ["lambda_response"]


def lambda_response(status: int, body: Any) -> Dict[str, Any]:
    """Return a standard Lambda response dictionary."""
    return asdict(LambdaResponse(statusCode=status, body=body))
