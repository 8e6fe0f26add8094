"""Render aggregate results and errors for callers."""

from __future__ import annotations

import json
from typing import Any

from .exceptions import ParameterValidationError
from .run_result import AggregateResult


def response_to_text(aggregate: AggregateResult) -> str:
    """Outputs of all commands concatenated in execution order."""
    return aggregate.text


def response_to_mapping(aggregate: AggregateResult) -> dict[str, dict[str, str]]:
    """Structured form: {"Result": {executable: output}}."""
    return {"Result": aggregate.by_command()}


def error_response(error: ParameterValidationError) -> dict[str, Any]:
    return {"Message": str(error), "Code": error.code}


def response_to_json(response: Any) -> str:
    """JSON-encode a response dict (or an AggregateResult / validation error)."""
    if isinstance(response, AggregateResult):
        response = response_to_mapping(response)
    elif isinstance(response, ParameterValidationError):
        response = error_response(response)
    return json.dumps(response)
