"""
Input validation for registry operations.

Both validators are pure functions: they return a typed model or raise
InvalidInput naming the first offending field. Nothing here touches the store.
"""

from typing import Any, Mapping

from pydantic import BaseModel, ValidationError

from ..errors import InvalidInput
from ..models import AgentRegistration, SearchRequest


def describe_validation_error(exc: ValidationError) -> InvalidInput:
    """Turn the first pydantic error into an InvalidInput."""
    errors = exc.errors()
    if not errors:
        return InvalidInput("Invalid input")

    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "Invalid value")
    if field:
        return InvalidInput(f"{field}: {message}", field=field)
    return InvalidInput(message)


def _parse(model: type, data: Any) -> BaseModel:
    if isinstance(data, model):
        return data
    if not isinstance(data, Mapping):
        raise InvalidInput("Request body must be a JSON object")
    try:
        return model.model_validate(dict(data))
    except ValidationError as exc:
        raise describe_validation_error(exc) from exc


def parse_registration(data: Any) -> AgentRegistration:
    """
    Validate a registration payload.

    Args:
        data: Mapping with camelCase (or snake_case) keys, or an AgentRegistration

    Returns:
        The validated registration with defaults applied

    Raises:
        InvalidInput: If a field is missing, mistyped or out of range
    """
    return _parse(AgentRegistration, data)


def parse_search_request(params: Any) -> SearchRequest:
    """
    Validate discovery parameters.

    None values are treated as absent so callers can pass optional query
    parameters straight through.

    Raises:
        InvalidInput: If a parameter is mistyped or out of range
    """
    if isinstance(params, Mapping):
        params = {key: value for key, value in params.items() if value is not None}
    return _parse(SearchRequest, params)
