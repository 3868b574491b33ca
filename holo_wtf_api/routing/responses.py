"""Helpers for building JSON service responses."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic_core import to_json

from .interfaces import ServiceResponse

JSON_CONTENT_TYPE = "application/json"


def routing_json_response(
    payload: Any,
    status_code: int = 200,
    headers: Mapping[str, str] | None = None,
) -> ServiceResponse:
    """Serialize a payload into a JSON response.

    Args:
        payload: JSON-compatible value; dataclasses, enums and datetimes are supported.
        status_code: HTTP status code.
        headers: Optional extra headers.

    Returns:
        ServiceResponse: Response with a JSON body and content type.

    Raises:
        pydantic_core.PydanticSerializationError: Raised when the payload cannot be serialized.
    """

    response_headers = {"content-type": JSON_CONTENT_TYPE}
    if headers:
        response_headers.update({name.lower(): value for name, value in headers.items()})
    return ServiceResponse(status_code=status_code, body=to_json(payload), headers=response_headers)


def routing_error_response(
    status_code: int,
    error_code: str,
    message: str,
    details: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
) -> ServiceResponse:
    """Build the machine-readable error body used for every per-request failure."""

    payload: dict[str, Any] = {"status": "error", "error": error_code, "message": message}
    if details:
        payload.update(details)
    return routing_json_response(payload, status_code=status_code, headers=headers)
