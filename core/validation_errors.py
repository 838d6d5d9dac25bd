from __future__ import annotations

from typing import Any, Iterable

from pydantic import ValidationError

from core.errors import AppException, validation_failed

_REQUEST_LOCATIONS = {"body", "query", "path", "header", "cookie"}


def _field_path(location_parts: Iterable[Any]) -> tuple[str, str]:
    parts = [str(part) for part in location_parts]
    if parts and parts[0] in _REQUEST_LOCATIONS:
        location, path_parts = parts[0], parts[1:]
    else:
        location, path_parts = "body", parts
    return location, ".".join(path_parts) or "(root)"


def format_validation_error_details(errors: Iterable[dict[str, Any]]) -> dict[str, Any]:
    """Collapse pydantic/FastAPI error dicts into a client-facing summary.

    Raw ``input`` values are dropped so uploaded file objects never reach the
    JSON encoder.
    """
    field_errors: list[dict[str, str]] = []
    missing_fields: list[str] = []

    for error in errors:
        raw_loc = error.get("loc") or ()
        if not isinstance(raw_loc, (list, tuple)):
            raw_loc = (raw_loc,)
        location, path = _field_path(raw_loc)
        error_type = str(error.get("type", "validation_error"))

        field_errors.append(
            {
                "path": path,
                "location": location,
                "message": str(error.get("msg", "Invalid value")),
                "errorType": error_type,
            }
        )
        if error_type == "missing" and path not in missing_fields:
            missing_fields.append(path)

    return {"missingFields": missing_fields, "fieldErrors": field_errors}


def validation_exception(exc: ValidationError) -> AppException:
    return validation_failed(details=format_validation_error_details(exc.errors()))
