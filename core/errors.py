from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import HTTPException, status

INVALID_INPUT_MESSAGE = "Invalid inputs passed, please check your data."


class ErrorCode(str, Enum):
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    GEOCODING_FAILED = "GEOCODING_FAILED"
    STORAGE_ERROR = "STORAGE_ERROR"
    TRANSACTION_FAILED = "TRANSACTION_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppException(HTTPException):
    def __init__(
        self,
        *,
        status_code: int,
        code: ErrorCode,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        detail = {
            "message": message,
            "code": code.value,
            "details": details,
        }
        super().__init__(status_code=status_code, detail=detail, headers=headers)

    @property
    def code(self) -> str:
        return self.detail["code"]

    @property
    def message(self) -> str:
        return self.detail["message"]


def validation_failed(details: Any | None = None, message: str = INVALID_INPUT_MESSAGE) -> AppException:
    return AppException(
        status_code=422,
        code=ErrorCode.VALIDATION_FAILED,
        message=message,
        details=details,
    )


def geocoding_failed(address: str, reason: str) -> AppException:
    return AppException(
        status_code=422,
        code=ErrorCode.GEOCODING_FAILED,
        message="Could not find coordinates for the provided address.",
        details={"address": address, "reason": reason},
    )


def resource_not_found(resource: str, resource_id: str | None = None) -> AppException:
    details = {"resource": resource}
    if resource_id:
        details["resource_id"] = resource_id
    return AppException(
        status_code=status.HTTP_404_NOT_FOUND,
        code=ErrorCode.RESOURCE_NOT_FOUND,
        message=f"{resource} not found",
        details=details,
    )


def storage_error(message: str, details: Any | None = None) -> AppException:
    return AppException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code=ErrorCode.STORAGE_ERROR,
        message=message,
        details=details,
    )


def transaction_failed(message: str, details: Any | None = None) -> AppException:
    return AppException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code=ErrorCode.TRANSACTION_FAILED,
        message=message,
        details=details,
    )
