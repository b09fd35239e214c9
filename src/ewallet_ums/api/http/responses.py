"""Uniform JSON envelopes returned by every endpoint."""

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel

REQUEST_ID_HEADER = "X-Request-ID"


class ApiResponse(BaseModel):
    success: bool
    message: str
    data: Any | None = None
    request_id: str | None = None


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: str | None = None
    request_id: str | None = None


def get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def send_response(
    request: Request, data: Any, message: str, status_code: int = 200
) -> JSONResponse:
    body = ApiResponse(
        success=200 <= status_code < 300,
        message=message,
        data=data,
        request_id=get_request_id(request),
    )
    return JSONResponse(
        status_code=status_code, content=body.model_dump(mode="json", exclude_none=True)
    )


def send_error_response(
    request: Request,
    message: str,
    error: BaseException | str | None,
    status_code: int,
) -> JSONResponse:
    request_id = get_request_id(request)
    error_text = str(error) if error is not None else None
    if error is not None:
        logger.bind(error=error_text, request_id=request_id).error(
            "Error response: {}", message
        )

    body = ErrorResponse(message=message, error=error_text or None, request_id=request_id)
    return JSONResponse(
        status_code=status_code, content=body.model_dump(mode="json", exclude_none=True)
    )
