# core/api.py

"""
API ERROR NORMALIZATION

All shop endpoints answer domain failures with the same envelope:

    {"error": {"code": "...", "message": "..."}}
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response

from core.exceptions import (
    ConflictError,
    NotFoundError,
    PaymentGatewayError,
    ShopError,
    ValidationError,
)

_STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (PaymentGatewayError, status.HTTP_502_BAD_GATEWAY),
)


def error_response(*, code: str, message: str, http_status: int):
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def domain_error_response(exc: ShopError):
    http_status = status.HTTP_400_BAD_REQUEST
    for error_cls, mapped in _STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            http_status = mapped
            break
    return error_response(
        code=exc.code,
        message=exc.message or str(exc),
        http_status=http_status,
    )
