"""Maps domain errors to HTTP responses.

Only the error code and its user-safe message leave the process.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from events.domain.errors import DomainError, ErrorKind

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.CAPACITY_EXCEEDED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.PAYMENT_REQUIRED: status.HTTP_402_PAYMENT_REQUIRED,
    ErrorKind.REFUND_FAILED: status.HTTP_502_BAD_GATEWAY,
}


def domain_exception_handler(exc, context):
    if isinstance(exc, DomainError):
        http_status = STATUS_BY_KIND[exc.kind]
        if http_status >= 500:
            logger.warning("Request failed: %s", exc)
        return Response(
            {"code": exc.code.label, "message": exc.message},
            status=http_status,
        )
    return exception_handler(exc, context)
