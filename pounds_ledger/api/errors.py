"""Map domain exceptions to HTTP responses"""

import logging
from fastapi import HTTPException

from pounds_ledger.domain.exceptions import (
    AuthorizationError,
    DomainException,
    DuplicateAccountError,
    DuplicateBankAccountError,
    NotFoundError,
    PaymentNotVerifiedError,
    PinNotSetError,
    RemoteFailure,
    ValidationError,
)

# Most specific first: PinNotSetError is also a ValidationError
STATUS_BY_EXCEPTION = [
    (PinNotSetError, 409),
    (ValidationError, 422),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (DuplicateAccountError, 409),
    (DuplicateBankAccountError, 409),
    (PaymentNotVerifiedError, 402),
]

REMOTE_FAILURE_DETAIL = "Service temporarily unavailable, please try again"


def to_http_exception(exc: DomainException, request_id: str) -> HTTPException:
    """Translate a domain error; remote failures get a generic message and are logged"""
    if isinstance(exc, RemoteFailure):
        logging.error(f"Remote failure: {exc}", extra={"request_id": request_id})
        return HTTPException(status_code=503, detail=REMOTE_FAILURE_DETAIL)

    for exc_type, status_code in STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            logging.warning(f"{exc_type.__name__}: {exc}", extra={"request_id": request_id})
            return HTTPException(status_code=status_code, detail=str(exc))

    logging.error(f"Unmapped domain error: {exc}", extra={"request_id": request_id})
    return HTTPException(status_code=500, detail="Internal server error")
