import logging

from fastapi import HTTPException, status

from tempforms.services.exceptions import (
    AnswerValidationError,
    DenialReason,
    DuplicateResponseError,
    FormExpiredError,
    FormNotFoundError,
    FormValidationError,
    LinkGenerationExhaustedError,
    ResponseAccessDenied,
    StorageError,
    TempFormsError,
)

logger = logging.getLogger(__name__)

_DENIAL_MESSAGES = {
    DenialReason.PASSWORD_REQUIRED: "Password required",
    DenialReason.INVALID_PASSWORD: "Invalid password",
}


def to_http_exception(exc: TempFormsError) -> HTTPException:
    """Translate a service exception into the HTTP status it stands for."""
    if isinstance(exc, AnswerValidationError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Please correct the following errors", "errors": exc.errors},
        )
    if isinstance(exc, FormValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, FormNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form not found")
    if isinstance(exc, FormExpiredError):
        return HTTPException(
            status_code=status.HTTP_410_GONE,
            detail={"message": "This form has expired", "expiredAt": exc.expires_at.isoformat()},
        )
    if isinstance(exc, ResponseAccessDenied):
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": _DENIAL_MESSAGES.get(exc.reason, "Unauthorized"), "reason": exc.reason.value},
        )
    if isinstance(exc, DuplicateResponseError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="You have already submitted a response to this form",
        )
    if isinstance(exc, LinkGenerationExhaustedError):
        logger.error("Link generation exhausted: %s", exc)
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create form")
    if isinstance(exc, StorageError):
        logger.error("Storage failure: %s", exc)
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Storage failure")

    logger.error("Unhandled form error: %r", exc)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")
