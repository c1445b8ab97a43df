import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from fitcoach.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    ConflictError,
    DomainError,
    EmptyResponseError,
    GenerationFailedError,
    ImageResponseInvalidError,
    ImageUrlInvalidError,
    NoModelsAvailableError,
    NotFoundError,
    PlanValidationError,
    ProviderError,
    ProviderRateLimitError,
    UnsupportedModelTypeError,
    ValidationError,
)

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong."

ERROR_STATUS_MAP: dict[type[DomainError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    ConflictError: status.HTTP_409_CONFLICT,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    NoModelsAvailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
    UnsupportedModelTypeError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ProviderRateLimitError: status.HTTP_429_TOO_MANY_REQUESTS,
    EmptyResponseError: status.HTTP_502_BAD_GATEWAY,
    ProviderError: status.HTTP_502_BAD_GATEWAY,
    PlanValidationError: status.HTTP_502_BAD_GATEWAY,
    GenerationFailedError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ImageResponseInvalidError: status.HTTP_502_BAD_GATEWAY,
    ImageUrlInvalidError: status.HTTP_400_BAD_REQUEST,
}

# Errors whose message may carry provider or configuration internals.
_MASKED_MESSAGES: dict[type[DomainError], str] = {
    ConfigurationError: GENERIC_ERROR_MESSAGE,
    UnsupportedModelTypeError: GENERIC_ERROR_MESSAGE,
    NoModelsAvailableError: "No AI models are available right now.",
    EmptyResponseError: "Failed to generate content.",
    ProviderError: "Failed to generate content.",
    PlanValidationError: "Failed to generate content.",
}


def status_for(exc: DomainError) -> int:
    for klass in type(exc).__mro__:
        if klass in ERROR_STATUS_MAP:
            return ERROR_STATUS_MAP[klass]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _public_message(exc: DomainError) -> str:
    if isinstance(exc, ProviderRateLimitError):
        return exc.message
    if isinstance(exc, GenerationFailedError):
        return f"Failed to generate {exc.kind} plan."
    for klass in type(exc).__mro__:
        if klass in _MASKED_MESSAGES:
            return _MASKED_MESSAGES[klass]
    return exc.message


def error_body(code: str, message: str, fields: dict[str, str] | None = None) -> dict:
    error: dict = {"code": code, "message": message}
    if fields:
        error["fields"] = fields
    return {"error": error}


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    # A rate limit that exhausted plan generation is surfaced as the rate limit itself.
    if isinstance(exc, GenerationFailedError) and isinstance(exc.last_error, ProviderRateLimitError):
        exc = exc.last_error

    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(
            "Request failed: %s %s -> %s %s",
            request.method,
            request.url.path,
            exc.code,
            exc.message,
        )

    return JSONResponse(
        status_code=status_code,
        content=error_body(exc.code, _public_message(exc), exc.fields),
    )


def _field_path(loc: tuple) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) or "root"


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body("invalid_json", "Invalid request."),
        )

    fields: dict[str, str] = {}
    for err in errors:
        fields.setdefault(_field_path(tuple(err.get("loc", ()))), err.get("msg", "Invalid value"))
    message = errors[0].get("msg", "Invalid request.") if errors else "Invalid request."
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("invalid_request", message, fields),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("internal_error", GENERIC_ERROR_MESSAGE),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
