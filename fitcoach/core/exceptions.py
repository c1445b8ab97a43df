class DomainError(Exception):
    def __init__(self, code: str, message: str, fields: dict[str, str] | None = None):
        self.code = code
        self.message = message
        self.fields = fields
        super().__init__(message)


class NotFoundError(DomainError):
    def __init__(self, entity: str, message: str | None = None, fields: dict[str, str] | None = None):
        code = f"{entity.lower()}_not_found"
        msg = message or f"{entity.replace('_', ' ').capitalize()} not found."
        super().__init__(code, msg, fields)


class ValidationError(DomainError):
    def __init__(self, message: str, code: str = "invalid_request", fields: dict[str, str] | None = None):
        super().__init__(code, message, fields)


class ConflictError(DomainError):
    def __init__(self, message: str, code: str = "conflict", fields: dict[str, str] | None = None):
        super().__init__(code, message, fields)


class AuthenticationError(DomainError):
    def __init__(self, message: str = "Unauthorized", code: str = "unauthorized"):
        super().__init__(code, message)


class AuthorizationError(DomainError):
    def __init__(self, message: str = "Forbidden", code: str = "forbidden"):
        super().__init__(code, message)


class ConfigurationError(DomainError):
    """A required setting (API key, secret, database URL) is missing."""

    def __init__(self, message: str):
        super().__init__("configuration_error", message)


# AI routing and generation

class NoModelsAvailableError(DomainError):
    def __init__(self, message: str = "No enabled AI models available"):
        super().__init__("no_models_available", message)


class UnsupportedModelTypeError(DomainError):
    def __init__(self, model_type: str):
        self.model_type = model_type
        super().__init__("unsupported_model_type", f"Unsupported model type: {model_type}")


class ProviderError(DomainError):
    """Non-2xx response from an upstream chat-completion API."""

    def __init__(self, provider: str, message: str = "Failed to generate content", status_code: int | None = None):
        self.provider = provider
        self.status_code = status_code
        super().__init__("provider_error", message)


class ProviderRateLimitError(ProviderError):
    def __init__(self, provider: str, message: str, retry_after: str | None = None):
        self.retry_after = retry_after
        super().__init__(provider, message, status_code=429)
        self.code = "rate_limited"


class EmptyResponseError(ProviderError):
    def __init__(self, provider: str):
        super().__init__(provider, f"{provider} returned empty response")
        self.code = "empty_response"


class PlanValidationError(DomainError):
    """Model output that is not valid JSON or does not match the plan schema."""

    def __init__(self, message: str):
        super().__init__("plan_invalid", message)


class GenerationFailedError(DomainError):
    def __init__(self, kind: str, last_error: Exception | None = None, attempts: int = 0):
        self.kind = kind
        self.last_error = last_error
        self.attempts = attempts
        detail = f": {last_error}" if last_error else ""
        super().__init__("generation_failed", f"Failed to generate {kind} plan after {attempts} attempts{detail}")


class ImageEnrichmentError(DomainError):
    pass


class ImageResponseInvalidError(ImageEnrichmentError):
    def __init__(self, message: str = "Invalid image response."):
        super().__init__("image_response_invalid", message)


class ImageUrlInvalidError(ImageEnrichmentError):
    def __init__(self, message: str = "Invalid image URL."):
        super().__init__("image_url_invalid", message)
