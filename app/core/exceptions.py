from fastapi import HTTPException, status


class BaseAppError(HTTPException):
    """Base class for all application exceptions."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "An unexpected error occurred"

    def __init__(self, detail: str = None):
        super().__init__(status_code=self.status_code, detail=detail or self.detail)

    def __str__(self) -> str:
        return f"{self.status_code}: {self.detail}"


class NotFoundError(BaseAppError):
    """Resource not found error."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Resource not found"


class ValidationError(BaseAppError):
    """Record rejected before it can reach the price-check pipeline."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid data"


class ExternalApiError(BaseAppError):
    """Upstream provider call failed."""

    status_code = status.HTTP_502_BAD_GATEWAY
    detail = "External API error"

    def __init__(self, detail: str = None, provider: str = "amadeus"):
        super().__init__(detail=detail)
        self.provider = provider


class BadRequestError(ExternalApiError):
    """Upstream rejected the request as malformed."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid request"


class AuthenticationError(ExternalApiError):
    """Upstream rejected our credentials or bearer token."""

    detail = "Authentication failed"


class RateLimitError(ExternalApiError):
    """Upstream is throttling us."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    detail = "Rate limit exceeded. Please try again later."


class UpstreamUnavailableError(ExternalApiError):
    """Upstream is temporarily unavailable (5xx, timeout, network)."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    detail = "Upstream API is temporarily unavailable. Please try again later."


class NotificationChannelError(BaseAppError):
    """A single notification channel failed to deliver."""

    detail = "Notification delivery failed"

    def __init__(self, detail: str = None, channel: str = None):
        super().__init__(detail=detail)
        self.channel = channel
