class BaseExchangeError(Exception):
    """Root of every error raised by the Aevo connector."""
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ExchangeRestError(BaseExchangeError):
    """Base exception for all exchange REST API errors."""
    def __init__(self, code: int, message: str, api_code: int | None = None) -> None:
        self.api_code = api_code
        self.status_code = code
        super().__init__(message)

    def __str__(self):
        return f"HTTP {self.status_code}: {self.message}"


# Connection and Infrastructure Errors (Retryable)
class ExchangeConnectionRestError(ExchangeRestError):
    """Network connection errors that may be temporary."""
    pass


class ExchangeServerError(ExchangeRestError):
    """Server-side errors (5xx) that may be temporary."""
    pass


# Rate Limiting Errors (Retryable with backoff)
class RateLimitErrorRest(ExchangeRestError):
    """Rate limit exceeded errors."""
    def __init__(self, code: int, message: str, api_code: int | None = None, retry_after: int | None = None) -> None:
        super().__init__(code, message, api_code)
        self.retry_after = retry_after

    def __str__(self):
        return f"RateLimitError: {self.status_code} - {self.message} - {self.api_code} - {self.retry_after}"


# Authentication and Authorization Errors (Non-retryable)
class AuthenticationError(ExchangeRestError):
    """Authentication failed - API key/secret rejected or missing."""
    pass


# Business Logic Errors (Non-retryable)
class InvalidParameterError(ExchangeRestError):
    """Invalid request parameters - client-side error."""
    pass


class OrderNotFoundError(ExchangeRestError):
    """Order not found for given ID."""
    pass
