"""Application-level exceptions."""


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class ConfigurationError(AppError):
    """Raised when a required collaborator is missing or misconfigured."""

    def __init__(self, message: str):
        super().__init__(message, code="CONFIGURATION_ERROR")


class QuoteUnavailableError(AppError):
    """Raised by providers when a symbol has no usable quote."""

    def __init__(self, symbol: str, reason: str = "no quote"):
        self.symbol = symbol
        super().__init__(f"Quote unavailable for {symbol}: {reason}", code="QUOTE_UNAVAILABLE")


class InsufficientDataError(AppError):
    """Raised when a series is too short for a calculation."""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient data: requires {required} points, got {available}",
            code="INSUFFICIENT_DATA",
        )
