"""BSV wallet client exception hierarchy.

This module defines the base exception class and the classified errors
raised by the authenticated API access layer.
"""


class BsvWalletError(Exception):
    """Base exception for all wallet client errors.

    All custom exceptions should inherit from this class so callers can
    catch every classified failure with a single handler.
    """

    pass


class ConfigurationError(BsvWalletError):
    """Raised when configuration is invalid or missing.

    Example:
        raise ConfigurationError("API_BASE_URL must start with http:// or https://")
    """

    pass


class ValidationError(BsvWalletError):
    """Raised when caller input is rejected before any request is made.

    Example:
        raise ValidationError("Recipient paymail must not be empty")
    """

    pass


class TransportError(BsvWalletError):
    """Raised when a call never reached the server.

    Covers connection failures, DNS errors and timeouts.

    Attributes:
        endpoint: Path of the request that failed.
    """

    def __init__(self, message: str, endpoint: str | None = None) -> None:
        self.endpoint = endpoint
        super().__init__(message)


class HttpError(BsvWalletError):
    """Raised when the service answers with a 4xx/5xx status.

    Attributes:
        status_code: HTTP status code of the response.
        message: Message parsed from the error body, or a generic one.
        endpoint: Path of the request that failed.

    Example:
        raise HttpError(status_code=400, message="Insufficient funds")
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        endpoint: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        super().__init__(message)


class AuthExpiredError(BsvWalletError):
    """Raised when a 401 survives a failed or impossible token refresh.

    The token store has already been cleared when this is raised, so the
    session is anonymous and the user has to log in again.
    """

    def __init__(self, message: str = "Session expired. Please log in again.") -> None:
        super().__init__(message)


class SchemaError(BsvWalletError):
    """Raised when a response shape matches none of the known variants.

    Attributes:
        endpoint: Logical endpoint whose payload was not recognized.
    """

    def __init__(self, message: str, endpoint: str | None = None) -> None:
        self.endpoint = endpoint
        super().__init__(message)
