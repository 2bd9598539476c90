"""Custom loopmatch exceptions."""


class EngineError(Exception):
    """Base exception for loopmatch errors."""

    def __init__(
        self, message: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_error = original_error


class ProviderError(EngineError):
    """Exception raised when an external generation or synthesis call fails.

    Always recoverable: the matcher treats it as a tier rejection and the
    theme extractor falls back to lexical keywords.
    """

    pass


class ProviderAuthError(ProviderError):
    """Exception raised for provider authentication failures.

    This typically occurs when:
    - API key is missing or invalid
    - Account has insufficient credits
    """

    pass


class ProviderAPIError(ProviderError):
    """Exception raised for provider communication errors.

    This typically occurs when:
    - API server is unavailable (5xx errors)
    - Rate limits are exceeded (429 error)
    - The call timed out
    - The response was empty or malformed
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.status_code = status_code


class PersistenceError(EngineError):
    """Exception raised when a write or read against a durable store fails."""

    pass


class ConfigError(EngineError):
    """Exception raised for invalid configuration values."""

    pass
