"""Application exception classes."""


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""


class JournalError(Exception):
    """Raised when writing to journal files fails."""


class WeatherProviderError(Exception):
    """Raised when weather provider requests or normalization fail."""


class ProviderRejectedError(WeatherProviderError):
    """Raised when the provider answers with a non-success status in the body."""

    def __init__(self, message: str, *, status_code: int | str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
