class StoreError(Exception):
    """Base class for failures inside the task store."""


class LockError(StoreError):
    """Raised when the store's state can no longer be locked (poisoned by an earlier failure)."""


class PersistenceError(StoreError):
    """Raised when the task file cannot be encoded, written, or read back."""


class IntegrationError(Exception):
    """Raised when an external API call fails."""


class NetworkError(IntegrationError):
    """Raised when an external API could not be reached (connection error or timeout)."""


class RateLimitError(Exception):
    """Raised when an external API rate limit is hit."""
