"""
Exception types raised by the session store.

Backend failures are wrapped once so callers can catch a single type, but the
original exception is always kept on the wrapper and chained as __cause__.
"""

from typing import Optional


class SessionStoreError(Exception):
    """Base class for all session store errors"""
    pass


class ConfigurationError(SessionStoreError):
    """Raised when the store is constructed with missing or invalid options"""
    pass


class BackendError(SessionStoreError):
    """
    Raised when a put/get/delete/update call against the backend fails.

    Attributes:
        operation: Name of the backend primitive that failed (e.g. 'put_item')
        original: The exception raised by the backend client, unchanged
    """

    def __init__(self, operation: str, original: BaseException):
        self.operation = operation
        self.original = original
        super().__init__(f"{operation} failed: {original}")

    @property
    def code(self) -> Optional[str]:
        """AWS error code when the original error is a botocore ClientError"""
        response = getattr(self.original, "response", None)
        if isinstance(response, dict):
            return response.get("Error", {}).get("Code")
        return None


class DecodeError(SessionStoreError, ValueError):
    """Raised when a stored item is missing an expected attribute or cannot be parsed"""

    def __init__(self, message: str, attribute: Optional[str] = None):
        self.attribute = attribute
        super().__init__(message)
