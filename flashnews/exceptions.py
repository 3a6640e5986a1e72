from typing import Optional, Dict, Any


class FlashNewsError(Exception):
    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


class ResourceUnavailable(FlashNewsError):
    """The connection pool could not produce a handle."""
    pass


class StoreAccessError(FlashNewsError):
    pass


class FetchError(FlashNewsError):
    """The news provider was unreachable or answered with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(
            message=message,
            error_code="FETCH_FAILED",
            details={"status_code": status_code} if status_code is not None else None
        )
        self.status_code = status_code


class ParseError(FlashNewsError):
    pass
