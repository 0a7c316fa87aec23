from typing import Any, Dict, Optional

class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class AuthenticationError(AppException):
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            message=message,
            status_code=401,
            error_code="UNAUTHORIZED"
        )

class AccessDeniedError(AppException):
    """Custom permission error. Named AccessDeniedError to avoid shadowing Python's built-in PermissionError."""
    def __init__(self, message: str = "Access denied"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="ACCESS_DENIED"
        )

class ProfileNotFoundError(AppException):
    def __init__(self, message: str = "Profile not found"):
        super().__init__(
            message=message,
            status_code=404,
            error_code="PROFILE_NOT_FOUND"
        )

class FetchFailedError(AppException):
    """Raised when any read in the fetch stage fails; the whole aggregation is abandoned."""
    def __init__(self, message: str = "Failed to fetch dashboard data", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=502,
            error_code="FETCH_FAILED",
            details=details
        )

_STATUS_BY_CODE = {
    "UNAUTHORIZED": 401,
    "ACCESS_DENIED": 403,
    "PROFILE_NOT_FOUND": 404,
    "FETCH_FAILED": 502,
}

def status_code_for(error_code: str) -> int:
    """HTTP status for an error code carried by a failure envelope."""
    return _STATUS_BY_CODE.get(error_code, 400)
