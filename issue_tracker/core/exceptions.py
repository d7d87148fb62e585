"""
Custom Exceptions

Centralized exception definitions for better error handling.
FastAPI automatically converts these to appropriate HTTP responses.
"""
from fastapi import HTTPException, status


class IssueNotFoundError(HTTPException):
    """Raised when no issue with the given id exists in any organization."""

    def __init__(self, issue_id: str = ""):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Issue with ID {issue_id} not found" if issue_id else "Issue not found"
        )


class TenantIsolationError(HTTPException):
    """
    Raised when a caller touches an issue owned by another organization.

    Kept distinct from IssueNotFoundError. Logged as a security event.
    """

    def __init__(self, detail: str = "You do not have permission to access this issue"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )


class PermissionDenied(HTTPException):
    """Raised when the caller's role lacks privilege for the action."""

    def __init__(self, detail: str = "Permission denied"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )


class InvalidInputError(HTTPException):
    """Raised when input validation fails."""

    def __init__(self, detail: str = "Invalid input"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail
        )


class InvalidTenantContextError(InvalidInputError):
    """Raised when tenant headers are missing or malformed."""


class RateLimitExceeded(HTTPException):
    """Raised when rate limit is exceeded."""

    def __init__(self, retry_after: int = 60):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded. Please try again later.",
            headers={"Retry-After": str(retry_after)}
        )
