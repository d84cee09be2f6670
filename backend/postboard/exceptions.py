"""
Postboard Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for each failure the API reports.
How:   Each exception carries a client-safe message and an optional context
       dict. Global handlers registered in main.py turn them into JSON
       responses with the right status code; the context is logged only.
Who:   Raised by services and dependencies; caught by the global handlers.

Exception Hierarchy:
    PostboardError (base)
    ├── ValidationError       → 400 Bad Request
    ├── AuthenticationError   → 401 Unauthorized (no/invalid token)
    ├── NotAuthorizedError    → 401 Unauthorized (ownership check matched nothing)
    ├── NotFoundError         → 404 Not Found
    ├── FileStorageError      → 500 Internal Server Error
    └── DatabaseError         → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class PostboardError(Exception):
    """
    Base exception for all Postboard application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PostboardError):
    """
    Raised when client input fails validation.

    When:    Unsupported image type, oversized upload, missing title/content,
             unreadable request body.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(PostboardError):
    """
    Raised when the caller's bearer token is missing or cannot be verified.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "You are not authenticated!",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotAuthorizedError(PostboardError):
    """
    Raised when an update or delete filtered by id AND creator matched nothing.

    The post may not exist, or it may belong to someone else. Both cases
    produce the same response so a caller cannot probe for other users' ids.
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Not authorised!",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(PostboardError):
    """
    Raised when a requested resource does not exist.

    When:    GET /api/posts/{id} with an unknown or malformed id,
             GET /images/{name} for a file that is not on disk.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        message: str = "Post not found!",
        resource: str = "post",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class FileStorageError(PostboardError):
    """
    Raised when writing an uploaded image to disk fails.

    When:    Disk full, permission denied, directory not writable.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(PostboardError):
    """
    Raised when a database operation fails unexpectedly.

    The message is one of the fixed per-operation texts ("Creating a post
    failed", ...). Driver errors, SQL and constraint names go to the log only.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
