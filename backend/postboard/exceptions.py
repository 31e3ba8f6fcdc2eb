"""
Postboard Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for every failure a request can hit.
Why:   Services raise these instead of building responses; global handlers
       (registered in main.py) turn them into JSON with the right status code.
How:   Each exception carries a user-facing message and an optional context
       dict. The context is logged, never returned to the client.

Exception Hierarchy:
    PostboardError (base)
    ├── ValidationError          → 400  {"errors": [...]}
    │   ├── InvalidCredentialsError → 400  {"errors": [{"msg": "Invalid Credentials"}]}
    │   └── UserExistsError         → 400  {"errors": [{"msg": "User already exists"}]}
    ├── UnauthorizedError        → 401  missing or invalid token
    ├── ForbiddenError           → 401  acting user does not own the resource
    ├── NotFoundError            → 404
    ├── InvalidIdError           → 404  malformed identifier
    ├── AlreadyLikedError        → 400
    ├── NotLikedError            → 400
    ├── ConflictError            → 409  concurrent write to the same post
    └── DatabaseError            → 500

InvalidTokenError is raised by the token service only; the auth guard
converts it into UnauthorizedError.
"""

from typing import Any, Dict, List, Optional


class PostboardError(Exception):
    """
    Base exception for all Postboard application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def to_body(self) -> Dict[str, Any]:
        """JSON body returned to the client."""
        return {"msg": self.message}


class ValidationError(PostboardError):
    """
    Raised when client input fails validation.

    Carries one entry per violated field so the client can highlight each of
    them; the response body is always {"errors": [...]}.

    Example response:
        {"errors": [{"msg": "Text is required", "param": "text", "location": "body"}]}
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        if errors is None:
            entry: Dict[str, Any] = {"msg": message}
            if field:
                entry["param"] = field
                entry["location"] = "body"
            errors = [entry]
        self.errors = errors

    def to_body(self) -> Dict[str, Any]:
        return {"errors": self.errors}


class InvalidCredentialsError(ValidationError):
    """
    Raised by login when the email is unknown OR the password does not match.

    Both cases must be indistinguishable to the caller, so this error never
    records which check failed in its message or response body.
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="Invalid Credentials",
            errors=[{"msg": "Invalid Credentials"}],
            context=context,
        )


class UserExistsError(ValidationError):
    """Raised by registration when the email is already taken."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="User already exists",
            errors=[{"msg": "User already exists"}],
            context=context,
        )


class InvalidTokenError(PostboardError):
    """
    Raised by TokenService.verify for any token that cannot be trusted:
    malformed, expired, bad signature, or missing the identity claim.
    """

    status_code = 401

    def __init__(
        self,
        message: str = "Token is not valid",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnauthorizedError(PostboardError):
    """
    Raised by the auth guard when a protected route is called without a
    usable token. HTTP 401.
    """

    status_code = 401

    def __init__(
        self,
        message: str = "No token, authorization denied",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(PostboardError):
    """
    Raised when the acting user is not the author of the post or comment
    being deleted.

    HTTP: 401, kept for compatibility with existing clients that treat any
    401 on a delete as "not yours".
    """

    status_code = 401

    def __init__(
        self,
        message: str = "User not authorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(PostboardError):
    """Raised when a requested post or comment does not exist."""

    status_code = 404

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message or f"{resource} not found", context=ctx)


class InvalidIdError(PostboardError):
    """
    Raised when a path identifier is not a well-formed id.

    Logically separate from NotFoundError (nothing was looked up) but surfaced
    with the same 404 status.
    """

    status_code = 404

    def __init__(self, value: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["value"] = value
        super().__init__(message="Not a valid ID", context=ctx)


class AlreadyLikedError(PostboardError):
    status_code = 400

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Post already liked", context=context)


class NotLikedError(PostboardError):
    status_code = 400

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Post has not yet been liked", context=context)


class ConflictError(PostboardError):
    """
    Raised when two requests modified the same post concurrently and this
    request's write was based on a stale copy.

    The post row is versioned; the losing writer gets this error instead of
    silently overwriting the other request's like or comment.
    HTTP: 409 Conflict. Safe to retry.
    """

    status_code = 409

    def __init__(
        self,
        message: str = "Post was modified concurrently, please retry",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(PostboardError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always the generic "Server Error";
    details go to the server log only.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Server Error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
