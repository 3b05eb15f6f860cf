"""
Client error taxonomy.

Every failure the front end can report is one of these.  Repositories and
the HTTP client raise them; view controllers convert them into ``Err``
results at the view boundary.
"""

from __future__ import annotations

from typing import Optional


class ClientError(Exception):
    """Base class for every user-reportable failure."""

    kind = "error"
    status_code = 500
    redirect: Optional[str] = None
    retryable = False

    def __init__(self, message: str = "Something went wrong"):
        super().__init__(message)
        self.message = message


class AuthError(ClientError):
    """Missing, expired or rejected token.  Always ends in a forced logout."""

    kind = "auth"
    status_code = 401
    redirect = "/auth/login"

    def __init__(self, message: str = "Please log in to continue"):
        super().__init__(message)


class ForbiddenError(ClientError):
    """The session's role may not open the requested view."""

    kind = "forbidden"
    status_code = 403
    redirect = "/unauthorized"

    def __init__(self, message: str = "You are not allowed to view this page"):
        super().__init__(message)


class ValidationError(ClientError):
    """Field-level rejection, surfaced inline per form field."""

    kind = "validation"
    status_code = 422

    def __init__(
        self,
        message: str = "Please correct the highlighted fields",
        fields: Optional[dict[str, str]] = None,
    ):
        super().__init__(message)
        self.fields = dict(fields or {})


class InvalidTransitionError(ClientError):
    """A booking status change that the state machine does not allow."""

    kind = "invalid_transition"
    status_code = 409


class TransitionInProgressError(InvalidTransitionError):
    """Another transition for the same booking has not finished yet."""

    kind = "transition_in_progress"


class NotFoundError(ClientError):
    kind = "not_found"
    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class NetworkError(ClientError):
    """No response from the backend (transport failure or timeout)."""

    kind = "network"
    status_code = 503
    retryable = True

    def __init__(self, message: str = "Could not reach the server, please retry"):
        super().__init__(message)


class ApiError(ClientError):
    """The backend answered but reported a business failure."""

    kind = "api"
    status_code = 502

    def __init__(
        self,
        message: str = "Something went wrong",
        upstream_status: Optional[int] = None,
    ):
        super().__init__(message)
        self.upstream_status = upstream_status

    @property
    def server_fault(self) -> bool:
        """The backend itself failed (5xx) rather than refusing the request."""
        return self.upstream_status is not None and self.upstream_status >= 500


class RequestSuperseded(ClientError):
    """A read that was cancelled because a newer one replaced it."""

    kind = "superseded"
    status_code = 409

    def __init__(self, message: str = "Request superseded"):
        super().__init__(message)
