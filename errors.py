"""Application error taxonomy.

Every error carries the HTTP status it maps to and a message that is safe to
return to the caller. ``main.py`` renders them into the response envelope.
"""


class ForumAppError(Exception):
    """Base exception for all forum application errors."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(ForumAppError):
    """Raised when a request carries no valid session."""

    status_code = 401
    default_message = "Unauthorized"


class InvalidCredentials(Unauthenticated):
    """Raised when an email/password pair does not match a stored user."""

    default_message = "Invalid email or password"


class Forbidden(ForumAppError):
    """Raised when an authenticated user does not own the target resource."""

    status_code = 403
    default_message = "You do not have permission to modify this resource"


class NotFound(ForumAppError):
    """Raised when a requested resource does not exist."""

    status_code = 404
    default_message = "Resource not found"


class ValidationError(ForumAppError):
    """Raised when a required field is missing or invalid."""

    status_code = 400
    default_message = "Invalid request"


class Conflict(ForumAppError):
    """Raised when a write would violate a uniqueness rule."""

    status_code = 409
    default_message = "Resource already exists"


class AccountConflict(Conflict):
    """Raised when an OAuth identity collides with a different linked account."""

    default_message = "A different account from this provider is already linked to this email"


class BackendError(ForumAppError):
    """Raised on store or infrastructure faults."""

    status_code = 500
    default_message = "An internal error occurred"


class AuthBackendError(BackendError):
    """Raised when the identity store fails during sign-in."""

    default_message = "Authentication is temporarily unavailable"


class LinkingFailed(BackendError):
    """Raised when a new OAuth account could not be linked to an existing user."""

    default_message = "Failed to link account"


class ProviderError(ForumAppError):
    """Raised when the OAuth provider rejects or fails the token exchange."""

    status_code = 502
    default_message = "OAuth provider request failed"
