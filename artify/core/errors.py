"""
Domain errors raised by the service layer.

Each error knows the HTTP status it maps to; ``artify.main`` turns them into
responses. Field-level problems carry a ``field_errors`` map keyed by the
offending input field.
"""
from typing import Dict, Optional


class ArtifyError(Exception):
    status_code = 400
    default_message = "Request could not be processed"

    def __init__(self, message: Optional[str] = None, field_errors: Optional[Dict[str, str]] = None):
        self.message = message or self.default_message
        self.field_errors = field_errors or {}
        super().__init__(self.message)


class ValidationError(ArtifyError):
    status_code = 400
    default_message = "Invalid input"

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, field_errors={field: message})


class InvalidCredentials(ArtifyError):
    status_code = 400
    default_message = "Invalid email or password"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, field_errors={"email": message or self.default_message})


class EmailTaken(ArtifyError):
    status_code = 400
    default_message = "A user already exists with this email"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, field_errors={"email": message or self.default_message})


class NotAuthenticated(ArtifyError):
    status_code = 401
    default_message = "Not signed in"


class Forbidden(ArtifyError):
    status_code = 403
    default_message = "You are not allowed to do that"


class NotFound(ArtifyError):
    """A referenced record is missing.

    ``redirect_to`` names the listing page a browser should land on instead.
    """
    status_code = 404
    default_message = "Not found"

    def __init__(self, message: Optional[str] = None, redirect_to: Optional[str] = None):
        super().__init__(message)
        self.redirect_to = redirect_to


class InvalidState(ArtifyError):
    status_code = 409
    default_message = "This action is not allowed in the current state"


class AlreadyDecided(InvalidState):
    default_message = "This bid has already been decided"


class PostNotOpen(InvalidState):
    default_message = "Post is not open for bids"


class DuplicateBid(InvalidState):
    default_message = "You have already submitted a bid for this post"


class RedirectRequired(Exception):
    """Raised by area guards when a browser should be sent somewhere else."""

    def __init__(self, location: str):
        self.location = location
        super().__init__(location)
