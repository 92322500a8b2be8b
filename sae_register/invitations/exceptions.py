"""
Domain exceptions for the invitation and registration flows.

Routers translate these into HTTP responses; nothing below the router layer
raises ``HTTPException``.
"""

from uuid import UUID


class InvitationError(Exception):
    """Base class for invitation domain errors."""

    pass


class NotFoundError(InvitationError):
    """No guest or event matches the request."""

    pass


class GuestNotFoundError(NotFoundError):
    def __init__(self, email: str | None = None, guest_id: UUID | None = None) -> None:
        self.email = email
        self.guest_id = guest_id
        target = email if email is not None else guest_id
        super().__init__(f"No guest found for '{target}'")


class EventNotFoundError(NotFoundError):
    def __init__(self, event_id: UUID) -> None:
        self.event_id = event_id
        super().__init__(f"Event '{event_id}' not found")


class InvalidEmailError(InvitationError):
    """Malformed email address."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"'{email}' is not a valid email address")


class RegistrationClosedError(InvitationError):
    """The organizer has not opened registration for the event."""

    def __init__(self, event_id: UUID) -> None:
        self.event_id = event_id
        super().__init__(f"Registration for event '{event_id}' is closed")


class UpstreamFailure(InvitationError):
    """The data store rejected a query or a write."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Data store failure during '{operation}'")


class WebinarRegistrationFailed(InvitationError):
    """The webinar provider refused the token request or the registrant."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class NotificationFailed(InvitationError):
    """The confirmation email could not be handed to the provider."""

    pass


class SubstitutionFailed(InvitationError):
    """A substitution could not be registered."""

    pass
