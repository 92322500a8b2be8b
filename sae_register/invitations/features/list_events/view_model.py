import logging
from typing import Protocol
from uuid import UUID

from sae_register.invitations.dtos import InvitationViewDTO
from sae_register.invitations.exceptions import NotFoundError, UpstreamFailure
from sae_register.invitations.features.list_events.aggregator import EventAggregator
from sae_register.invitations.identity.guest_resolver import GuestResolver
from sae_register.invitations.identity.substitution_tracker import SubstitutionTracker
from sae_register.invitations.repository.event_sources import EventSource
from sae_register.invitations.repository.read_models import InvitationReadModel
from sae_register.invitations.validation import validate_email

logger = logging.getLogger(__name__)


class InvitationViewConfig(Protocol):
    SHOW_CLOSED_EVENTS: bool
    help_contact_email: str


def help_notice(contact_email: str) -> str:
    return (
        "Si no encuentras la reunión de tu preferencia o tienes alguna consulta, "
        f"escríbenos a {contact_email}."
    )


class InvitationViewBuilder:
    """Builds the invitation page view model for one email."""

    def __init__(
        self,
        read_model: InvitationReadModel,
        event_source: EventSource,
        config: InvitationViewConfig,
    ) -> None:
        self._read_model = read_model
        self._config = config
        self._resolver = GuestResolver(read_model)
        self._tracker = SubstitutionTracker(read_model)
        self._aggregator = EventAggregator(event_source)

    async def build(self, email: str, event_group_id: UUID | None = None) -> InvitationViewDTO:
        """
        Raises ``InvalidEmailError`` before touching the store. Unknown emails
        and data store failures on the guest lookup produce an empty view.
        """
        email = validate_email(email)

        try:
            if event_group_id is None:
                event_group_id = await self._read_model.get_current_event_group_id()
            identity = await self._tracker.resolve_active_identity(event_group_id, email)
            guests = await self._resolver.resolve_guests(identity.effective_email, event_group_id)
        except NotFoundError:
            return InvitationViewDTO(
                email=email,
                effective_email=email,
                guest_name=None,
                event_group_id=event_group_id,
                notice=help_notice(self._config.help_contact_email),
            )
        except UpstreamFailure:
            logger.exception("Invitation lookup failed for %s", email)
            return InvitationViewDTO(
                email=email,
                effective_email=email,
                guest_name=None,
                event_group_id=event_group_id,
                notice=help_notice(self._config.help_contact_email),
                degraded=True,
            )

        aggregated = await self._aggregator.list_events(guests)
        open_events = [event for event in aggregated.events if event.register_open]
        closed_events = [event for event in aggregated.events if not event.register_open]

        notice = None
        if closed_events or not open_events:
            notice = help_notice(self._config.help_contact_email)

        if identity.replaced:
            guest_name = identity.replacement_name or guests[0].display_name
        else:
            guest_name = guests[0].display_name

        return InvitationViewDTO(
            email=email,
            effective_email=identity.effective_email,
            guest_name=guest_name,
            replaced=identity.replaced,
            event_group_id=event_group_id,
            events=open_events,
            closed_events=closed_events if self._config.SHOW_CLOSED_EVENTS else [],
            notice=notice,
            degraded=bool(aggregated.failed_guest_ids),
        )
