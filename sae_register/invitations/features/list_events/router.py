from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from sae_register.config.settings import settings
from sae_register.invitations.dtos import EventModality, EventViewDTO
from sae_register.invitations.exceptions import InvalidEmailError
from sae_register.invitations.features.list_events.view_model import InvitationViewBuilder
from sae_register.invitations.repository.event_sources import get_event_source
from sae_register.invitations.repository.read_models import SqlInvitationReadModel
from sae_register.invitations.urls import INVITATIONS_URL

router = APIRouter()


class EventResponse(BaseModel):
    """Event card. ``description_html`` is sanitized and safe to render."""

    event_id: UUID
    guest_id: UUID
    name: str
    modality: EventModality
    scheduled_at: datetime
    location: str | None = None
    description_html: str
    register_open: bool
    registered: bool

    @classmethod
    def from_dto(cls, event: EventViewDTO) -> "EventResponse":
        return cls(
            event_id=event.event_id,
            guest_id=event.guest_id,
            name=event.name,
            modality=event.modality,
            scheduled_at=event.scheduled_at,
            location=event.location,
            description_html=event.description_html,
            register_open=event.register_open,
            registered=event.registered,
        )


class InvitationResponse(BaseModel):
    email: str
    effective_email: str
    guest_name: str | None = None
    replaced: bool
    event_group_id: UUID | None = None
    events: list[EventResponse] = []
    closed_events: list[EventResponse] = []
    notice: str | None = None
    degraded: bool = False


def get_invitation_view_builder() -> InvitationViewBuilder:
    """Dependency to get the invitation view builder."""
    return InvitationViewBuilder(
        read_model=SqlInvitationReadModel(),
        event_source=get_event_source(settings.EVENT_SOURCE),
        config=settings,
    )


@router.get(INVITATIONS_URL, response_model=InvitationResponse)
async def get_invitation(
    email: str,
    event_group_id: UUID | None = None,
    builder: InvitationViewBuilder = Depends(get_invitation_view_builder),
) -> InvitationResponse:
    """
    Events the email is invited to, with registration status.
    Open events are actionable; closed ones are listed read-only.
    """
    try:
        view = await builder.build(email, event_group_id)
    except InvalidEmailError:
        raise HTTPException(status_code=404, detail="Invitation not found")

    return InvitationResponse(
        email=view.email,
        effective_email=view.effective_email,
        guest_name=view.guest_name,
        replaced=view.replaced,
        event_group_id=view.event_group_id,
        events=[EventResponse.from_dto(event) for event in view.events],
        closed_events=[EventResponse.from_dto(event) for event in view.closed_events],
        notice=view.notice,
        degraded=view.degraded,
    )
