from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID


class EventModality(str, Enum):
    PRESENCIAL = "Presencial"
    VIRTUAL = "Virtual"


class GuestType(str, Enum):
    INVITADO = "Invitado"
    REEMPLAZO = "Reemplazo"


class RegistrationState(str, Enum):
    PENDING = "pending"
    AWAITING_WEBINAR_TOKEN = "awaiting_webinar_token"
    AWAITING_WEBINAR_REGISTRATION = "awaiting_webinar_registration"
    PERSISTING = "persisting"
    NOTIFYING = "notifying"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class ExecutiveDTO:
    """Sponsor whose name and salutation override a sponsored guest's own."""

    uuid: UUID
    first_name: str
    last_name: str
    salutation: str | None = None
    nickname: str | None = None


@dataclass(frozen=True)
class GuestRecordDTO:
    """One guest row together with the list and group it belongs to.

    ``display_name`` is filled in by the guest resolver.
    """

    uuid: UUID
    email: str
    name: str
    list_id: UUID
    event_group_id: UUID
    is_sponsored: bool = False
    executive: ExecutiveDTO | None = None
    company: str | None = None
    guest_type: GuestType = GuestType.INVITADO
    salutation: str | None = None
    nickname: str | None = None
    zoom_email: str | None = None
    display_name: str = ""


@dataclass(frozen=True)
class EventDTO:
    uuid: UUID
    name: str
    modality: EventModality
    scheduled_at: datetime
    location: str | None = None
    html_description: str | None = None
    zoom_webinar_id: str | None = None
    register_open: bool = False

    @property
    def is_virtual(self) -> bool:
        return self.modality == EventModality.VIRTUAL


@dataclass(frozen=True)
class GuestEventRowDTO:
    """An event visible to one guest record, as returned by an event source."""

    guest_id: UUID
    event: EventDTO
    registered: bool = False


@dataclass(frozen=True)
class EventViewDTO:
    """Event as presented to the viewer. The description is already sanitized."""

    event_id: UUID
    guest_id: UUID
    name: str
    modality: EventModality
    scheduled_at: datetime
    location: str | None
    description_html: str
    register_open: bool
    registered: bool


@dataclass(frozen=True)
class AggregatedEventsDTO:
    events: list[EventViewDTO] = field(default_factory=list)
    failed_guest_ids: list[UUID] = field(default_factory=list)


@dataclass(frozen=True)
class SubstitutionDTO:
    uuid: UUID
    event_group_id: UUID
    original_email: str
    new_email: str


@dataclass(frozen=True)
class ActiveIdentityDTO:
    replaced: bool
    effective_email: str
    replacement_name: str | None = None


@dataclass(frozen=True)
class SubstitutionResultDTO:
    substitution: SubstitutionDTO
    created: bool
    replacement_guest_ids: list[UUID] = field(default_factory=list)


@dataclass(frozen=True)
class InvitationViewDTO:
    """Request-scoped view model for the invitation page."""

    email: str
    effective_email: str
    guest_name: str | None
    replaced: bool = False
    event_group_id: UUID | None = None
    events: list[EventViewDTO] = field(default_factory=list)
    closed_events: list[EventViewDTO] = field(default_factory=list)
    notice: str | None = None
    degraded: bool = False


@dataclass(frozen=True)
class RegistrationResultDTO:
    guest_id: UUID
    event_id: UUID
    registered: bool
    state: RegistrationState
    already_registered: bool = False
    states: list[RegistrationState] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    webinar_registrant_id: str | None = None
