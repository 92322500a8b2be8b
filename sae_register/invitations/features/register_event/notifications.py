from datetime import datetime, timezone
from typing import Protocol
from urllib.parse import quote
from zoneinfo import ZoneInfo

from sae_register.email_service.base import ConfirmationEmailDTO
from sae_register.invitations.dtos import EventDTO, GuestRecordDTO, GuestType
from sae_register.invitations.validation import sanitize_description

GENERIC_SALUTATION = "Estimado(a)"

MONTHS_ES = (
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
)


class ConfirmationConfig(Protocol):
    frontend_url: str
    confirmation_template_id: str
    virtual_confirmation_template_id: str
    DISPLAY_TIMEZONE: str


def format_event_date(value: datetime, tz_name: str) -> str:
    """``15 de enero de 2025, 18:30`` in the display time zone."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    local = value.astimezone(ZoneInfo(tz_name))
    return f"{local.day} de {MONTHS_ES[local.month - 1]} de {local.year}, {local:%H:%M}"


def salutation_fields(guest: GuestRecordDTO) -> tuple[str, str, str]:
    """(first_name, estimado, apodo) for the email greeting."""
    if guest.guest_type == GuestType.REEMPLAZO:
        return guest.name, GENERIC_SALUTATION, guest.name
    if guest.is_sponsored and guest.executive is not None:
        executive = guest.executive
        return (
            executive.first_name,
            executive.salutation or GENERIC_SALUTATION,
            executive.nickname or executive.first_name,
        )
    return (
        guest.name,
        guest.salutation or GENERIC_SALUTATION,
        guest.nickname or guest.name,
    )


def build_confirmation_email(
    guest: GuestRecordDTO, event: EventDTO, config: ConfirmationConfig
) -> ConfirmationEmailDTO:
    first_name, estimado, apodo = salutation_fields(guest)
    template_id = config.confirmation_template_id
    if event.is_virtual and config.virtual_confirmation_template_id:
        template_id = config.virtual_confirmation_template_id

    return ConfirmationEmailDTO(
        to_address=guest.email,
        template_id=template_id,
        first_name=first_name,
        register_link=f"{config.frontend_url.rstrip('/')}/{quote(guest.email, safe='')}",
        estimado=estimado,
        apodo=apodo,
        event_name=event.name,
        event_place=event.location or "",
        event_date=format_event_date(event.scheduled_at, config.DISPLAY_TIMEZONE),
        event_program=sanitize_description(event.html_description),
        guest_id=guest.uuid,
        event_id=event.uuid,
    )
