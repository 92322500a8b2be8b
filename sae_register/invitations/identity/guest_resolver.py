from dataclasses import replace
from uuid import UUID

from sae_register.invitations.dtos import GuestRecordDTO
from sae_register.invitations.exceptions import GuestNotFoundError
from sae_register.invitations.repository.read_models import InvitationReadModel


def resolve_display_name(guest: GuestRecordDTO) -> str:
    """Sponsored guests are shown under their executive's full name."""
    if guest.is_sponsored and guest.executive is not None:
        return f"{guest.executive.first_name} {guest.executive.last_name}".strip()
    return guest.name


class GuestResolver:
    def __init__(self, read_model: InvitationReadModel) -> None:
        self._read_model = read_model

    async def resolve_guests(
        self, email: str, event_group_id: UUID | None = None
    ) -> list[GuestRecordDTO]:
        """
        Every guest record for ``email``, each with its display name resolved.

        Records on different invitation lists are all kept; callers aggregate
        them independently.
        """
        guests = await self._read_model.find_guests(email, event_group_id)
        if not guests:
            raise GuestNotFoundError(email=email)
        return [replace(guest, display_name=resolve_display_name(guest)) for guest in guests]

    async def resolve_guest(self, guest_id: UUID) -> GuestRecordDTO:
        guest = await self._read_model.get_guest(guest_id)
        if guest is None:
            raise GuestNotFoundError(guest_id=guest_id)
        return replace(guest, display_name=resolve_display_name(guest))
