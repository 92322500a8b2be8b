"""Redirection of a guest's attendance to a replacement within one event group.

Registering a substitution is best-effort, not transactional: replacement
guests are inserted first and the mapping last, so a mapping never exists
without at least one replacement guest. A failure part-way leaves the
replacement guests already written in place.
"""

import logging
from uuid import UUID

from sae_register.invitations.dtos import ActiveIdentityDTO, SubstitutionResultDTO
from sae_register.invitations.exceptions import (
    NotFoundError,
    SubstitutionFailed,
    UpstreamFailure,
)
from sae_register.invitations.identity.guest_resolver import GuestResolver
from sae_register.invitations.repository.read_models import InvitationReadModel
from sae_register.invitations.repository.write_models import (
    SubstitutionConflict,
    SubstitutionWriteModel,
)
from sae_register.invitations.validation import validate_email

logger = logging.getLogger(__name__)


class SubstitutionTracker:
    def __init__(
        self,
        read_model: InvitationReadModel,
        write_model: SubstitutionWriteModel | None = None,
    ) -> None:
        self._read_model = read_model
        self._write_model = write_model
        self._resolver = GuestResolver(read_model)

    async def resolve_active_identity(
        self, event_group_id: UUID | None, original_email: str
    ) -> ActiveIdentityDTO:
        if event_group_id is None:
            return ActiveIdentityDTO(replaced=False, effective_email=original_email)

        substitution = await self._read_model.find_substitution(event_group_id, original_email)
        if substitution is None:
            return ActiveIdentityDTO(replaced=False, effective_email=original_email)

        replacement_name = None
        try:
            replacements = await self._resolver.resolve_guests(
                substitution.new_email, event_group_id
            )
            replacement_name = replacements[0].display_name or None
        except NotFoundError:
            logger.warning(
                "Substitution %s -> %s has no replacement guest in group %s",
                substitution.original_email,
                substitution.new_email,
                event_group_id,
            )

        return ActiveIdentityDTO(
            replaced=True,
            effective_email=substitution.new_email,
            replacement_name=replacement_name,
        )

    async def register_substitution(
        self,
        event_group_id: UUID,
        original_email: str,
        new_email: str,
        new_name: str,
        company: str | None = None,
    ) -> SubstitutionResultDTO:
        if self._write_model is None:
            raise RuntimeError("SubstitutionTracker was built without a write model")
        try:
            return await self._register_substitution(
                event_group_id, original_email, new_email, new_name, company
            )
        except UpstreamFailure as e:
            raise SubstitutionFailed(
                f"Could not register substitution for '{original_email}'"
            ) from e

    async def _register_substitution(
        self,
        event_group_id: UUID,
        original_email: str,
        new_email: str,
        new_name: str,
        company: str | None,
    ) -> SubstitutionResultDTO:
        # stored lowercase; the (group, original_email) constraint compares case-sensitively
        original_email = validate_email(original_email).lower()
        new_email = validate_email(new_email).lower()
        if original_email == new_email:
            raise SubstitutionFailed("A guest cannot be substituted by themselves")
        if not new_name.strip():
            raise SubstitutionFailed("The replacement guest needs a name")

        existing = await self._read_model.find_substitution(event_group_id, original_email)
        if existing is not None:
            if existing.new_email.lower() != new_email.lower():
                logger.info(
                    "Ignoring second substitution for %s in group %s (already %s)",
                    original_email,
                    event_group_id,
                    existing.new_email,
                )
            return SubstitutionResultDTO(substitution=existing, created=False)

        chained = await self._read_model.find_substitution_by_new_email(
            event_group_id, original_email
        )
        if chained is not None:
            raise SubstitutionFailed(
                f"'{original_email}' is already a replacement and cannot be substituted again"
            )

        try:
            originals = await self._resolver.resolve_guests(original_email, event_group_id)
        except NotFoundError as e:
            raise SubstitutionFailed(
                f"'{original_email}' is not invited to this event group"
            ) from e

        replacement_ids = []
        for original in originals:
            replacement_ids.append(
                await self._write_model.create_replacement_guest(
                    original=original,
                    new_email=new_email,
                    new_name=new_name.strip(),
                    company=company,
                )
            )

        try:
            substitution = await self._write_model.create_substitution(
                event_group_id=event_group_id,
                original_email=original_email,
                new_email=new_email,
            )
        except SubstitutionConflict:
            winner = await self._read_model.find_substitution(event_group_id, original_email)
            if winner is None:
                raise SubstitutionFailed(
                    f"Could not record substitution for '{original_email}'"
                )
            logger.warning(
                "Concurrent substitution for %s in group %s; keeping %s",
                original_email,
                event_group_id,
                winner.new_email,
            )
            return SubstitutionResultDTO(
                substitution=winner, created=False, replacement_guest_ids=replacement_ids
            )

        logger.info(
            "Substitution recorded %s -> %s in group %s (%d guest records)",
            original_email,
            new_email,
            event_group_id,
            len(replacement_ids),
        )
        return SubstitutionResultDTO(
            substitution=substitution,
            created=True,
            replacement_guest_ids=replacement_ids,
        )
