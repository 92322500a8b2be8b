"""Registration and substitution writes. Return DTOs, never ORM models."""

import logging
from abc import ABC, abstractmethod
from functools import partial
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sae_register.config.database import async_session_manager
from sae_register.invitations.dtos import GuestRecordDTO, GuestType, SubstitutionDTO
from sae_register.invitations.exceptions import SubstitutionFailed, UpstreamFailure
from sae_register.invitations.repository.orm_models import EventGuest, Guest, Substitution
from sae_register.invitations.repository.read_models import substitution_to_dto

logger = logging.getLogger(__name__)


class SubstitutionConflict(Exception):
    """Another request recorded a substitution for the same original email first."""

    pass


class RegistrationWriteModel(ABC):
    @abstractmethod
    async def upsert_registration(
        self, guest_id: UUID, event_id: UUID, zoom_email: str | None = None
    ) -> None:
        """Mark (guest, event) as registered, creating the row if needed."""
        raise NotImplementedError

    @abstractmethod
    async def set_guest_zoom_email(self, guest_id: UUID, zoom_email: str) -> None:
        raise NotImplementedError


class SubstitutionWriteModel(ABC):
    @abstractmethod
    async def create_replacement_guest(
        self,
        original: GuestRecordDTO,
        new_email: str,
        new_name: str,
        company: str | None = None,
    ) -> UUID:
        """Insert a replacement guest on the original's invitation list."""
        raise NotImplementedError

    @abstractmethod
    async def create_substitution(
        self, event_group_id: UUID, original_email: str, new_email: str
    ) -> SubstitutionDTO:
        """Record the mapping. Raises ``SubstitutionConflict`` if one already exists."""
        raise NotImplementedError


def _insert_for(session: AsyncSession):
    if session.get_bind().dialect.name == "sqlite":
        return sqlite.insert
    return postgresql.insert


class SqlRegistrationWriteModel(RegistrationWriteModel):
    """SQL implementation of registration writes."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def upsert_registration(
        self, guest_id: UUID, event_id: UUID, zoom_email: str | None = None
    ) -> None:
        values = {"guest_id": guest_id, "event_id": event_id, "registered": True}
        set_ = {"registered": True}
        if zoom_email:
            values["zoom_email"] = zoom_email
            set_["zoom_email"] = zoom_email

        try:
            async with self.async_session_manager(
                session_overwrite=self.session_overwrite
            ) as session:
                insert = _insert_for(session)
                stmt = insert(EventGuest).values(**values)
                stmt = stmt.on_conflict_do_update(
                    index_elements=[EventGuest.guest_id, EventGuest.event_id],
                    set_=set_,
                )
                await session.execute(stmt)
                await session.flush()
        except SQLAlchemyError as e:
            logger.exception("Could not persist registration guest=%s event=%s", guest_id, event_id)
            raise UpstreamFailure("upsert_registration") from e

    async def set_guest_zoom_email(self, guest_id: UUID, zoom_email: str) -> None:
        try:
            async with self.async_session_manager(
                session_overwrite=self.session_overwrite
            ) as session:
                await session.execute(
                    update(Guest).where(Guest.uuid == guest_id).values(zoom_email=zoom_email)
                )
                await session.flush()
        except SQLAlchemyError as e:
            logger.exception("Could not store zoom email for guest=%s", guest_id)
            raise UpstreamFailure("set_guest_zoom_email") from e


class SqlSubstitutionWriteModel(SubstitutionWriteModel):
    """SQL implementation of substitution writes.

    Each call commits on its own; the store offers no multi-statement
    transaction to the substitution flow.
    """

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def create_replacement_guest(
        self,
        original: GuestRecordDTO,
        new_email: str,
        new_name: str,
        company: str | None = None,
    ) -> UUID:
        try:
            async with self.async_session_manager(
                session_overwrite=self.session_overwrite
            ) as session:
                guest = Guest(
                    email=new_email,
                    name=new_name,
                    is_sponsored=False,
                    executive_id=None,
                    list_id=original.list_id,
                    company=company if company is not None else original.company,
                    guest_type=GuestType.REEMPLAZO,
                )
                session.add(guest)
                await session.flush()
                return guest.uuid
        except SQLAlchemyError as e:
            logger.exception("Could not create replacement guest for list=%s", original.list_id)
            raise SubstitutionFailed(
                f"Could not create replacement guest for '{original.email}'"
            ) from e

    async def create_substitution(
        self, event_group_id: UUID, original_email: str, new_email: str
    ) -> SubstitutionDTO:
        try:
            async with self.async_session_manager(
                session_overwrite=self.session_overwrite
            ) as session:
                substitution = Substitution(
                    event_group_id=event_group_id,
                    original_email=original_email,
                    new_email=new_email,
                )
                session.add(substitution)
                await session.flush()
                return substitution_to_dto(substitution)
        except IntegrityError as e:
            raise SubstitutionConflict(original_email) from e
        except SQLAlchemyError as e:
            logger.exception("Could not record substitution for %s", original_email)
            raise SubstitutionFailed(f"Could not record substitution for '{original_email}'") from e
