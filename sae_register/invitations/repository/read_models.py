"""Invitation read model - queries that return DTOs, never ORM models."""

import abc
import contextlib
import logging
from collections.abc import AsyncIterator
from functools import partial
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sae_register.config.database import async_session_manager
from sae_register.invitations.dtos import (
    EventDTO,
    EventModality,
    ExecutiveDTO,
    GuestRecordDTO,
    GuestType,
    SubstitutionDTO,
)
from sae_register.invitations.exceptions import UpstreamFailure
from sae_register.invitations.repository.orm_models import (
    Event,
    EventGroup,
    EventGuest,
    Executive,
    Guest,
    InvitationList,
    Substitution,
)

logger = logging.getLogger(__name__)


class InvitationReadModel(abc.ABC):
    @abc.abstractmethod
    async def get_current_event_group_id(self) -> UUID | None:
        """Group flagged as current by the organizer, if any."""
        raise NotImplementedError

    @abc.abstractmethod
    async def find_guests(
        self, email: str, event_group_id: UUID | None = None
    ) -> list[GuestRecordDTO]:
        """
        All guest records for an email, optionally restricted to one event group.
        Matching ignores case.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def get_guest(self, guest_id: UUID) -> GuestRecordDTO | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_event(self, event_id: UUID) -> EventDTO | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def is_registered(self, guest_id: UUID, event_id: UUID) -> bool:
        """False when no registration row exists."""
        raise NotImplementedError

    @abc.abstractmethod
    async def find_substitution(
        self, event_group_id: UUID, original_email: str
    ) -> SubstitutionDTO | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def find_substitution_by_new_email(
        self, event_group_id: UUID, new_email: str
    ) -> SubstitutionDTO | None:
        raise NotImplementedError


def executive_to_dto(executive: Executive | None) -> ExecutiveDTO | None:
    if executive is None:
        return None
    return ExecutiveDTO(
        uuid=executive.uuid,
        first_name=executive.first_name,
        last_name=executive.last_name,
        salutation=executive.salutation,
        nickname=executive.nickname,
    )


def guest_to_dto(
    guest: Guest, event_group_id: UUID, executive: Executive | None
) -> GuestRecordDTO:
    return GuestRecordDTO(
        uuid=guest.uuid,
        email=guest.email,
        name=guest.name,
        list_id=guest.list_id,
        event_group_id=event_group_id,
        is_sponsored=guest.is_sponsored,
        executive=executive_to_dto(executive),
        company=guest.company,
        guest_type=GuestType(guest.guest_type),
        salutation=guest.salutation,
        nickname=guest.nickname,
        zoom_email=guest.zoom_email,
    )


def event_to_dto(event: Event) -> EventDTO:
    return EventDTO(
        uuid=event.uuid,
        name=event.name,
        modality=EventModality(event.modality),
        scheduled_at=event.scheduled_at,
        location=event.location,
        html_description=event.html_description,
        zoom_webinar_id=event.zoom_webinar_id,
        register_open=event.register_open,
    )


def substitution_to_dto(substitution: Substitution) -> SubstitutionDTO:
    return SubstitutionDTO(
        uuid=substitution.uuid,
        event_group_id=substitution.event_group_id,
        original_email=substitution.original_email,
        new_email=substitution.new_email,
    )


class SqlReadModelMixin:
    """Session handling shared by the SQL read models."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    @contextlib.asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self.async_session_manager(
                session_overwrite=self.session_overwrite
            ) as session:
                yield session
        except SQLAlchemyError as e:
            logger.exception("Data store query failed: %s", operation)
            raise UpstreamFailure(operation) from e


class SqlInvitationReadModel(SqlReadModelMixin, InvitationReadModel):
    """SQL implementation of the invitation read model."""

    def _guest_select(self):
        return (
            select(Guest, InvitationList.event_group_id, Executive)
            .join(InvitationList, Guest.list_id == InvitationList.uuid)
            .outerjoin(Executive, Guest.executive_id == Executive.uuid)
        )

    async def get_current_event_group_id(self) -> UUID | None:
        async with self._session("get_current_event_group") as session:
            stmt = (
                select(EventGroup.uuid)
                .where(EventGroup.is_current.is_(True))
                .order_by(EventGroup.created_at.desc())
                .limit(1)
            )
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def find_guests(
        self, email: str, event_group_id: UUID | None = None
    ) -> list[GuestRecordDTO]:
        async with self._session("find_guests") as session:
            stmt = self._guest_select().where(func.lower(Guest.email) == email.lower())
            if event_group_id is not None:
                stmt = stmt.where(InvitationList.event_group_id == event_group_id)
            stmt = stmt.order_by(Guest.created_at, Guest.uuid)
            result = await session.execute(stmt)
            return [
                guest_to_dto(guest, group_id, executive)
                for guest, group_id, executive in result.all()
            ]

    async def get_guest(self, guest_id: UUID) -> GuestRecordDTO | None:
        async with self._session("get_guest") as session:
            result = await session.execute(self._guest_select().where(Guest.uuid == guest_id))
            row = result.one_or_none()
            if row is None:
                return None
            guest, group_id, executive = row
            return guest_to_dto(guest, group_id, executive)

    async def get_event(self, event_id: UUID) -> EventDTO | None:
        async with self._session("get_event") as session:
            event = await session.get(Event, event_id)
            return event_to_dto(event) if event else None

    async def is_registered(self, guest_id: UUID, event_id: UUID) -> bool:
        async with self._session("is_registered") as session:
            stmt = select(EventGuest.registered).where(
                EventGuest.guest_id == guest_id,
                EventGuest.event_id == event_id,
            )
            result = await session.execute(stmt)
            return bool(result.scalar_one_or_none())

    async def find_substitution(
        self, event_group_id: UUID, original_email: str
    ) -> SubstitutionDTO | None:
        async with self._session("find_substitution") as session:
            stmt = (
                select(Substitution)
                .where(Substitution.event_group_id == event_group_id)
                .where(func.lower(Substitution.original_email) == original_email.lower())
                .order_by(Substitution.created_at)
                .limit(1)
            )
            result = await session.execute(stmt)
            substitution = result.scalar_one_or_none()
            return substitution_to_dto(substitution) if substitution else None

    async def find_substitution_by_new_email(
        self, event_group_id: UUID, new_email: str
    ) -> SubstitutionDTO | None:
        async with self._session("find_substitution_by_new_email") as session:
            stmt = (
                select(Substitution)
                .where(Substitution.event_group_id == event_group_id)
                .where(func.lower(Substitution.new_email) == new_email.lower())
                .order_by(Substitution.created_at)
                .limit(1)
            )
            result = await session.execute(stmt)
            substitution = result.scalar_one_or_none()
            return substitution_to_dto(substitution) if substitution else None
