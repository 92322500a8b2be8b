"""Data-access strategies for "events visible to a guest record".

``SqlJoinEventSource`` walks the raw tables (list membership, events, then the
guest's registration rows). ``SqlConsolidatedEventSource`` reads the same data
in a single joined query. Both return identical rows; ``EVENT_SOURCE`` picks one.
"""

import abc

from sqlalchemy import and_, select

from sae_register.config.settings import EventSourceKind
from sae_register.invitations.dtos import GuestEventRowDTO, GuestRecordDTO
from sae_register.invitations.repository.orm_models import Event, EventGuest, EventList
from sae_register.invitations.repository.read_models import SqlReadModelMixin, event_to_dto


class EventSource(abc.ABC):
    @abc.abstractmethod
    async def list_guest_events(self, guest: GuestRecordDTO) -> list[GuestEventRowDTO]:
        """Events on the guest's invitation list with that guest's registration flag."""
        raise NotImplementedError


class SqlJoinEventSource(SqlReadModelMixin, EventSource):
    async def list_guest_events(self, guest: GuestRecordDTO) -> list[GuestEventRowDTO]:
        async with self._session("list_guest_events") as session:
            event_ids_result = await session.execute(
                select(EventList.event_id).where(EventList.list_id == guest.list_id)
            )
            event_ids = list(event_ids_result.scalars().all())
            if not event_ids:
                return []

            events_result = await session.execute(
                select(Event).where(Event.uuid.in_(event_ids)).order_by(Event.scheduled_at)
            )
            events = events_result.scalars().all()

            registrations_result = await session.execute(
                select(EventGuest.event_id, EventGuest.registered)
                .where(EventGuest.guest_id == guest.uuid)
                .where(EventGuest.event_id.in_(event_ids))
            )
            registration_map = {
                event_id: registered for event_id, registered in registrations_result.all()
            }

            return [
                GuestEventRowDTO(
                    guest_id=guest.uuid,
                    event=event_to_dto(event),
                    registered=bool(registration_map.get(event.uuid, False)),
                )
                for event in events
            ]


class SqlConsolidatedEventSource(SqlReadModelMixin, EventSource):
    async def list_guest_events(self, guest: GuestRecordDTO) -> list[GuestEventRowDTO]:
        async with self._session("list_guest_events_consolidated") as session:
            stmt = (
                select(Event, EventGuest.registered)
                .join(EventList, EventList.event_id == Event.uuid)
                .outerjoin(
                    EventGuest,
                    and_(
                        EventGuest.event_id == Event.uuid,
                        EventGuest.guest_id == guest.uuid,
                    ),
                )
                .where(EventList.list_id == guest.list_id)
                .order_by(Event.scheduled_at)
            )
            result = await session.execute(stmt)
            return [
                GuestEventRowDTO(
                    guest_id=guest.uuid,
                    event=event_to_dto(event),
                    registered=bool(registered),
                )
                for event, registered in result.all()
            ]


def get_event_source(kind: EventSourceKind) -> EventSource:
    if kind == EventSourceKind.CONSOLIDATED:
        return SqlConsolidatedEventSource()
    return SqlJoinEventSource()
