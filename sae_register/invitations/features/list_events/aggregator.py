import asyncio
import logging
from collections.abc import Sequence

from sae_register.invitations.dtos import (
    AggregatedEventsDTO,
    EventViewDTO,
    GuestEventRowDTO,
    GuestRecordDTO,
)
from sae_register.invitations.exceptions import UpstreamFailure
from sae_register.invitations.repository.event_sources import EventSource
from sae_register.invitations.validation import sanitize_description

logger = logging.getLogger(__name__)


def _to_view(row: GuestEventRowDTO) -> EventViewDTO:
    event = row.event
    return EventViewDTO(
        event_id=event.uuid,
        guest_id=row.guest_id,
        name=event.name,
        modality=event.modality,
        scheduled_at=event.scheduled_at,
        location=event.location,
        description_html=sanitize_description(event.html_description),
        register_open=event.register_open,
        registered=row.registered,
    )


def merge_rows(rows: Sequence[GuestEventRowDTO]) -> list[EventViewDTO]:
    """
    Collapse rows by event id and order them by scheduled time.

    The first row seen for an event wins, except that a registered row from
    another guest record replaces an unregistered one: the viewer is
    registered if any of their records is.
    """
    merged: dict = {}
    for row in rows:
        current = merged.get(row.event.uuid)
        if current is None or (row.registered and not current.registered):
            merged[row.event.uuid] = row
    views = [_to_view(row) for row in merged.values()]
    # sorted() is stable, so ties keep first-seen order
    return sorted(views, key=lambda view: view.scheduled_at)


class EventAggregator:
    def __init__(self, event_source: EventSource) -> None:
        self._event_source = event_source

    async def list_events(self, guests: Sequence[GuestRecordDTO]) -> AggregatedEventsDTO:
        """
        Events visible to any of ``guests``, deduplicated and date-ordered.

        Lookups run concurrently, one per guest record. A failed lookup is
        logged and reported; the remaining guests still contribute.
        """
        results = await asyncio.gather(
            *(self._event_source.list_guest_events(guest) for guest in guests),
            return_exceptions=True,
        )

        rows: list[GuestEventRowDTO] = []
        failed = []
        for guest, result in zip(guests, results):
            if isinstance(result, UpstreamFailure):
                logger.error("Skipping events for guest %s: %s", guest.uuid, result)
                failed.append(guest.uuid)
                continue
            if isinstance(result, Exception):
                logger.error(
                    "Skipping events for guest %s after unexpected error",
                    guest.uuid,
                    exc_info=result,
                )
                failed.append(guest.uuid)
                continue
            if isinstance(result, BaseException):
                # cancellation and interpreter exits are not lookup failures
                raise result
            rows.extend(result)

        return AggregatedEventsDTO(events=merge_rows(rows), failed_guest_ids=failed)
