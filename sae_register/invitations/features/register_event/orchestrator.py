"""Registration of one guest for one event.

The three side effects run in a fixed order and are not wrapped in a
distributed transaction:

    pending -> [awaiting_webinar_token -> awaiting_webinar_registration] ->
    persisting -> notifying -> done

The bracketed steps only run for virtual events. A webinar failure stops the
attempt before anything is persisted. A notification failure is reported as a
warning; the registration stands. A webinar seat booked by an attempt that
dies before ``persisting`` is not released.
"""

import logging
from dataclasses import dataclass, field
from uuid import UUID

from sae_register.email_service.base import EmailServiceBase
from sae_register.invitations.dtos import (
    EventDTO,
    GuestRecordDTO,
    RegistrationResultDTO,
    RegistrationState,
)
from sae_register.invitations.exceptions import (
    EventNotFoundError,
    GuestNotFoundError,
    NotificationFailed,
    RegistrationClosedError,
    UpstreamFailure,
    WebinarRegistrationFailed,
)
from sae_register.invitations.features.register_event.notifications import (
    ConfirmationConfig,
    build_confirmation_email,
)
from sae_register.invitations.identity.guest_resolver import GuestResolver
from sae_register.invitations.identity.substitution_tracker import SubstitutionTracker
from sae_register.invitations.repository.read_models import InvitationReadModel
from sae_register.invitations.repository.write_models import RegistrationWriteModel
from sae_register.webinar.base import RegistrantDTO, WebinarClientBase

logger = logging.getLogger(__name__)

DEFAULT_WEBINAR_FIRST_NAME = "Invitado"
DEFAULT_WEBINAR_LAST_NAME = "-"


@dataclass
class RegistrationAttempt:
    guest_id: UUID
    event_id: UUID
    state: RegistrationState = RegistrationState.PENDING
    states: list[RegistrationState] = field(default_factory=lambda: [RegistrationState.PENDING])
    warnings: list[str] = field(default_factory=list)

    def advance(self, state: RegistrationState) -> None:
        logger.debug(
            "Registration guest=%s event=%s: %s -> %s",
            self.guest_id,
            self.event_id,
            self.state.value,
            state.value,
        )
        self.state = state
        self.states.append(state)

    def fail(self, reason: str) -> None:
        logger.warning(
            "Registration guest=%s event=%s failed in %s: %s",
            self.guest_id,
            self.event_id,
            self.state.value,
            reason,
        )
        self.advance(RegistrationState.FAILED)


class RegistrationOrchestrator:
    def __init__(
        self,
        read_model: InvitationReadModel,
        write_model: RegistrationWriteModel,
        webinar_client: WebinarClientBase,
        email_service: EmailServiceBase,
        config: ConfirmationConfig,
    ) -> None:
        self._read_model = read_model
        self._write_model = write_model
        self._webinar_client = webinar_client
        self._email_service = email_service
        self._config = config
        self._resolver = GuestResolver(read_model)
        self._tracker = SubstitutionTracker(read_model)

    async def _effective_guest(self, guest: GuestRecordDTO) -> GuestRecordDTO:
        """The replacement's record on the same list when the guest has been substituted."""
        identity = await self._tracker.resolve_active_identity(guest.event_group_id, guest.email)
        if not identity.replaced:
            return guest
        replacements = await self._read_model.find_guests(
            identity.effective_email, guest.event_group_id
        )
        for replacement in replacements:
            if replacement.list_id == guest.list_id:
                logger.info(
                    "Guest %s was substituted; registering replacement %s",
                    guest.uuid,
                    replacement.uuid,
                )
                return await self._resolver.resolve_guest(replacement.uuid)
        raise GuestNotFoundError(email=identity.effective_email)

    async def register(
        self,
        guest_id: UUID,
        event_id: UUID,
        zoom_email: str | None = None,
        save_zoom_email: bool = False,
    ) -> RegistrationResultDTO:
        """
        Register ``guest_id`` for ``event_id``.

        Raises:
            NotFoundError: unknown guest or event
            RegistrationClosedError: the event is not open for registration
            WebinarRegistrationFailed: nothing was persisted
            UpstreamFailure: the registration row could not be written
        """
        guest = await self._effective_guest(await self._resolver.resolve_guest(guest_id))
        event = await self._read_model.get_event(event_id)
        if event is None:
            raise EventNotFoundError(event_id)

        attempt = RegistrationAttempt(guest_id=guest.uuid, event_id=event.uuid)

        # a registered pair stays a no-op success after registration closes
        if await self._read_model.is_registered(guest.uuid, event.uuid):
            logger.info("Guest %s already registered for event %s", guest.uuid, event.uuid)
            attempt.advance(RegistrationState.DONE)
            return RegistrationResultDTO(
                guest_id=guest.uuid,
                event_id=event.uuid,
                registered=True,
                state=attempt.state,
                already_registered=True,
                states=attempt.states,
            )

        if not event.register_open:
            raise RegistrationClosedError(event_id)

        registrant_id = None
        if event.is_virtual:
            registrant_id = await self._register_webinar_seat(attempt, guest, event, zoom_email)

        attempt.advance(RegistrationState.PERSISTING)
        try:
            await self._write_model.upsert_registration(
                guest.uuid,
                event.uuid,
                zoom_email=zoom_email if event.is_virtual else None,
            )
        except UpstreamFailure:
            attempt.fail("registration row not written")
            raise

        if event.is_virtual and save_zoom_email and zoom_email:
            try:
                await self._write_model.set_guest_zoom_email(guest.uuid, zoom_email)
            except UpstreamFailure:
                attempt.warnings.append("No se pudo guardar el correo para Zoom.")

        attempt.advance(RegistrationState.NOTIFYING)
        try:
            await self._email_service.send_confirmation(
                build_confirmation_email(guest, event, self._config)
            )
        except NotificationFailed as e:
            logger.warning("Registration confirmed without email: %s", e)
            attempt.warnings.append("No se pudo enviar el correo de confirmación.")

        attempt.advance(RegistrationState.DONE)
        return RegistrationResultDTO(
            guest_id=guest.uuid,
            event_id=event.uuid,
            registered=True,
            state=attempt.state,
            states=attempt.states,
            warnings=attempt.warnings,
            webinar_registrant_id=registrant_id,
        )

    async def _register_webinar_seat(
        self,
        attempt: RegistrationAttempt,
        guest: GuestRecordDTO,
        event: EventDTO,
        zoom_email: str | None,
    ) -> str | None:
        if not event.zoom_webinar_id:
            attempt.fail("virtual event without webinar id")
            raise WebinarRegistrationFailed(f"Event '{event.uuid}' has no webinar configured")

        attempt.advance(RegistrationState.AWAITING_WEBINAR_TOKEN)
        try:
            access_token = await self._webinar_client.get_access_token()
        except WebinarRegistrationFailed as e:
            attempt.fail(e.message)
            raise

        attempt.advance(RegistrationState.AWAITING_WEBINAR_REGISTRATION)
        registrant = RegistrantDTO(
            webinar_id=event.zoom_webinar_id,
            first_name=guest.display_name or DEFAULT_WEBINAR_FIRST_NAME,
            last_name=DEFAULT_WEBINAR_LAST_NAME,
            email=zoom_email or guest.zoom_email or guest.email,
            org=guest.company,
        )
        try:
            seat = await self._webinar_client.create_registrant(access_token, registrant)
        except WebinarRegistrationFailed as e:
            attempt.fail(e.message)
            raise
        return seat.registrant_id
