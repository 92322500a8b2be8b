"""Tests for RegistrationOrchestrator."""

from dataclasses import replace
from uuid import uuid4

import pytest

from sae_register.invitations.dtos import EventModality, RegistrationState, SubstitutionDTO
from sae_register.invitations.exceptions import (
    EventNotFoundError,
    GuestNotFoundError,
    RegistrationClosedError,
    UpstreamFailure,
    WebinarRegistrationFailed,
)
from sae_register.invitations.features.register_event.orchestrator import (
    RegistrationOrchestrator,
)
from sae_register.invitations.tests.inmemory_models import (
    GROUP_ID,
    FakeConfig,
    InMemoryEmailService,
    InMemoryInvitationReadModel,
    InMemoryRegistrationWriteModel,
    InMemoryWebinarClient,
    make_event,
    make_guest,
)


@pytest.fixture
def guest():
    return make_guest(email="ana@example.com", company="Banco Andino")


@pytest.fixture
def in_person():
    return make_event(name="Desayuno SAE", location="Lima")


@pytest.fixture
def virtual():
    return make_event(
        name="Foro virtual", modality=EventModality.VIRTUAL, zoom_webinar_id="81234567890"
    )


@pytest.fixture
def read_model(guest, in_person, virtual):
    read_model = InMemoryInvitationReadModel(guests=[guest])
    read_model.invite(guest.list_id, in_person, virtual)
    return read_model


@pytest.fixture
def write_model(read_model):
    return InMemoryRegistrationWriteModel(read_model)


@pytest.fixture
def webinar_client():
    return InMemoryWebinarClient()


@pytest.fixture
def email_service():
    return InMemoryEmailService()


@pytest.fixture
def orchestrator(read_model, write_model, webinar_client, email_service):
    return RegistrationOrchestrator(
        read_model=read_model,
        write_model=write_model,
        webinar_client=webinar_client,
        email_service=email_service,
        config=FakeConfig(),
    )


@pytest.mark.asyncio
async def test_register_in_person(orchestrator, guest, in_person, write_model, webinar_client, email_service):
    result = await orchestrator.register(guest.uuid, in_person.uuid)

    assert result.registered is True
    assert result.already_registered is False
    assert result.state == RegistrationState.DONE
    assert result.states == [
        RegistrationState.PENDING,
        RegistrationState.PERSISTING,
        RegistrationState.NOTIFYING,
        RegistrationState.DONE,
    ]
    assert write_model.upserts == [(guest.uuid, in_person.uuid, None)]
    assert webinar_client.token_requests == 0
    assert len(email_service.sent) == 1
    assert email_service.sent[0].template_id == "d-presencial"


@pytest.mark.asyncio
async def test_register_virtual_books_webinar_seat(
    orchestrator, guest, virtual, write_model, webinar_client, email_service
):
    result = await orchestrator.register(guest.uuid, virtual.uuid)

    assert result.states == [
        RegistrationState.PENDING,
        RegistrationState.AWAITING_WEBINAR_TOKEN,
        RegistrationState.AWAITING_WEBINAR_REGISTRATION,
        RegistrationState.PERSISTING,
        RegistrationState.NOTIFYING,
        RegistrationState.DONE,
    ]
    assert result.webinar_registrant_id == "reg-1"
    [registrant] = webinar_client.registrants
    assert registrant.webinar_id == "81234567890"
    assert registrant.first_name == "Ana Torres"
    assert registrant.last_name == "-"
    assert registrant.email == "ana@example.com"
    assert registrant.org == "Banco Andino"
    assert email_service.sent[0].template_id == "d-virtual"


@pytest.mark.asyncio
async def test_register_virtual_with_zoom_email(
    orchestrator, guest, virtual, read_model, write_model, webinar_client
):
    await orchestrator.register(
        guest.uuid, virtual.uuid, zoom_email="ana.zoom@example.com", save_zoom_email=True
    )

    assert webinar_client.registrants[0].email == "ana.zoom@example.com"
    assert write_model.upserts == [(guest.uuid, virtual.uuid, "ana.zoom@example.com")]
    assert read_model.guests[guest.uuid].zoom_email == "ana.zoom@example.com"


@pytest.mark.asyncio
async def test_register_virtual_uses_stored_zoom_email(
    orchestrator, guest, virtual, read_model, webinar_client
):
    read_model.guests[guest.uuid] = make_guest(
        uuid=guest.uuid, email=guest.email, zoom_email="guardado@example.com"
    )

    await orchestrator.register(guest.uuid, virtual.uuid)

    assert webinar_client.registrants[0].email == "guardado@example.com"


@pytest.mark.asyncio
async def test_zoom_email_ignored_for_in_person(orchestrator, guest, in_person, read_model, write_model):
    await orchestrator.register(
        guest.uuid, in_person.uuid, zoom_email="ana.zoom@example.com", save_zoom_email=True
    )

    assert write_model.upserts == [(guest.uuid, in_person.uuid, None)]
    assert read_model.guests[guest.uuid].zoom_email is None


@pytest.mark.asyncio
async def test_register_twice_has_no_side_effects(
    orchestrator, guest, virtual, write_model, webinar_client, email_service
):
    await orchestrator.register(guest.uuid, virtual.uuid)
    again = await orchestrator.register(guest.uuid, virtual.uuid)

    assert again.already_registered is True
    assert again.registered is True
    assert again.states == [RegistrationState.PENDING, RegistrationState.DONE]
    assert len(write_model.upserts) == 1
    assert len(webinar_client.registrants) == 1
    assert len(email_service.sent) == 1


@pytest.mark.asyncio
async def test_webinar_failure_persists_nothing(
    orchestrator, guest, virtual, read_model, write_model, webinar_client, email_service
):
    webinar_client.fail_registrant = True

    with pytest.raises(WebinarRegistrationFailed) as exc_info:
        await orchestrator.register(guest.uuid, virtual.uuid)

    assert exc_info.value.message == "Webinar does not exist"
    assert write_model.upserts == []
    assert email_service.sent == []
    assert await read_model.is_registered(guest.uuid, virtual.uuid) is False


@pytest.mark.asyncio
async def test_webinar_token_failure(orchestrator, guest, virtual, write_model, webinar_client):
    webinar_client.fail_token = True

    with pytest.raises(WebinarRegistrationFailed):
        await orchestrator.register(guest.uuid, virtual.uuid)

    assert webinar_client.registrants == []
    assert write_model.upserts == []


@pytest.mark.asyncio
async def test_virtual_event_without_webinar(orchestrator, guest, read_model, write_model):
    event = make_event(modality=EventModality.VIRTUAL)
    read_model.invite(guest.list_id, event)

    with pytest.raises(WebinarRegistrationFailed):
        await orchestrator.register(guest.uuid, event.uuid)

    assert write_model.upserts == []


@pytest.mark.asyncio
async def test_notification_failure_is_a_warning(
    orchestrator, guest, in_person, read_model, email_service
):
    email_service.fail = True

    result = await orchestrator.register(guest.uuid, in_person.uuid)

    assert result.registered is True
    assert result.state == RegistrationState.DONE
    assert result.warnings == ["No se pudo enviar el correo de confirmación."]
    assert await read_model.is_registered(guest.uuid, in_person.uuid) is True


@pytest.mark.asyncio
async def test_zoom_email_save_failure_is_a_warning(orchestrator, guest, virtual, write_model):
    write_model.fail_zoom_email = True

    result = await orchestrator.register(
        guest.uuid, virtual.uuid, zoom_email="ana.zoom@example.com", save_zoom_email=True
    )

    assert result.registered is True
    assert result.warnings == ["No se pudo guardar el correo para Zoom."]


@pytest.mark.asyncio
async def test_persist_failure_after_webinar_seat(
    orchestrator, guest, virtual, write_model, webinar_client, email_service
):
    write_model.fail_upsert = True

    with pytest.raises(UpstreamFailure):
        await orchestrator.register(guest.uuid, virtual.uuid)

    # the seat stays booked; no email goes out
    assert len(webinar_client.registrants) == 1
    assert email_service.sent == []


@pytest.mark.asyncio
async def test_closed_event_is_rejected(orchestrator, guest, read_model, write_model):
    event = make_event(register_open=False)
    read_model.invite(guest.list_id, event)

    with pytest.raises(RegistrationClosedError):
        await orchestrator.register(guest.uuid, event.uuid)

    assert write_model.upserts == []


@pytest.mark.asyncio
async def test_register_again_after_event_closes(
    orchestrator, guest, in_person, read_model, write_model, email_service
):
    await orchestrator.register(guest.uuid, in_person.uuid)
    read_model.events[in_person.uuid] = replace(in_person, register_open=False)

    again = await orchestrator.register(guest.uuid, in_person.uuid)

    assert again.already_registered is True
    assert again.state == RegistrationState.DONE
    assert len(write_model.upserts) == 1
    assert len(email_service.sent) == 1


@pytest.mark.asyncio
async def test_unknown_guest_or_event(orchestrator, guest, in_person):
    with pytest.raises(GuestNotFoundError):
        await orchestrator.register(uuid4(), in_person.uuid)
    with pytest.raises(EventNotFoundError):
        await orchestrator.register(guest.uuid, uuid4())


@pytest.mark.asyncio
async def test_substituted_guest_registers_replacement(
    orchestrator, guest, in_person, read_model, write_model, email_service
):
    replacement = make_guest(email="luis@example.com", name="Luis Paredes", list_id=guest.list_id)
    read_model.guests[replacement.uuid] = replacement
    read_model.substitutions.append(
        SubstitutionDTO(uuid4(), GROUP_ID, "ana@example.com", "luis@example.com")
    )

    result = await orchestrator.register(guest.uuid, in_person.uuid)

    assert result.guest_id == replacement.uuid
    assert write_model.upserts == [(replacement.uuid, in_person.uuid, None)]
    assert email_service.sent[0].to_address == "luis@example.com"


@pytest.mark.asyncio
async def test_substituted_guest_without_replacement_record(orchestrator, guest, in_person, read_model):
    read_model.substitutions.append(
        SubstitutionDTO(uuid4(), GROUP_ID, "ana@example.com", "luis@example.com")
    )

    with pytest.raises(GuestNotFoundError):
        await orchestrator.register(guest.uuid, in_person.uuid)
