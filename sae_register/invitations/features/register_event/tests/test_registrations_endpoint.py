from uuid import uuid4

import pytest

from sae_register.invitations.dtos import EventModality
from sae_register.invitations.features.register_event.orchestrator import (
    RegistrationOrchestrator,
)
from sae_register.invitations.features.register_event.router import (
    get_registration_orchestrator,
)
from sae_register.invitations.tests.inmemory_models import (
    FakeConfig,
    InMemoryEmailService,
    InMemoryInvitationReadModel,
    InMemoryRegistrationWriteModel,
    InMemoryWebinarClient,
    make_event,
    make_guest,
)
from sae_register.invitations.urls import REGISTRATIONS_URL


@pytest.fixture
def guest():
    return make_guest()


@pytest.fixture
def events():
    return {
        "open": make_event(name="Desayuno SAE"),
        "closed": make_event(name="Foro cerrado", register_open=False),
        "virtual": make_event(
            name="Foro virtual", modality=EventModality.VIRTUAL, zoom_webinar_id="81234567890"
        ),
    }


@pytest.fixture
def read_model(guest, events):
    read_model = InMemoryInvitationReadModel(guests=[guest])
    read_model.invite(guest.list_id, *events.values())
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
def overrides(read_model, write_model, webinar_client, email_service):
    orchestrator = RegistrationOrchestrator(
        read_model=read_model,
        write_model=write_model,
        webinar_client=webinar_client,
        email_service=email_service,
        config=FakeConfig(),
    )
    return {get_registration_orchestrator: lambda: orchestrator}


def submit(guest_id, event_id, **kwargs) -> dict:
    return {"guest_id": str(guest_id), "event_id": str(event_id), "confirmed": True, **kwargs}


@pytest.mark.asyncio
async def test_register_success(client_factory, overrides, guest, events, email_service):
    """Test registering for an open in-person event."""
    async with client_factory(overrides) as client:
        response = await client.post(REGISTRATIONS_URL, json=submit(guest.uuid, events["open"].uuid))

    assert response.status_code == 200
    data = response.json()
    assert data["registered"] is True
    assert data["already_registered"] is False
    assert data["state"] == "done"
    assert data["states"] == ["pending", "persisting", "notifying", "done"]
    assert data["warnings"] == []
    assert data["webinar_registrant_id"] is None
    assert len(email_service.sent) == 1


@pytest.mark.asyncio
async def test_register_virtual_returns_registrant_id(client_factory, overrides, guest, events):
    """Test that a virtual registration reports the webinar registrant."""
    async with client_factory(overrides) as client:
        response = await client.post(
            REGISTRATIONS_URL, json=submit(guest.uuid, events["virtual"].uuid)
        )

    assert response.status_code == 200
    assert response.json()["webinar_registrant_id"] == "reg-1"


@pytest.mark.asyncio
async def test_register_requires_confirmation(client_factory, overrides, guest, events, write_model):
    """Test that an unconfirmed submission is rejected without side effects."""
    payload = submit(guest.uuid, events["open"].uuid, confirmed=False)

    async with client_factory(overrides) as client:
        response = await client.post(REGISTRATIONS_URL, json=payload)

    assert response.status_code == 400
    assert write_model.upserts == []


@pytest.mark.asyncio
async def test_register_twice(client_factory, overrides, guest, events, email_service):
    """Test that a second registration reports already_registered."""
    async with client_factory(overrides) as client:
        await client.post(REGISTRATIONS_URL, json=submit(guest.uuid, events["open"].uuid))
        response = await client.post(REGISTRATIONS_URL, json=submit(guest.uuid, events["open"].uuid))

    assert response.status_code == 200
    assert response.json()["already_registered"] is True
    assert len(email_service.sent) == 1


@pytest.mark.asyncio
async def test_register_closed_event(client_factory, overrides, guest, events):
    async with client_factory(overrides) as client:
        response = await client.post(REGISTRATIONS_URL, json=submit(guest.uuid, events["closed"].uuid))

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_unknown_guest(client_factory, overrides, events):
    async with client_factory(overrides) as client:
        response = await client.post(REGISTRATIONS_URL, json=submit(uuid4(), events["open"].uuid))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_register_webinar_failure(client_factory, overrides, guest, events, webinar_client, write_model):
    """Test that the provider's message reaches the caller and nothing is stored."""
    webinar_client.fail_registrant = True

    async with client_factory(overrides) as client:
        response = await client.post(
            REGISTRATIONS_URL, json=submit(guest.uuid, events["virtual"].uuid)
        )

    assert response.status_code == 502
    assert response.json()["detail"] == "Zoom: Webinar does not exist"
    assert write_model.upserts == []


@pytest.mark.asyncio
async def test_register_store_failure(client_factory, overrides, guest, events, write_model):
    write_model.fail_upsert = True

    async with client_factory(overrides) as client:
        response = await client.post(REGISTRATIONS_URL, json=submit(guest.uuid, events["open"].uuid))

    assert response.status_code == 503


@pytest.mark.asyncio
async def test_register_rejects_malformed_zoom_email(client_factory, overrides, guest, events):
    payload = submit(guest.uuid, events["virtual"].uuid, zoom_email="no-es-correo")

    async with client_factory(overrides) as client:
        response = await client.post(REGISTRATIONS_URL, json=payload)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_register_with_email_warning(client_factory, overrides, guest, events, email_service):
    """Test that a failed confirmation email still returns a registration."""
    email_service.fail = True

    async with client_factory(overrides) as client:
        response = await client.post(REGISTRATIONS_URL, json=submit(guest.uuid, events["open"].uuid))

    assert response.status_code == 200
    data = response.json()
    assert data["registered"] is True
    assert data["warnings"] == ["No se pudo enviar el correo de confirmación."]
