from datetime import datetime, timezone
from uuid import uuid4

from sae_register.invitations.dtos import EventModality, ExecutiveDTO, GuestType
from sae_register.invitations.features.register_event.notifications import (
    GENERIC_SALUTATION,
    build_confirmation_email,
    format_event_date,
    salutation_fields,
)
from sae_register.invitations.tests.inmemory_models import FakeConfig, make_event, make_guest


def test_format_event_date_in_display_timezone():
    # 23:30 UTC is 18:30 in Lima
    value = datetime(2025, 1, 15, 23, 30, tzinfo=timezone.utc)
    assert format_event_date(value, "America/Lima") == "15 de enero de 2025, 18:30"


def test_format_event_date_treats_naive_as_utc():
    assert format_event_date(datetime(2025, 7, 1, 3, 5), "America/Lima") == "30 de junio de 2025, 22:05"


def test_salutation_for_regular_guest():
    guest = make_guest(name="Ana Torres", salutation="Estimada", nickname="Anita")
    assert salutation_fields(guest) == ("Ana Torres", "Estimada", "Anita")

    plain = make_guest(name="Ana Torres")
    assert salutation_fields(plain) == ("Ana Torres", GENERIC_SALUTATION, "Ana Torres")


def test_salutation_for_sponsored_guest():
    executive = ExecutiveDTO(
        uuid=uuid4(), first_name="Carlos", last_name="Rivas", salutation="Estimado", nickname="Charlie"
    )
    guest = make_guest(name="Asistente", is_sponsored=True, executive=executive, salutation="Sra.")
    assert salutation_fields(guest) == ("Carlos", "Estimado", "Charlie")


def test_salutation_for_replacement_is_generic():
    guest = make_guest(
        name="Luis Paredes", guest_type=GuestType.REEMPLAZO, salutation="Dr.", nickname="Lucho"
    )
    assert salutation_fields(guest) == ("Luis Paredes", GENERIC_SALUTATION, "Luis Paredes")


def test_build_confirmation_email():
    guest = make_guest(email="ana+sae@example.com", salutation="Estimada", nickname="Anita")
    event = make_event(
        name="Foro virtual",
        modality=EventModality.VIRTUAL,
        location="Zoom",
        html_description="<p>Programa</p><img src=x onerror=alert(1)>",
    )

    email = build_confirmation_email(guest, event, FakeConfig())

    assert email.to_address == "ana+sae@example.com"
    assert email.template_id == "d-virtual"
    assert email.register_link == "https://eventos.example.com/ana%2Bsae%40example.com"
    assert email.event_date == "15 de enero de 2025, 18:30"
    assert email.event_program == "<p>Programa</p>"
    assert email.guest_id == guest.uuid
    assert email.event_id == event.uuid
    assert email.template_data() == {
        "first_name": "Ana Torres",
        "register_link": "https://eventos.example.com/ana%2Bsae%40example.com",
        "estimado": "Estimada",
        "apodo": "Anita",
        "event_name": "Foro virtual",
        "event_place": "Zoom",
        "event_date": "15 de enero de 2025, 18:30",
        "event_program": "<p>Programa</p>",
    }


def test_virtual_event_without_virtual_template_uses_default():
    config = FakeConfig(virtual_confirmation_template_id="")
    event = make_event(modality=EventModality.VIRTUAL)

    email = build_confirmation_email(make_guest(), event, config)

    assert email.template_id == "d-presencial"
    assert email.event_place == ""
