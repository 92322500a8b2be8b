"""CLI commands for SAE event registration management."""

import asyncio
from datetime import datetime, timedelta, timezone
from uuid import UUID

import typer

from sae_register.config.database import async_session_manager, init_db
from sae_register.config.settings import settings
from sae_register.email_service import get_email_service
from sae_register.invitations.dtos import EventModality
from sae_register.invitations.exceptions import InvitationError
from sae_register.invitations.features.list_events.view_model import InvitationViewBuilder
from sae_register.invitations.features.register_event.orchestrator import (
    RegistrationOrchestrator,
)
from sae_register.invitations.identity.substitution_tracker import SubstitutionTracker
from sae_register.invitations.repository.event_sources import get_event_source
from sae_register.invitations.repository.orm_models import (
    Event,
    EventGroup,
    EventGuest,
    EventList,
    Guest,
    InvitationList,
)
from sae_register.invitations.repository.read_models import SqlInvitationReadModel
from sae_register.invitations.repository.write_models import (
    SqlRegistrationWriteModel,
    SqlSubstitutionWriteModel,
)
from sae_register.webinar import get_webinar_client

app = typer.Typer(help="CLI commands for SAE event registration management")


@app.command("init-db")
def init_db_command():
    """Create missing tables directly from the models (local development only)."""
    asyncio.run(init_db())
    typer.secho("Tables created.", fg=typer.colors.GREEN)


async def _seed_demo(email: str, name: str, company: str | None):
    async with async_session_manager() as session:
        group = EventGroup(name="Encuentro mensual", is_current=True)
        session.add(group)
        await session.flush()

        invitation_list = InvitationList(name="Lista general", event_group_id=group.uuid)
        session.add(invitation_list)
        await session.flush()

        guest = Guest(email=email, name=name, company=company, list_id=invitation_list.uuid)
        session.add(guest)

        starts = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)
        in_person = Event(
            name="Encuentro mensual - Presencial",
            modality=EventModality.PRESENCIAL,
            scheduled_at=starts + timedelta(days=7),
            location="Lima",
            html_description="<p>Desayuno de trabajo</p>",
            register_open=True,
        )
        virtual = Event(
            name="Encuentro mensual - Virtual",
            modality=EventModality.VIRTUAL,
            scheduled_at=starts + timedelta(days=8),
            location="Zoom",
            html_description="<p>Sesión por Zoom</p>",
            zoom_webinar_id="00000000000",
            register_open=True,
        )
        session.add_all([in_person, virtual])
        await session.flush()

        for event in (in_person, virtual):
            session.add(EventList(event_id=event.uuid, list_id=invitation_list.uuid))
            session.add(EventGuest(guest_id=guest.uuid, event_id=event.uuid, registered=False))
        await session.flush()
        return group.uuid, guest.uuid, [in_person.uuid, virtual.uuid]


@app.command()
def seed_demo(
    email: str = typer.Option("invitado@sae.example.com", "--email", "-e", help="Guest email"),
    name: str = typer.Option("Invitado Demo", "--name", "-n", help="Guest name"),
    company: str = typer.Option(None, "--company", "-c", help="Company affiliation"),
):
    """Create a current event group with one guest and one event per modality."""
    group_id, guest_id, event_ids = asyncio.run(_seed_demo(email, name, company))

    typer.secho("Demo data created!", fg=typer.colors.GREEN)
    typer.secho(f"  Event group: {group_id}", fg=typer.colors.CYAN)
    typer.secho(f"  Guest: {guest_id} ({email})", fg=typer.colors.BLUE)
    for event_id in event_ids:
        typer.secho(f"  Event: {event_id}", fg=typer.colors.CYAN)


@app.command()
def list_events(
    email: str = typer.Argument(..., help="Guest email"),
    event_group_id: str = typer.Option(None, "--group", "-g", help="Event group UUID"),
):
    """Show the invitation view for an email."""
    builder = InvitationViewBuilder(
        read_model=SqlInvitationReadModel(),
        event_source=get_event_source(settings.EVENT_SOURCE),
        config=settings,
    )
    try:
        view = asyncio.run(
            builder.build(email, UUID(event_group_id) if event_group_id else None)
        )
    except InvitationError as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(1)

    typer.secho(f"{view.guest_name or 'Nombre no disponible'} <{view.effective_email}>", fg=typer.colors.GREEN)
    if view.replaced:
        typer.secho(f"  (replacement for {view.email})", fg=typer.colors.YELLOW)
    if not view.events:
        typer.secho("No hay eventos disponibles.", fg=typer.colors.YELLOW)
    for event in view.events:
        status = "Registrado" if event.registered else "Pendiente"
        typer.secho(
            f"  {event.scheduled_at:%Y-%m-%d %H:%M} {event.name} [{event.modality.value}] {status}",
            fg=typer.colors.BLUE,
        )
        typer.secho(f"    guest={event.guest_id} event={event.event_id}", fg=typer.colors.CYAN)
    for event in view.closed_events:
        typer.secho(f"  {event.scheduled_at:%Y-%m-%d %H:%M} {event.name} (cerrado)", fg=typer.colors.MAGENTA)
    if view.notice:
        typer.secho(view.notice, fg=typer.colors.YELLOW)


@app.command()
def register(
    guest_id: str = typer.Argument(..., help="Guest UUID"),
    event_id: str = typer.Argument(..., help="Event UUID"),
    zoom_email: str = typer.Option(None, "--zoom-email", help="Email to use for the webinar"),
    save_zoom_email: bool = typer.Option(False, "--save-zoom-email", help="Remember the zoom email"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """Register a guest for an event (books the webinar seat for virtual events)."""
    if not yes:
        typer.confirm(f"Register guest {guest_id} for event {event_id}?", abort=True)

    orchestrator = RegistrationOrchestrator(
        read_model=SqlInvitationReadModel(),
        write_model=SqlRegistrationWriteModel(),
        webinar_client=get_webinar_client(),
        email_service=get_email_service(),
        config=settings,
    )
    try:
        result = asyncio.run(
            orchestrator.register(
                UUID(guest_id),
                UUID(event_id),
                zoom_email=zoom_email,
                save_zoom_email=save_zoom_email,
            )
        )
    except InvitationError as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(1)

    if result.already_registered:
        typer.secho("Already registered.", fg=typer.colors.YELLOW)
    else:
        typer.secho("Registered!", fg=typer.colors.GREEN)
    typer.secho(f"  States: {' -> '.join(state.value for state in result.states)}", fg=typer.colors.CYAN)
    for warning in result.warnings:
        typer.secho(f"  Warning: {warning}", fg=typer.colors.YELLOW)


@app.command()
def substitute(
    event_group_id: str = typer.Argument(..., help="Event group UUID"),
    original_email: str = typer.Argument(..., help="Email of the invited guest"),
    new_email: str = typer.Argument(..., help="Email of the replacement"),
    new_name: str = typer.Argument(..., help="Name of the replacement"),
    company: str = typer.Option(None, "--company", "-c", help="Override company"),
):
    """Hand a guest's attendance over to a replacement."""
    tracker = SubstitutionTracker(
        read_model=SqlInvitationReadModel(),
        write_model=SqlSubstitutionWriteModel(),
    )
    try:
        result = asyncio.run(
            tracker.register_substitution(
                event_group_id=UUID(event_group_id),
                original_email=original_email,
                new_email=new_email,
                new_name=new_name,
                company=company,
            )
        )
    except InvitationError as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(1)

    if result.created:
        typer.secho("Substitution recorded!", fg=typer.colors.GREEN)
    else:
        typer.secho("Substitution already existed; nothing changed.", fg=typer.colors.YELLOW)
    typer.secho(
        f"  {result.substitution.original_email} -> {result.substitution.new_email}",
        fg=typer.colors.BLUE,
    )
    for replacement_id in result.replacement_guest_ids:
        typer.secho(f"  Replacement guest: {replacement_id}", fg=typer.colors.CYAN)


if __name__ == "__main__":
    app()
