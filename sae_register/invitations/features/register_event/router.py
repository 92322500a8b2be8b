from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, EmailStr

from sae_register.config.settings import settings
from sae_register.email_service import get_email_service
from sae_register.invitations.dtos import RegistrationState
from sae_register.invitations.exceptions import (
    NotFoundError,
    RegistrationClosedError,
    UpstreamFailure,
    WebinarRegistrationFailed,
)
from sae_register.invitations.features.register_event.orchestrator import (
    RegistrationOrchestrator,
)
from sae_register.invitations.repository.read_models import SqlInvitationReadModel
from sae_register.invitations.repository.write_models import SqlRegistrationWriteModel
from sae_register.invitations.urls import REGISTRATIONS_URL
from sae_register.webinar import get_webinar_client

router = APIRouter()


class RegistrationSubmit(BaseModel):
    guest_id: UUID
    event_id: UUID
    # the guest must have accepted the confirmation dialog
    confirmed: bool = False
    zoom_email: EmailStr | None = None
    save_zoom_email: bool = False


class RegistrationResponse(BaseModel):
    guest_id: UUID
    event_id: UUID
    registered: bool
    already_registered: bool
    state: RegistrationState
    states: list[RegistrationState]
    warnings: list[str] = []
    webinar_registrant_id: str | None = None


def get_registration_orchestrator() -> RegistrationOrchestrator:
    """Dependency to get the registration orchestrator."""
    return RegistrationOrchestrator(
        read_model=SqlInvitationReadModel(),
        write_model=SqlRegistrationWriteModel(),
        webinar_client=get_webinar_client(),
        email_service=get_email_service(),
        config=settings,
    )


@router.post(REGISTRATIONS_URL, response_model=RegistrationResponse)
async def register_for_event(
    submit: RegistrationSubmit,
    orchestrator: RegistrationOrchestrator = Depends(get_registration_orchestrator),
) -> RegistrationResponse:
    """
    Register a guest for an event.
    Virtual events book a webinar seat first; nothing is stored if that fails.
    """
    if not submit.confirmed:
        raise HTTPException(status_code=400, detail="Registration must be confirmed")

    try:
        result = await orchestrator.register(
            guest_id=submit.guest_id,
            event_id=submit.event_id,
            zoom_email=submit.zoom_email,
            save_zoom_email=submit.save_zoom_email,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RegistrationClosedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except WebinarRegistrationFailed as e:
        raise HTTPException(status_code=502, detail=f"Zoom: {e.message}")
    except UpstreamFailure as e:
        raise HTTPException(status_code=503, detail=str(e))

    return RegistrationResponse(
        guest_id=result.guest_id,
        event_id=result.event_id,
        registered=result.registered,
        already_registered=result.already_registered,
        state=result.state,
        states=result.states,
        warnings=result.warnings,
        webinar_registrant_id=result.webinar_registrant_id,
    )
