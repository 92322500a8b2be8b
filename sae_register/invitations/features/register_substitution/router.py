from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, EmailStr

from sae_register.invitations.exceptions import InvalidEmailError, SubstitutionFailed
from sae_register.invitations.identity.substitution_tracker import SubstitutionTracker
from sae_register.invitations.repository.read_models import SqlInvitationReadModel
from sae_register.invitations.repository.write_models import SqlSubstitutionWriteModel
from sae_register.invitations.urls import SUBSTITUTIONS_URL

router = APIRouter()


class SubstitutionSubmit(BaseModel):
    event_group_id: UUID
    original_email: EmailStr
    new_email: EmailStr
    new_name: str
    company: str | None = None


class SubstitutionResponse(BaseModel):
    event_group_id: UUID
    original_email: str
    new_email: str
    created: bool
    replacement_guest_ids: list[UUID] = []


def get_substitution_tracker() -> SubstitutionTracker:
    """Dependency to get the substitution tracker with its write model."""
    return SubstitutionTracker(
        read_model=SqlInvitationReadModel(),
        write_model=SqlSubstitutionWriteModel(),
    )


@router.post(SUBSTITUTIONS_URL, response_model=SubstitutionResponse)
async def register_substitution(
    submit: SubstitutionSubmit,
    tracker: SubstitutionTracker = Depends(get_substitution_tracker),
) -> SubstitutionResponse:
    """
    Hand a guest's attendance over to a replacement for one event group.

    A second request for the same guest is accepted and changes nothing.
    """
    try:
        result = await tracker.register_substitution(
            event_group_id=submit.event_group_id,
            original_email=submit.original_email,
            new_email=submit.new_email,
            new_name=submit.new_name,
            company=submit.company,
        )
    except InvalidEmailError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except SubstitutionFailed as e:
        raise HTTPException(status_code=400, detail=str(e))

    return SubstitutionResponse(
        event_group_id=result.substitution.event_group_id,
        original_email=result.substitution.original_email,
        new_email=result.substitution.new_email,
        created=result.created,
        replacement_guest_ids=result.replacement_guest_ids,
    )
