from fastapi import APIRouter

from .features.list_events.router import router as list_events_router
from .features.register_event.router import router as register_event_router
from .features.register_substitution.router import router as register_substitution_router

router = APIRouter()

router.include_router(list_events_router)
router.include_router(register_event_router)
router.include_router(register_substitution_router)
