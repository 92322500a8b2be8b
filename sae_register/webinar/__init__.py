from sae_register.config.settings import settings
from sae_register.webinar.base import RegistrantDTO, WebinarClientBase, WebinarRegistrantDTO
from sae_register.webinar.zoom_client import ZoomWebinarClient


def get_webinar_client() -> WebinarClientBase:
    return ZoomWebinarClient(config=settings)


__all__ = [
    "RegistrantDTO",
    "WebinarClientBase",
    "WebinarRegistrantDTO",
    "ZoomWebinarClient",
    "get_webinar_client",
]
