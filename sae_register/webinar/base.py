from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RegistrantDTO:
    webinar_id: str
    first_name: str
    last_name: str
    email: str
    org: str | None = None


@dataclass(frozen=True)
class WebinarRegistrantDTO:
    registrant_id: str | None
    join_url: str | None = None


class WebinarClientBase(ABC):
    @abstractmethod
    async def get_access_token(self) -> str:
        """Fresh bearer token. Never cached between registrations."""
        pass

    @abstractmethod
    async def create_registrant(
        self, access_token: str, registrant: RegistrantDTO
    ) -> WebinarRegistrantDTO:
        pass
