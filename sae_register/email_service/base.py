from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from uuid import UUID


@dataclass(frozen=True)
class ConfirmationEmailDTO:
    """Dynamic template data for the registration confirmation email."""

    to_address: str
    template_id: str
    first_name: str
    register_link: str
    estimado: str
    apodo: str
    event_name: str
    event_place: str
    event_date: str
    event_program: str
    guest_id: UUID | None = None
    event_id: UUID | None = None

    def template_data(self) -> dict[str, str]:
        data = asdict(self)
        for key in ("to_address", "template_id", "guest_id", "event_id"):
            data.pop(key)
        return data


class EmailServiceBase(ABC):
    @abstractmethod
    async def send_confirmation(self, email: ConfirmationEmailDTO) -> str | None:
        """
        Send one confirmation email. Returns the provider message id when known.
        Raises ``NotificationFailed``.
        """
        pass
