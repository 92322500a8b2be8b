import logging
from typing import Protocol
from uuid import UUID

import httpx
from sqlalchemy.exc import SQLAlchemyError

from sae_register.email_service.base import ConfirmationEmailDTO, EmailServiceBase
from sae_register.email_service.email_logger import EmailLogger, NoOpEmailLogger
from sae_register.invitations.exceptions import NotificationFailed

logger = logging.getLogger(__name__)

SENDGRID_SEND_URL = "https://api.sendgrid.com/v3/mail/send"


class SendGridEmailConfig(Protocol):
    sendgrid_api_key: str
    emails_from: str


class SendGridEmailService(EmailServiceBase):
    def __init__(
        self,
        config: SendGridEmailConfig,
        email_logger: EmailLogger | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._config = config
        self.email_logger = email_logger or NoOpEmailLogger()
        self._transport = transport

    async def _log_attempt(self, email: ConfirmationEmailDTO) -> UUID | None:
        # the audit trail must never decide whether the email goes out
        try:
            return await self.email_logger.log_email_attempt(
                email=email, from_address=self._config.emails_from
            )
        except SQLAlchemyError:
            logger.warning("Could not write email log for %s", email.to_address, exc_info=True)
            return None

    async def _log_result(
        self,
        log_uuid: UUID | None,
        provider_message_id: str | None = None,
        error_message: str | None = None,
    ) -> None:
        if log_uuid is None:
            return
        try:
            if error_message is None:
                await self.email_logger.log_email_success(
                    log_uuid=log_uuid, provider_message_id=provider_message_id
                )
            else:
                await self.email_logger.log_email_failure(
                    log_uuid=log_uuid, error_message=error_message
                )
        except SQLAlchemyError:
            logger.warning("Could not update email log %s", log_uuid, exc_info=True)

    async def send_confirmation(self, email: ConfirmationEmailDTO) -> str | None:
        """Send via SendGrid dynamic templates and record the attempt."""
        log_uuid = await self._log_attempt(email)

        payload = {
            "personalizations": [
                {
                    "to": [{"email": email.to_address}],
                    "dynamic_template_data": email.template_data(),
                }
            ],
            "from": {"email": self._config.emails_from},
            "template_id": email.template_id,
        }

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    SENDGRID_SEND_URL,
                    headers={
                        "Authorization": f"Bearer {self._config.sendgrid_api_key}",
                        "Content-Type": "application/json",
                    },
                    json=payload,
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Confirmation email to %s failed: %s", email.to_address, e)
            await self._log_result(log_uuid, error_message=str(e))
            raise NotificationFailed(f"Could not send confirmation to '{email.to_address}'") from e

        message_id = response.headers.get("X-Message-Id")
        await self._log_result(log_uuid, provider_message_id=message_id)
        logger.info("Confirmation email sent to %s (%s)", email.to_address, message_id)
        return message_id
