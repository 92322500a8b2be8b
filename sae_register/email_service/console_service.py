"""
Console email service - used when no SendGrid key is configured.

Logs the template data that would have been sent, for local development.
"""

import logging

from sae_register.email_service.base import ConfirmationEmailDTO, EmailServiceBase

logger = logging.getLogger(__name__)


class ConsoleEmailService(EmailServiceBase):
    async def send_confirmation(self, email: ConfirmationEmailDTO) -> str | None:
        logger.info(
            "[CONFIRMATION] To: %s Template: %s Data: %s",
            email.to_address,
            email.template_id or "-",
            email.template_data(),
        )
        return None
