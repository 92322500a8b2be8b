from sae_register.config.settings import settings
from sae_register.email_service.base import ConfirmationEmailDTO, EmailServiceBase
from sae_register.email_service.console_service import ConsoleEmailService
from sae_register.email_service.email_logger import SQLEmailLogger
from sae_register.email_service.sendgrid_service import SendGridEmailService


def get_email_service() -> EmailServiceBase:
    if settings.sendgrid_api_key:
        email_logger = SQLEmailLogger()
        return SendGridEmailService(config=settings, email_logger=email_logger)
    return ConsoleEmailService()


__all__ = [
    "ConfirmationEmailDTO",
    "EmailServiceBase",
    "get_email_service",
]
