# infrastructure/email/client_factory.py
from __future__ import annotations
import logging

from config.settings import Settings
from domain.errors import MissingCredentialError
from domain.ports import CredentialService
from infrastructure.email.gmail_client import GmailClient

logger = logging.getLogger(__name__)

class ClientFactory:
    """Construye un GmailClient nuevo por ejecución, ligado a la credencial de un único usuario."""
    def __init__(self, credential_service: CredentialService, settings: Settings) -> None:
        self.credential_service = credential_service
        self.settings = settings

    def for_user(self, user_id: str) -> GmailClient:
        credential = self.credential_service.resolve_credential(user_id)
        if credential is None:
            raise MissingCredentialError(user_id)
        logger.debug("Cliente Gmail creado para %s", user_id)
        return GmailClient(
            credential=credential,
            user_id=self.settings.GMAIL_USER_ID,
            base=self.settings.GMAIL_BASE,
            timeout=self.settings.HTTP_TIMEOUT,
        )
