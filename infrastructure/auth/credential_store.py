# infrastructure/auth/credential_store.py
from __future__ import annotations
from typing import Mapping

from domain.models import Credential

class StaticCredentialService:
    """
    Tokens OAuth ya emitidos (p.ej. desde GMAIL_ACCESS_TOKENS).
    El refresco y el handshake quedan fuera de este servicio.
    """
    def __init__(self, tokens: Mapping[str, str]) -> None:
        self._tokens = dict(tokens)

    def resolve_credential(self, user_id: str) -> Credential | None:
        token = self._tokens.get(user_id)
        if not token:
            return None
        return Credential(access_token=token)
