# domain/ports.py
# Colaboradores externos del sync (solo contrato)
from __future__ import annotations
from typing import Any, Iterable, Mapping, Protocol

from domain.models import Attachment, Credential


class CredentialService(Protocol):
    def resolve_credential(self, user_id: str) -> Credential | None: ...


class AttachmentService(Protocol):
    def delete_all(self, attachments: Iterable[Attachment]) -> None: ...

    def delete_for_user(self, user_id: str) -> None: ...

    def save_all(self, attachments: Iterable[Attachment]) -> None: ...

    def replace_all(self, user_id: str, attachments: Iterable[Attachment]) -> None: ...


class Categorizer(Protocol):
    def extract_categories(self, text: str, vocabulary: Mapping[str, Any]) -> set[str]: ...
