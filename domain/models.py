# domain/models.py
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping


@dataclass(frozen=True)
class Credential:
    access_token: str
    token_type: str = "Bearer"


@dataclass(frozen=True)
class MessageHeader:
    name: str
    value: str


@dataclass
class MimePart:
    """
    Nodo del árbol MIME de Gmail.
    Contenedor: `parts` con hijos y sin `data`.
    Hoja: `data` (base64url tal cual llega de la API), opcionalmente `attachment_id` y `filename`.
    """
    data: str | None = None
    attachment_id: str | None = None
    filename: str | None = None
    mime_type: str = ""
    parts: list[MimePart] = field(default_factory=list)

    @property
    def is_container(self) -> bool:
        return bool(self.parts)


@dataclass
class RemoteMessage:
    id: str
    internal_date: int  # epoch ms
    headers: list[MessageHeader] = field(default_factory=list)
    parts: list[MimePart] = field(default_factory=list)
    label_ids: list[str] = field(default_factory=list)


@dataclass
class Attachment:
    g_id: str
    name: str
    extension: str
    sender: str
    subject: str
    created_date: datetime
    user_id: str
    label_ids: set[str] = field(default_factory=set)
    categories: set[str] = field(default_factory=set)

    def to_dict(self) -> dict[str, Any]:
        return {
            "g_id": self.g_id,
            "name": self.name,
            "extension": self.extension,
            "sender": self.sender,
            "subject": self.subject,
            "created_date": self.created_date.isoformat(),
            "user_id": self.user_id,
            "label_ids": sorted(self.label_ids),
            "categories": sorted(self.categories),
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Attachment":
        created = datetime.fromisoformat(raw["created_date"])
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return cls(
            g_id=raw["g_id"],
            name=raw.get("name") or "",
            extension=raw.get("extension") or "",
            sender=raw.get("sender") or "",
            subject=raw.get("subject") or "",
            created_date=created,
            user_id=str(raw["user_id"]),
            label_ids=set(raw.get("label_ids") or []),
            categories=set(raw.get("categories") or []),
        )


@dataclass
class MailboxUser:
    user_id: str
    # nombre de categoría -> regla (opaca para el sync; lista de keywords para KeywordCategorizer)
    categories: Mapping[str, Any] = field(default_factory=dict)
    attachments: list[Attachment] = field(default_factory=list)
