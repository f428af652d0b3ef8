# application/services/message_processor.py
from __future__ import annotations
import base64
import binascii
import logging
from datetime import datetime, timezone

from domain.models import Attachment, MailboxUser, MimePart, RemoteMessage
from domain.ports import Categorizer

logger = logging.getLogger(__name__)


def extract_message_metadata(message: RemoteMessage) -> tuple[str, str]:
    """(sender, subject). Nombres exactos 'From'/'Subject'; si se repiten gana el último."""
    sender = subject = None
    for h in message.headers:
        if h.name == "From":
            sender = h.value
        elif h.name == "Subject":
            subject = h.value
    return sender or "", subject or ""


def _find_body_part(part: MimePart) -> MimePart | None:
    # Primero el primer hijo, en profundidad; una hoja sin datos cede al siguiente hermano
    if part.data is not None:
        return part
    for child in part.parts:
        found = _find_body_part(child)
        if found is not None:
            return found
    return None


def decode_body_data(data: str) -> str:
    try:
        raw = base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))
    except (binascii.Error, ValueError):
        logger.warning("Cuerpo con base64 inválido; se ignora")
        return ""
    return raw.decode("utf-8", errors="replace")


def extract_email_body(part: MimePart) -> str:
    found = _find_body_part(part)
    if found is None or found.data is None:
        return ""
    return decode_body_data(found.data)


def extension_of(filename: str) -> str:
    """Todo lo que va tras el PRIMER punto: 'report.final.pdf' -> 'final.pdf'; sin punto -> ''."""
    _, sep, ext = (filename or "").partition(".")
    return ext if sep else ""


class MessageProcessor:
    def __init__(self, categorizer: Categorizer) -> None:
        self.categorizer = categorizer

    def _categories(self, text: str, user: MailboxUser) -> set[str]:
        if not text:
            return set()
        return set(self.categorizer.extract_categories(text, user.categories))

    def process(self, message: RemoteMessage, user: MailboxUser) -> list[Attachment]:
        """
        Transformación pura: mensaje completo -> adjuntos del usuario.
        Convención: la primera parte de primer nivel es el cuerpo; el resto son adjuntos.
        """
        parts = message.parts
        if not parts:
            logger.warning("Mensaje %s sin partes MIME; sin adjuntos", message.id)
            return []

        sender, subject = extract_message_metadata(message)
        body = extract_email_body(parts[0])

        categories = self._categories(subject, user) | self._categories(body, user)
        created = datetime.fromtimestamp(message.internal_date / 1000, tz=timezone.utc)

        attachments: list[Attachment] = []
        for part in parts[1:]:
            name = part.filename or ""
            attachments.append(Attachment(
                g_id=part.attachment_id or "",
                name=name,
                extension=extension_of(name),
                sender=sender,
                subject=subject,
                created_date=created,
                user_id=user.user_id,
                label_ids=set(message.label_ids),
                categories=set(categories),
            ))
        logger.debug("Mensaje %s: %d adjuntos, categorías=%s", message.id, len(attachments), sorted(categories))
        return attachments
