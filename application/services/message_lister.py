# application/services/message_lister.py
from __future__ import annotations
import logging
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

HAS_ATTACHMENT_QUERY = "has:attachment"


class MessagePager(Protocol):
    def list_messages(
        self, query: str, page_token: Optional[str] = None, page_size: int | None = None
    ) -> tuple[list[str], Optional[str]]: ...


def list_messages_with_attachments(
    client: MessagePager,
    query: str = HAS_ATTACHMENT_QUERY,
    page_size: int | None = None,
) -> list[str]:
    """
    Recorre todas las páginas de la búsqueda (mismo query + nextPageToken)
    hasta que la API deje de devolver token. Orden = orden del proveedor.
    Si falla cualquier página se propaga el TransportError: no hay resultado parcial.
    """
    ids, token = client.list_messages(query, None, page_size)
    message_ids = list(ids)
    pages = 1
    while token:
        ids, token = client.list_messages(query, token, page_size)
        message_ids.extend(ids)
        pages += 1
    logger.info("Listado: %d mensajes con adjuntos en %d páginas", len(message_ids), pages)
    return message_ids
