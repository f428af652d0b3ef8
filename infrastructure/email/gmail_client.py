# infrastructure/email/gmail_client.py
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Tuple
import requests

from domain.errors import TransportError
from domain.models import Credential, MessageHeader, MimePart, RemoteMessage

logger = logging.getLogger(__name__)

class GmailClient:
    """
    Cliente REST mínimo de Gmail v1 ligado a UNA credencial.
    Cada llamada usa requests.get (sin Session compartida), así que la misma
    instancia se puede usar desde todos los hilos del pool de I/O.
    """
    def __init__(
        self,
        *,
        credential: Credential,
        user_id: str = "me",
        base: str = "https://gmail.googleapis.com/gmail/v1",
        timeout: int = 30,
    ) -> None:
        self.credential = credential
        self.user_id = user_id
        self.base = base.rstrip("/")
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"{self.credential.token_type} {self.credential.access_token}"}

    # ───────── HTTP helpers ─────────
    def _get(self, url: str, params: Dict[str, Any] | None = None) -> Dict[str, Any]:
        try:
            r = requests.get(url, headers=self._headers(), params=params, timeout=self.timeout)
            r.raise_for_status()
            return r.json()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise TransportError(f"GET {url} -> HTTP {status}", status_code=status) from e
        except requests.RequestException as e:
            raise TransportError(f"GET {url} falló: {e}") from e

    # ───────── messages ─────────
    def list_messages(
        self,
        query: str,
        page_token: Optional[str] = None,
        page_size: int | None = None,
    ) -> Tuple[List[str], Optional[str]]:
        """Una página de la búsqueda. Devuelve (ids, nextPageToken|None)."""
        params: Dict[str, Any] = {"q": query}
        if page_token:
            params["pageToken"] = page_token
        if page_size:
            params["maxResults"] = page_size
        data = self._get(f"{self.base}/users/{self.user_id}/messages", params=params)
        ids = [m["id"] for m in data.get("messages", []) or [] if m.get("id")]
        return ids, data.get("nextPageToken") or None

    def get_message(self, message_id: str) -> RemoteMessage:
        data = self._get(
            f"{self.base}/users/{self.user_id}/messages/{message_id}",
            params={"format": "full"},
        )
        return self.parse_message(data)

    # ───────── parsing ─────────
    @staticmethod
    def parse_part(raw: Dict[str, Any]) -> MimePart:
        body = raw.get("body") or {}
        return MimePart(
            data=body.get("data"),
            attachment_id=body.get("attachmentId"),
            filename=raw.get("filename"),
            mime_type=raw.get("mimeType") or "",
            parts=[GmailClient.parse_part(p) for p in raw.get("parts") or []],
        )

    @staticmethod
    def parse_message(raw: Dict[str, Any]) -> RemoteMessage:
        payload = raw.get("payload") or {}
        headers = [
            MessageHeader(name=h.get("name") or "", value=h.get("value") or "")
            for h in payload.get("headers") or []
        ]
        return RemoteMessage(
            id=raw.get("id") or "",
            internal_date=int(raw.get("internalDate") or 0),
            headers=headers,
            parts=[GmailClient.parse_part(p) for p in payload.get("parts") or []],
            label_ids=list(raw.get("labelIds") or []),
        )
