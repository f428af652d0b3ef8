"""Shared fixtures and fakes for the sync tests."""

from __future__ import annotations

import base64
import threading

import pytest

from domain.models import Attachment, MailboxUser, MessageHeader, MimePart, RemoteMessage


def b64(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def make_message(
    message_id: str,
    *,
    internal_date: int,
    subject: str = "Subject",
    sender: str = "alice@example.com",
    body: str | None = "hello",
    attachments: list[tuple[str, str]] | None = None,
    label_ids: list[str] | None = None,
) -> RemoteMessage:
    parts = [MimePart(data=b64(body) if body is not None else None, mime_type="text/plain")]
    for att_id, filename in attachments or []:
        parts.append(MimePart(attachment_id=att_id, filename=filename, mime_type="application/octet-stream"))
    return RemoteMessage(
        id=message_id,
        internal_date=internal_date,
        headers=[MessageHeader("From", sender), MessageHeader("Subject", subject)],
        parts=parts,
        label_ids=label_ids or ["INBOX"],
    )


class FakeGmailClient:
    """In-memory stand-in for GmailClient: pages of ids plus per-id fetch behaviour."""

    def __init__(self, pages: list[list[str]], messages: dict[str, RemoteMessage], failures: dict[str, int] | None = None):
        self.pages = pages
        self.messages = messages
        # message id -> number of leading failures (-1 = always fail)
        self.failures = dict(failures or {})
        self.calls: dict[str, int] = {}
        self.page_requests: list[str | None] = []
        self._lock = threading.Lock()

    def list_messages(self, query, page_token=None, page_size=None):
        self.page_requests.append(page_token)
        index = int(page_token) if page_token else 0
        next_token = str(index + 1) if index + 1 < len(self.pages) else None
        return list(self.pages[index]), next_token

    def get_message(self, message_id):
        with self._lock:
            self.calls[message_id] = self.calls.get(message_id, 0) + 1
            n = self.calls[message_id]
        remaining = self.failures.get(message_id, 0)
        if remaining == -1 or n <= remaining:
            raise ConnectionError(f"transient failure {n} for {message_id}")
        return self.messages[message_id]


class FakeClientFactory:
    def __init__(self, client):
        self.client = client
        self.requested: list[str] = []

    def for_user(self, user_id):
        self.requested.append(user_id)
        return self.client


class FakeAttachmentService:
    def __init__(self, stored: list[Attachment] | None = None):
        self.stored: list[Attachment] = list(stored or [])
        self.deleted_users: list[str] = []
        self.saved: list[list[Attachment]] = []
        self.replaced: list[tuple[str, list[Attachment]]] = []

    def delete_for_user(self, user_id):
        self.deleted_users.append(user_id)
        self.stored = [a for a in self.stored if a.user_id != user_id]

    def save_all(self, attachments):
        attachments = list(attachments)
        self.saved.append(attachments)
        self.stored.extend(attachments)

    def replace_all(self, user_id, attachments):
        attachments = list(attachments)
        self.replaced.append((user_id, attachments))
        self.stored = [a for a in self.stored if a.user_id != user_id] + attachments


class FakeCategorizer:
    """Returns fixed categories per exact text."""

    def __init__(self, mapping: dict[str, set[str]] | None = None):
        self.mapping = mapping or {}
        self.calls: list[str] = []

    def extract_categories(self, text, vocabulary):
        self.calls.append(text)
        return set(self.mapping.get(text, set()))


@pytest.fixture
def user():
    return MailboxUser(user_id="42", categories={"Invoices": ["invoice"], "Travel": ["flight"]})
