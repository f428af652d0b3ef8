"""Tests for application.services.message_lister."""

from __future__ import annotations

import pytest

from application.services.message_lister import list_messages_with_attachments
from domain.errors import TransportError
from conftest import FakeGmailClient


class TestListMessagesWithAttachments:
    def test_single_page(self):
        client = FakeGmailClient(pages=[["a", "b"]], messages={})
        assert list_messages_with_attachments(client) == ["a", "b"]
        assert client.page_requests == [None]

    def test_follows_every_page_token(self):
        pages = [["a", "b"], ["c"], ["d", "e"], ["f"]]
        client = FakeGmailClient(pages=pages, messages={})

        result = list_messages_with_attachments(client)

        assert result == ["a", "b", "c", "d", "e", "f"]
        assert len(result) == len(set(result))
        assert client.page_requests == [None, "1", "2", "3"]

    def test_empty_pages_contribute_nothing(self):
        client = FakeGmailClient(pages=[[], ["x"], []], messages={})
        assert list_messages_with_attachments(client) == ["x"]

    def test_uses_same_query_on_every_page(self):
        queries = []

        class Client:
            def list_messages(self, query, page_token=None, page_size=None):
                queries.append((query, page_token, page_size))
                return (["1"], "t") if page_token is None else (["2"], None)

        assert list_messages_with_attachments(Client(), "has:attachment", 50) == ["1", "2"]
        assert queries == [("has:attachment", None, 50), ("has:attachment", "t", 50)]

    def test_page_failure_aborts_listing(self):
        class Client:
            def list_messages(self, query, page_token=None, page_size=None):
                if page_token:
                    raise TransportError("boom", status_code=503)
                return ["a"], "next"

        with pytest.raises(TransportError):
            list_messages_with_attachments(Client())
