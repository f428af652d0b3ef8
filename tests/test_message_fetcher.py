"""Tests for application.services.message_fetcher."""

from __future__ import annotations

import threading
from unittest.mock import patch

import pytest
from tenacity import wait_none, wait_random_exponential

from application.services.message_fetcher import MessageFetcher
from domain.errors import FetchExhaustedError, SyncCancelled
from conftest import FakeGmailClient, make_message


@pytest.fixture
def message():
    return make_message("m1", internal_date=1_700_000_000_000)


class TestMessageFetcher:
    def test_succeeds_first_try(self, message):
        client = FakeGmailClient(pages=[], messages={"m1": message})
        assert MessageFetcher().fetch(client, "m1") is message
        assert client.calls["m1"] == 1

    @pytest.mark.parametrize("failures", [1, 2])
    def test_retries_then_succeeds(self, message, failures):
        client = FakeGmailClient(pages=[], messages={"m1": message}, failures={"m1": failures})
        assert MessageFetcher().fetch(client, "m1") is message
        assert client.calls["m1"] == failures + 1

    def test_exhausts_after_three_attempts(self, message):
        client = FakeGmailClient(pages=[], messages={"m1": message}, failures={"m1": -1})

        with pytest.raises(FetchExhaustedError) as excinfo:
            MessageFetcher().fetch(client, "m1")

        assert client.calls["m1"] == 3
        assert excinfo.value.attempts == 3
        assert excinfo.value.message_id == "m1"
        assert isinstance(excinfo.value.cause, ConnectionError)

    def test_three_failures_then_success_is_still_fatal(self, message):
        client = FakeGmailClient(pages=[], messages={"m1": message}, failures={"m1": 3})
        with pytest.raises(FetchExhaustedError):
            MessageFetcher().fetch(client, "m1")
        assert client.calls["m1"] == 3

    def test_custom_attempt_count(self, message):
        client = FakeGmailClient(pages=[], messages={"m1": message}, failures={"m1": -1})
        with pytest.raises(FetchExhaustedError):
            MessageFetcher(max_attempts=5).fetch(client, "m1")
        assert client.calls["m1"] == 5

    def test_jittered_backoff_between_attempts(self, message):
        client = FakeGmailClient(pages=[], messages={"m1": message}, failures={"m1": 2})
        fetcher = MessageFetcher(retry_wait_max=0.01)

        with patch("tenacity.nap.time.sleep") as sleep:
            assert fetcher.fetch(client, "m1") is message

        assert isinstance(fetcher._wait(), wait_random_exponential)
        assert sleep.call_count == 2
        assert all(0 <= c.args[0] <= 0.01 for c in sleep.call_args_list)

    def test_no_wait_by_default(self):
        assert isinstance(MessageFetcher()._wait(), wait_none)

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            MessageFetcher(max_attempts=0)

    def test_cancelled_run_does_not_fetch(self, message):
        client = FakeGmailClient(pages=[], messages={"m1": message})
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(SyncCancelled):
            MessageFetcher().fetch(client, "m1", cancel)
        assert "m1" not in client.calls
