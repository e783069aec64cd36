"""Tests for the ingestion poller."""

import asyncio

import pytest
from conftest import FakeBackend, make_message

from replydesk.core.exceptions import ExternalServiceError
from replydesk.models.message import Message
from replydesk.session.context import SessionContext
from replydesk.session.poller import IngestionPoller
from replydesk.session.working_set import WorkingSet


class UnreachableSource(FakeBackend):
    async def fetch_onscreen(self) -> list[Message]:
        raise ExternalServiceError("replydesk-api", "connection refused")

    async def fetch_pending(self) -> list[Message]:
        raise ExternalServiceError("replydesk-api", "connection refused")


class TestIngestionPoller:
    """Tests for seeding and merging."""

    @pytest.mark.asyncio
    async def test_refresh_replaces_working_set(self) -> None:
        context = SessionContext(working_set=WorkingSet([make_message("old")]))
        source = FakeBackend(onscreen=[make_message("1"), make_message("2")])

        messages = await IngestionPoller(context, source).refresh()

        assert len(messages) == 2
        assert context.working_set.ids() == ["1", "2"]

    @pytest.mark.asyncio
    async def test_poll_once_merges_new_batch(self) -> None:
        """New IDs are appended; re-delivered IDs keep their place."""
        context = SessionContext(working_set=WorkingSet([make_message("1")]))
        source = FakeBackend(pending=[[make_message("1"), make_message("2")]])

        added = await IngestionPoller(context, source).poll_once()

        assert added == 1
        assert context.working_set.ids() == ["1", "2"]

    @pytest.mark.asyncio
    async def test_empty_batch_is_noop(self) -> None:
        context = SessionContext(working_set=WorkingSet([make_message("1")]))

        assert await IngestionPoller(context, FakeBackend()).poll_once() == 0
        assert context.working_set.ids() == ["1"]

    @pytest.mark.asyncio
    async def test_source_errors_are_logged_not_raised(self) -> None:
        """A failed poll leaves the working set untouched."""
        context = SessionContext(working_set=WorkingSet([make_message("1")]))
        poller = IngestionPoller(context, UnreachableSource())

        assert await poller.refresh() == []
        assert await poller.poll_once() == 0
        assert context.working_set.ids() == ["1"]

    @pytest.mark.asyncio
    async def test_background_loop_polls_until_stopped(self) -> None:
        context = SessionContext()
        source = FakeBackend(pending=[[make_message("1")], [make_message("2")]])
        poller = IngestionPoller(context, source, interval=0.01)

        poller.start()
        assert poller.running
        await asyncio.sleep(0.08)
        await poller.stop()

        assert not poller.running
        assert context.working_set.ids() == ["1", "2"]

    @pytest.mark.asyncio
    async def test_stop_without_start(self) -> None:
        poller = IngestionPoller(SessionContext(), FakeBackend())

        await poller.stop()

        assert not poller.running
