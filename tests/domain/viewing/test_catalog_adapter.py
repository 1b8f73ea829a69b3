"""Tests for StreamCatalogAdapter."""

import asyncio

from livevip.domain.viewing._catalog import StreamCatalogAdapter
from livevip.utils.app_errors import AppErrorCode, CatalogFetchError
from tests.fixtures.viewing_fixtures import make_stream


class TestRefresh:
    """Tests for StreamCatalogAdapter.refresh."""

    async def test_success_replaces_list(self, fake_client, scheduler, sample_catalog):
        """Test a successful fetch replaces the list and notifies."""
        # Arrange
        changes = []
        adapter = StreamCatalogAdapter(fake_client, scheduler, on_change=changes.append)

        # Act
        replaced = await adapter.refresh()

        # Assert
        assert replaced is True
        assert adapter.streams == sample_catalog
        assert adapter.loading is False
        assert adapter.error is None
        assert changes == [sample_catalog]

    async def test_failure_keeps_previous_list(self, fake_client, scheduler, sample_catalog):
        """Test a failed fetch keeps the last good list and sets an error."""
        adapter = StreamCatalogAdapter(fake_client, scheduler)
        await adapter.refresh()
        fake_client.list_streams.side_effect = CatalogFetchError(
            "refused", AppErrorCode.E_UPSTREAM_UNAVAILABLE
        )

        replaced = await adapter.refresh()

        assert replaced is False
        assert adapter.streams == sample_catalog
        assert adapter.error == "Connection error"

    async def test_http_failure_message(self, fake_client, scheduler):
        """Test an upstream error message is surfaced."""
        fake_client.list_streams.side_effect = CatalogFetchError("Failed to fetch streams")
        adapter = StreamCatalogAdapter(fake_client, scheduler)

        await adapter.refresh()

        assert adapter.error == "Could not load streams: Failed to fetch streams"
        assert adapter.loading is False

    async def test_superseded_response_dropped(self, fake_client, scheduler):
        """Test a slow response does not overwrite a newer one."""
        # Arrange
        release = asyncio.Event()
        old = [make_stream("old")]
        new = [make_stream("new")]
        calls = {"n": 0}

        async def list_streams():
            calls["n"] += 1
            if calls["n"] == 1:
                await release.wait()
                return old
            return new

        fake_client.list_streams.side_effect = list_streams
        adapter = StreamCatalogAdapter(fake_client, scheduler)

        # Act
        slow = asyncio.create_task(adapter.refresh())
        await asyncio.sleep(0)
        await adapter.refresh()
        release.set()
        slow_result = await slow

        # Assert
        assert slow_result is False
        assert adapter.streams == new


class TestPolling:
    """Tests for start/stop polling."""

    async def test_start_fetches_now_and_every_interval(self, fake_client, scheduler):
        """Test polling fetches immediately and then on the interval."""
        adapter = StreamCatalogAdapter(fake_client, scheduler, poll_seconds=30)

        adapter.start()
        await scheduler.run_pending()
        await scheduler.advance(90)

        assert fake_client.list_streams.await_count == 4
        assert adapter.polling is True
        assert adapter.last_refreshed_at == 90

    async def test_start_twice_is_noop(self, fake_client, scheduler):
        adapter = StreamCatalogAdapter(fake_client, scheduler)

        adapter.start()
        adapter.start()
        await scheduler.run_pending()

        assert fake_client.list_streams.await_count == 1

    async def test_stop_cancels_polling(self, fake_client, scheduler):
        """Test no fetch happens after stop."""
        adapter = StreamCatalogAdapter(fake_client, scheduler)
        adapter.start()
        await scheduler.run_pending()

        adapter.stop()
        await scheduler.advance(120)

        assert fake_client.list_streams.await_count == 1
        assert adapter.polling is False
