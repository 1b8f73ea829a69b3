"""Stream catalog adapter: polls the live API and keeps the last good list."""

from collections.abc import Callable
from typing import Any

from loguru import logger

from livevip.schemas import StreamRecord
from livevip.services.live_api.live_api_client import LiveApiClient
from livevip.shared.scheduler import Scheduler, TimerHandle
from livevip.shared.sequencer import RequestSequencer
from livevip.utils.app_errors import AppErrorCode, CatalogFetchError

from .viewing_models import TimerKey


class StreamCatalogAdapter:
    """Holds the in-memory catalog, replaced wholesale on each successful fetch.

    A failed fetch keeps the previous list and exposes a readable `error`;
    the next scheduled poll or a manual `refresh()` may clear it.
    """

    def __init__(
        self,
        client: LiveApiClient,
        scheduler: Scheduler,
        *,
        poll_seconds: float = 30.0,
        on_change: Callable[[list[StreamRecord]], Any] | None = None,
    ):
        self.client = client
        self.scheduler = scheduler
        self.poll_seconds = poll_seconds
        self.on_change = on_change

        self.streams: list[StreamRecord] = []
        self.error: str | None = None
        self.loading: bool = True
        self.last_refreshed_at: float | None = None

        self._sequencer = RequestSequencer("catalog")
        self._initial: TimerHandle | None = None
        self._poll: TimerHandle | None = None

    @property
    def polling(self) -> bool:
        return self._poll is not None and self._poll.active

    @staticmethod
    def _describe(error: CatalogFetchError) -> str:
        if error.errcode == AppErrorCode.E_UPSTREAM_UNAVAILABLE:
            return "Connection error"
        return f"Could not load streams: {error.errmesg}"

    async def refresh(self) -> bool:
        """Fetch the catalog once.

        Returns:
            True if the list was replaced, False on failure or when a newer
            refresh superseded this one
        """
        token = self._sequencer.issue()
        try:
            streams = await self.client.list_streams()
        except CatalogFetchError as e:
            if not self._sequencer.is_current(token):
                return False
            self.error = self._describe(e)
            self.loading = False
            logger.warning("Catalog refresh failed, keeping {} stream(s): {}", len(self.streams), e)
            return False

        if not self._sequencer.is_current(token):
            logger.debug("Discarding superseded catalog response (token {})", token)
            return False

        self.streams = streams
        self.error = None
        self.loading = False
        self.last_refreshed_at = self.scheduler.now()
        logger.info("Catalog refreshed: {} stream(s)", len(streams))
        if self.on_change is not None:
            self.on_change(streams)
        return True

    def start(self) -> None:
        """Refresh now, then every `poll_seconds`."""
        if self.polling:
            return
        self._initial = self.scheduler.spawn(self.refresh, name=f"{TimerKey.CATALOG_POLL}:initial")
        self._poll = self.scheduler.call_every(
            self.poll_seconds, self.refresh, name=str(TimerKey.CATALOG_POLL)
        )

    def stop(self) -> None:
        for handle in (self._initial, self._poll):
            if handle is not None:
                handle.cancel()
        self._initial = None
        self._poll = None
        self._sequencer.invalidate()
