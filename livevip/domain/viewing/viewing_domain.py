"""Viewing session runtime.

`ViewingSession` owns the reducer state and performs the effects the reducer
asks for: timers through the injected `Scheduler`, persistence through the
injected `SessionStore`, network calls through the catalog adapter and the
entitlement resolver. No operation lets an adapter failure escape; failures
surface as `catalog.error`, an unchanged entitlement, the playback fallback or
`notice`.
"""

import random
from collections.abc import Callable
from datetime import datetime

from loguru import logger

from livevip.app_config import AppEnvironConfig, get_app_environ_config
from livevip.schemas import CommentEvent, GateReason, StreamRecord, ViewingPhase
from livevip.services.live_api.live_api_client import LiveApiClient
from livevip.services.session_store import SessionStore
from livevip.shared.scheduler import Scheduler, TimerHandle
from livevip.shared.utils import utc_now
from livevip.utils.app_errors import PremiumRequiredError

from ._catalog import StreamCatalogAdapter
from ._entitlement import EntitlementResolver
from ._reducer import reduce
from .engagement import EngagementFeed
from .navigation import NavigationController, Point
from .playback import Display, MediaElement, PlaybackController
from .viewing_models import (
    CancelTimer,
    CatalogReplaced,
    Close,
    Command,
    DismissGate,
    Effect,
    EntitlementResolved,
    Login,
    MountStream,
    PersistEntitlement,
    PromptUpgrade,
    ResolveEntitlement,
    RestoreEntitlement,
    Select,
    StartTimer,
    Tick,
    TimerKey,
    UnmountStream,
    Upgrade,
    ViewingState,
)
from .watch_time_gate import WatchTimeGate

UPGRADE_NOTICES = {
    GateReason.VIP_ONLY: "This live is VIP-only. Upgrade to Premium to watch it.",
    GateReason.TIME_EXPIRED: "Your free viewing time is over. Upgrade to Premium to keep watching.",
}


class ViewingSession:
    def __init__(
        self,
        client: LiveApiClient,
        scheduler: Scheduler,
        store: SessionStore,
        *,
        media: MediaElement | None = None,
        display: Display | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utc_now,
        settings: AppEnvironConfig | None = None,
    ):
        settings = settings or get_app_environ_config()
        self.settings = settings
        self.scheduler = scheduler
        self.store = store
        self.rng = rng or random.Random()
        self.clock = clock

        self.gate = WatchTimeGate(settings.FREE_TIER_WATCH_SECONDS)
        self.catalog = StreamCatalogAdapter(
            client,
            scheduler,
            poll_seconds=settings.CATALOG_POLL_SECONDS,
            on_change=self._on_catalog_change,
        )
        self.resolver = EntitlementResolver(client)
        self.playback = PlaybackController(
            scheduler,
            media,
            display,
            initial_play_delay=settings.INITIAL_PLAY_DELAY_SECONDS,
            resume_delay=settings.PAUSE_RESUME_DELAY_SECONDS,
            controls_hide_after=settings.CONTROLS_AUTO_HIDE_SECONDS,
        )
        self.navigation = NavigationController(
            scheduler,
            on_select=self.select,
            guard_seconds=settings.NAVIGATION_GUARD_SECONDS,
            min_vertical=settings.SWIPE_MIN_VERTICAL_PX,
            max_horizontal=settings.SWIPE_MAX_HORIZONTAL_PX,
        )

        self.feed: EngagementFeed | None = None
        self.notice: str | None = None

        self._state = ViewingState()
        self._watch_clock: TimerHandle | None = None
        self._started = False

    # ==================== STATE ====================

    @property
    def state(self) -> ViewingState:
        return self._state

    @property
    def phase(self) -> ViewingPhase:
        return self._state.phase

    @property
    def current_stream(self) -> StreamRecord | None:
        return self._state.stream

    @property
    def gate_reason(self) -> GateReason | None:
        return self._state.gate_reason if self._state.phase == ViewingPhase.GATED else None

    @property
    def is_premium(self) -> bool:
        return self._state.premium

    @property
    def visible_streams(self) -> list[StreamRecord]:
        return self._state.visible_streams

    @property
    def hidden_vip_count(self) -> int:
        return self._state.hidden_vip_count

    @property
    def remaining_seconds(self) -> int:
        return self.gate.remaining(self._state.watch_seconds)

    @property
    def remaining_label(self) -> str:
        return self.gate.remaining_label(self._state.watch_seconds)

    @property
    def watch_clock_running(self) -> bool:
        return self._watch_clock is not None and self._watch_clock.active

    # ==================== LIFECYCLE ====================

    async def start(self) -> None:
        """Restore the stored viewer and begin catalog polling."""
        if self._started:
            return
        self._started = True

        snapshot = self.store.load()
        if snapshot is not None:
            logger.info("Restored session for {}", snapshot.email or "anonymous viewer")
            self.dispatch(RestoreEntitlement(snapshot))
        self.catalog.start()

    async def aclose(self) -> None:
        """Close the viewing session and stop every timer it owns."""
        self.close()
        self.catalog.stop()
        self.resolver.invalidate()
        self.navigation.reset()
        self.playback.unload()
        self._started = False
        logger.info("Viewing session closed")

    # ==================== COMMANDS ====================

    def dispatch(self, command: Command) -> ViewingState:
        previous = self._state
        self._state, effects = reduce(self._state, command, self.gate)
        for effect in effects:
            self._run_effect(effect)
        if self._state.phase != previous.phase:
            logger.info("Viewing {} -> {} ({})", previous.phase, self._state.phase, type(command).__name__)
            if self._state.phase != ViewingPhase.GATED:
                self.notice = None
        self.navigation.sync(self._state.visible_streams, self._state.navigation_index)
        return self._state

    def select(self, stream: StreamRecord) -> ViewingState:
        return self.dispatch(Select(stream))

    def tick(self) -> ViewingState:
        return self.dispatch(Tick())

    def close(self) -> ViewingState:
        state = self.dispatch(Close())
        self.navigation.cancel_transition()
        return state

    def upgrade(self) -> ViewingState:
        return self.dispatch(Upgrade())

    def dismiss_gate(self) -> ViewingState:
        return self.dispatch(DismissGate())

    def login(self, email: str) -> ViewingState:
        return self.dispatch(Login(email))

    def next(self) -> StreamRecord | None:
        return self.navigation.next()

    def prev(self) -> StreamRecord | None:
        return self.navigation.prev()

    def handle_gesture(self, start: Point, end: Point) -> StreamRecord | None:
        return self.navigation.handle_gesture(start, end)

    async def refresh_catalog(self) -> bool:
        """Manual retry of the catalog fetch."""
        return await self.catalog.refresh()

    # ==================== ENGAGEMENT ====================

    def like(self) -> bool:
        if self.feed is None:
            return False
        return self.feed.like()

    def submit_comment(self, text: str) -> CommentEvent | None:
        if self.feed is None:
            return None
        try:
            return self.feed.submit(text)
        except PremiumRequiredError as e:
            self.notice = e.errmesg
            logger.info("Comment rejected on {}: {}", self.feed.stream.id, e.errmesg)
            return None

    # ==================== EFFECTS ====================

    def _run_effect(self, effect: Effect) -> None:
        if isinstance(effect, StartTimer):
            self._start_timer(effect.key)
        elif isinstance(effect, CancelTimer):
            self._cancel_timer(effect.key)
        elif isinstance(effect, MountStream):
            self._mount(effect.stream)
        elif isinstance(effect, UnmountStream):
            self._unmount()
        elif isinstance(effect, PersistEntitlement):
            self._persist(effect)
        elif isinstance(effect, ResolveEntitlement):
            email = effect.email
            self.scheduler.spawn(
                lambda: self._resolve(email), name=f"{TimerKey.ENTITLEMENT_RESOLVE}:{email}"
            )
        elif isinstance(effect, PromptUpgrade):
            self.notice = UPGRADE_NOTICES[effect.reason]
            logger.info("Upgrade prompt: {}", effect.reason)
        else:
            raise TypeError(f"Unknown viewing effect: {effect!r}")

    def _start_timer(self, key: TimerKey) -> None:
        if key != TimerKey.WATCH_CLOCK:
            raise ValueError(f"Timer {key} is not owned by the viewing session")
        self._cancel_timer(key)
        self._watch_clock = self.scheduler.call_every(
            self.settings.WATCH_TICK_SECONDS, self.tick, name=str(TimerKey.WATCH_CLOCK)
        )

    def _cancel_timer(self, key: TimerKey) -> None:
        if key != TimerKey.WATCH_CLOCK:
            raise ValueError(f"Timer {key} is not owned by the viewing session")
        if self._watch_clock is not None:
            self._watch_clock.cancel()
            self._watch_clock = None

    def _mount(self, stream: StreamRecord) -> None:
        # The old feed's timer must be gone before the new one starts.
        self._unmount()
        self.feed = EngagementFeed(
            stream,
            self.scheduler,
            is_premium=lambda: self._state.premium,
            rng=self.rng,
            clock=self.clock,
            interval_range=(
                self.settings.SYNTHETIC_COMMENT_MIN_SECONDS,
                self.settings.SYNTHETIC_COMMENT_MAX_SECONDS,
            ),
            limit=self.settings.COMMENT_LOG_LIMIT,
        )
        self.feed.start()
        self.playback.load(stream)
        logger.info("Mounted stream {} ({})", stream.id, stream.title)

    def _unmount(self) -> None:
        if self.feed is not None:
            self.feed.stop()
            self.feed = None
        self.playback.unload()

    def _persist(self, effect: PersistEntitlement) -> None:
        try:
            self.store.save(effect.snapshot)
        except OSError as e:
            logger.error("Could not persist session for {}: {}", effect.snapshot.email, e)

    async def _resolve(self, email: str) -> None:
        snapshot = await self.resolver.resolve(email, self._state.entitlement)
        if snapshot is None:
            return
        if self._state.entitlement.email != email:
            logger.info("Ignoring entitlement for {}: viewer is now {}", email, self._state.entitlement.email)
            return
        self.dispatch(EntitlementResolved(snapshot))

    def _on_catalog_change(self, streams: list[StreamRecord]) -> None:
        self.dispatch(CatalogReplaced(tuple(streams)))
