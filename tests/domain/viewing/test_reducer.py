"""Tests for the pure viewing reducer."""

import pytest

from livevip.domain.viewing._reducer import reduce
from livevip.domain.viewing.viewing_models import (
    CancelTimer,
    CatalogReplaced,
    Close,
    DismissGate,
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
from livevip.domain.viewing.watch_time_gate import WatchTimeGate
from livevip.schemas import EntitlementSnapshot, GateReason, ViewingPhase
from tests.fixtures.viewing_fixtures import make_stream

ALPHA = make_stream("alpha")
BETA = make_stream("beta", vip=True)
GAMMA = make_stream("gamma")

PREMIUM = EntitlementSnapshot(email="vip@example.com", name="vip", premium=True)
FREE = EntitlementSnapshot(email="free@example.com", name="free", premium=False)


def _state(**updates) -> ViewingState:
    return ViewingState(catalog=(ALPHA, BETA, GAMMA)).model_copy(update=updates)


def _run(state: ViewingState, *commands, gate: WatchTimeGate | None = None):
    effects = []
    for command in commands:
        state, step = reduce(state, command, gate or WatchTimeGate())
        effects.extend(step)
    return state, effects


class TestSelect:
    """Tests for stream selection."""

    def test_vip_stream_without_premium_gates(self):
        """Test selecting a VIP-only stream as anonymous viewer gates without mounting."""
        # Arrange
        state = ViewingState(catalog=(ALPHA, BETA))

        # Act
        new_state, effects = reduce(state, Select(BETA))

        # Assert
        assert state.visible_streams == [ALPHA]
        assert state.hidden_vip_count == 1
        assert new_state.phase == ViewingPhase.GATED
        assert new_state.gate_reason == GateReason.VIP_ONLY
        assert new_state.stream is None
        assert new_state.attempted_stream == BETA
        assert PromptUpgrade(GateReason.VIP_ONLY) in effects
        assert not any(isinstance(e, MountStream) for e in effects)

    def test_eligible_stream_mounts_and_starts_clock(self):
        """Test a free stream mounts and starts the watch clock for free viewers."""
        new_state, effects = reduce(_state(), Select(ALPHA))

        assert new_state.phase == ViewingPhase.VIEWING
        assert new_state.stream == ALPHA
        assert new_state.watch_seconds == 0
        assert effects == [
            CancelTimer(TimerKey.WATCH_CLOCK),
            MountStream(ALPHA),
            StartTimer(TimerKey.WATCH_CLOCK),
        ]

    def test_premium_viewer_mounts_vip_stream_without_clock(self):
        """Test premium viewers watch VIP streams and never start the clock."""
        new_state, effects = reduce(_state(entitlement=PREMIUM), Select(BETA))

        assert new_state.phase == ViewingPhase.VIEWING
        assert new_state.stream == BETA
        assert StartTimer(TimerKey.WATCH_CLOCK) not in effects

    def test_switching_stream_resets_watch_seconds(self):
        """Test each new selection starts a fresh budget."""
        state, _ = _run(_state(), Select(ALPHA), Tick(), Tick())
        assert state.watch_seconds == 2

        state, _ = _run(state, Select(GAMMA))

        assert state.stream == GAMMA
        assert state.watch_seconds == 0

    def test_vip_selection_while_viewing_keeps_current_stream(self):
        """Test a rejected VIP selection leaves the mounted stream in place."""
        state, _ = _run(_state(), Select(ALPHA))

        state, effects = _run(state, Select(BETA))

        assert state.phase == ViewingPhase.GATED
        assert state.stream == ALPHA
        assert UnmountStream() not in effects
        assert CancelTimer(TimerKey.WATCH_CLOCK) in effects

    def test_navigation_index_tracks_visible_list(self):
        """Test the navigation index points into the visible list only."""
        state, _ = _run(_state(), Select(GAMMA))

        # Visible for a free viewer: [ALPHA, GAMMA]
        assert state.navigation_index == 1


class TestTick:
    """Tests for the watch clock."""

    def test_budget_exhausts_after_300_ticks(self):
        """Test 300 ticks gate the viewer with TIME_EXPIRED exactly once."""
        # Arrange
        state, _ = _run(_state(), Select(ALPHA))

        # Act
        prompts = []
        for _ in range(300):
            state, effects = reduce(state, Tick())
            prompts += [e for e in effects if isinstance(e, PromptUpgrade)]

        # Assert
        assert state.phase == ViewingPhase.GATED
        assert state.gate_reason == GateReason.TIME_EXPIRED
        assert WatchTimeGate().remaining(state.watch_seconds) == 0
        assert prompts == [PromptUpgrade(GateReason.TIME_EXPIRED)]

    def test_tick_after_gating_is_noop(self):
        """Test the 301st tick does not gate again."""
        state, _ = _run(_state(), Select(ALPHA), *[Tick()] * 300)

        new_state, effects = reduce(state, Tick())

        assert new_state == state
        assert effects == []

    def test_tick_ignored_for_premium(self):
        """Test premium viewers do not accumulate watch time."""
        state, _ = _run(_state(entitlement=PREMIUM), Select(ALPHA), Tick(), Tick())

        assert state.watch_seconds == 0

    def test_tick_ignored_when_idle(self):
        """Test a stray tick while idle changes nothing."""
        state, effects = reduce(_state(), Tick())

        assert state.phase == ViewingPhase.IDLE
        assert effects == []

    def test_custom_gate_budget(self):
        """Test the reducer honors the injected gate budget."""
        state, _ = _run(_state(), Select(ALPHA), Tick(), Tick(), gate=WatchTimeGate(budget=2))

        assert state.phase == ViewingPhase.GATED
        assert state.gate_reason == GateReason.TIME_EXPIRED


class TestUpgrade:
    """Tests for upgrading to premium."""

    def test_upgrade_from_time_expired_resumes_viewing(self):
        """Test upgrade while TIME_EXPIRED resumes with the clock reset."""
        state, _ = _run(_state(), Select(ALPHA), *[Tick()] * 300)

        state, effects = reduce(state, Upgrade())

        assert state.phase == ViewingPhase.VIEWING
        assert state.watch_seconds == 0
        assert state.premium is True
        assert state.stream == ALPHA
        assert StartTimer(TimerKey.WATCH_CLOCK) not in effects

    def test_upgrade_from_vip_gate_mounts_attempted_stream(self):
        """Test upgrade while VIP-gated plays the stream that was refused."""
        state, _ = _run(_state(), Select(BETA))

        state, effects = reduce(state, Upgrade())

        assert state.phase == ViewingPhase.VIEWING
        assert state.stream == BETA
        assert state.attempted_stream is None
        assert MountStream(BETA) in effects

    def test_upgrade_while_viewing_stops_clock(self):
        """Test upgrading mid-stream cancels the clock and keeps the stream."""
        state, _ = _run(_state(), Select(ALPHA), Tick())

        state, effects = reduce(state, Upgrade())

        assert state.phase == ViewingPhase.VIEWING
        assert state.watch_seconds == 0
        assert effects[0] == CancelTimer(TimerKey.WATCH_CLOCK)

    def test_upgrade_persists_and_reconciles_known_viewer(self):
        """Test a logged-in upgrade is persisted and re-checked upstream."""
        state, effects = reduce(_state(entitlement=FREE), Upgrade())

        assert PersistEntitlement(state.entitlement) in effects
        assert ResolveEntitlement(FREE.email) in effects

    def test_anonymous_upgrade_persisted_without_reconcile(self):
        """Test an anonymous upgrade is stored but there is no email to re-check."""
        state, effects = reduce(_state(), Upgrade())

        assert PersistEntitlement(state.entitlement) in effects
        assert not any(isinstance(e, ResolveEntitlement) for e in effects)


class TestDismissGate:
    """Tests for dismissing the upgrade prompt."""

    def test_dismiss_vip_gate_from_idle_returns_to_idle(self):
        """Test dismissing a VIP prompt with nothing mounted returns to IDLE."""
        state, _ = _run(_state(), Select(BETA), DismissGate())

        assert state.phase == ViewingPhase.IDLE
        assert state.attempted_stream is None

    def test_dismiss_vip_gate_resumes_current_stream(self):
        """Test dismissing a VIP prompt over a playing stream resumes it and its clock."""
        state, _ = _run(_state(), Select(ALPHA), Tick(), Select(BETA))

        state, effects = reduce(state, DismissGate())

        assert state.phase == ViewingPhase.VIEWING
        assert state.stream == ALPHA
        assert state.watch_seconds == 1
        assert effects == [StartTimer(TimerKey.WATCH_CLOCK)]

    def test_time_expired_gate_cannot_be_dismissed(self):
        """Test an exhausted budget stays gated when dismissed."""
        state, _ = _run(_state(), Select(ALPHA), *[Tick()] * 300)

        new_state, effects = reduce(state, DismissGate())

        assert new_state.phase == ViewingPhase.GATED
        assert effects == []

    def test_vip_refusal_after_expiry_keeps_time_gate(self):
        """Test refusing a VIP stream over an exhausted budget cannot reopen the free stream."""
        state, _ = _run(_state(), Select(ALPHA), *[Tick()] * 300)

        state, effects = reduce(state, Select(BETA))

        assert state.phase == ViewingPhase.GATED
        assert state.gate_reason == GateReason.TIME_EXPIRED
        assert state.attempted_stream == BETA
        assert effects == [PromptUpgrade(GateReason.VIP_ONLY)]

        state, effects = reduce(state, DismissGate())

        assert state.phase == ViewingPhase.GATED
        assert state.gate_reason == GateReason.TIME_EXPIRED
        assert state.watch_seconds == 300
        assert not any(isinstance(e, StartTimer) for e in effects)

    def test_upgrade_after_vip_refusal_over_expiry_mounts_vip_stream(self):
        """Test upgrading after the refused VIP pick plays that stream."""
        state, _ = _run(_state(), Select(ALPHA), *[Tick()] * 300, Select(BETA))

        state, effects = reduce(state, Upgrade())

        assert state.phase == ViewingPhase.VIEWING
        assert state.stream == BETA
        assert state.gate_reason is None
        assert state.watch_seconds == 0
        assert MountStream(BETA) in effects


class TestClose:
    """Tests for closing the viewer."""

    def test_close_unmounts_and_stops_clock(self):
        """Test close returns to IDLE, unmounts and cancels the clock."""
        state, _ = _run(_state(), Select(ALPHA), Tick())

        state, effects = reduce(state, Close())

        assert state.phase == ViewingPhase.IDLE
        assert state.stream is None
        assert state.watch_seconds == 0
        assert state.navigation_index is None
        assert effects == [CancelTimer(TimerKey.WATCH_CLOCK), UnmountStream()]

    def test_close_when_idle_is_noop(self):
        """Test closing twice is harmless."""
        state, effects = reduce(_state(), Close())

        assert state.phase == ViewingPhase.IDLE
        assert effects == []

    def test_close_from_gate(self):
        """Test the gated viewer can always close."""
        state, _ = _run(_state(), Select(ALPHA), *[Tick()] * 300, Close())

        assert state.phase == ViewingPhase.IDLE
        assert state.gate_reason is None

    def test_select_from_time_expired_starts_fresh_budget(self):
        """Test picking another stream after expiry restarts the clock."""
        state, _ = _run(_state(), Select(ALPHA), *[Tick()] * 300)

        state, effects = reduce(state, Select(GAMMA))

        assert state.phase == ViewingPhase.VIEWING
        assert state.watch_seconds == 0
        assert StartTimer(TimerKey.WATCH_CLOCK) in effects


class TestEntitlement:
    """Tests for login, restore and resolved entitlement."""

    def test_login_persists_and_resolves(self):
        """Test quick login names the viewer after the email and asks upstream."""
        state, effects = reduce(_state(), Login("jane@example.com"))

        assert state.entitlement.email == "jane@example.com"
        assert state.entitlement.name == "jane"
        assert state.premium is False
        assert PersistEntitlement(state.entitlement) in effects
        assert ResolveEntitlement("jane@example.com") in effects

    def test_blank_login_ignored(self):
        """Test an empty email does nothing."""
        state, effects = reduce(_state(), Login("   "))

        assert state.entitlement.is_anonymous
        assert effects == []

    def test_login_same_email_keeps_snapshot(self):
        """Test logging in again keeps the premium status already known."""
        state, _ = reduce(_state(entitlement=PREMIUM), Login(PREMIUM.email))

        assert state.entitlement == PREMIUM

    def test_restore_premium_reveals_vip_streams(self):
        """Test restoring a premium viewer exposes VIP streams."""
        state, effects = reduce(_state(), RestoreEntitlement(PREMIUM))

        assert state.visible_streams == [ALPHA, BETA, GAMMA]
        assert state.hidden_vip_count == 0
        assert ResolveEntitlement(PREMIUM.email) in effects

    def test_resolved_premium_lifts_time_gate(self):
        """Test a premium resolution while gated resumes viewing."""
        state, _ = _run(_state(entitlement=FREE), Select(ALPHA), *[Tick()] * 300)

        state, effects = reduce(
            state, EntitlementResolved(FREE.model_copy(update={"premium": True}))
        )

        assert state.phase == ViewingPhase.VIEWING
        assert state.watch_seconds == 0
        assert any(isinstance(e, PersistEntitlement) for e in effects)

    def test_identical_resolution_is_noop(self):
        """Test an unchanged snapshot produces no effects."""
        state = _state(entitlement=FREE)

        new_state, effects = reduce(state, EntitlementResolved(FREE))

        assert new_state is state
        assert effects == []

    def test_revoked_premium_on_vip_stream_gates(self):
        """Test losing premium while a VIP-only stream plays unmounts it and gates."""
        state, _ = _run(_state(entitlement=PREMIUM), Select(BETA))

        state, effects = reduce(
            state, EntitlementResolved(PREMIUM.model_copy(update={"premium": False}))
        )

        assert state.phase == ViewingPhase.GATED
        assert state.gate_reason == GateReason.VIP_ONLY
        assert state.stream is None
        assert state.attempted_stream == BETA
        assert UnmountStream() in effects

    def test_revoked_premium_on_free_stream_starts_clock(self):
        """Test losing premium on a free stream starts the budget."""
        state, _ = _run(_state(entitlement=PREMIUM), Select(ALPHA))

        state, effects = reduce(
            state, EntitlementResolved(PREMIUM.model_copy(update={"premium": False}))
        )

        assert state.phase == ViewingPhase.VIEWING
        assert StartTimer(TimerKey.WATCH_CLOCK) in effects


class TestCatalogReplaced:
    """Tests for catalog replacement."""

    def test_replacement_recomputes_index(self):
        """Test the index follows the current stream in the new list."""
        state, _ = _run(_state(), Select(GAMMA))

        state, _ = reduce(state, CatalogReplaced((GAMMA, ALPHA)))

        assert state.navigation_index == 0

    def test_missing_current_stream_falls_back_to_first(self):
        """Test a current stream dropped from the catalog keeps playing at index 0."""
        state, _ = _run(_state(), Select(GAMMA))

        state, _ = reduce(state, CatalogReplaced((ALPHA,)))

        assert state.stream == GAMMA
        assert state.navigation_index == 0


class TestUnknownCommand:
    def test_unknown_command_raises(self):
        with pytest.raises(TypeError):
            reduce(_state(), object())  # type: ignore[arg-type]
