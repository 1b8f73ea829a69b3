"""Pure viewing-session reducer: `(state, command) -> (state', effects)`."""

from collections.abc import Callable
from typing import Any

from livevip.schemas import EntitlementSnapshot, GateReason, ViewingPhase
from livevip.utils.app_errors import InvalidTransitionError

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
from .viewing_state_machine import ViewingStateMachine
from .watch_time_gate import WatchTimeGate

Result = tuple[ViewingState, list[Effect]]

_DEFAULT_GATE = WatchTimeGate()


def _navigation_index(state: ViewingState) -> int | None:
    if state.phase == ViewingPhase.IDLE or state.stream is None:
        return None
    visible = state.visible_streams
    if not visible:
        return None
    for index, stream in enumerate(visible):
        if stream.id == state.stream.id:
            return index
    return 0


def _with(state: ViewingState, **updates: Any) -> ViewingState:
    """Copy with updates, keeping the navigation index consistent."""
    updated = state.model_copy(update=updates)
    return updated.model_copy(update={"navigation_index": _navigation_index(updated)})


def _transition(state: ViewingState, phase: ViewingPhase, **updates: Any) -> ViewingState:
    if not ViewingStateMachine.can_transition(state.phase, phase):
        raise InvalidTransitionError(f"Invalid viewing transition: {state.phase} -> {phase}")
    return _with(state, phase=phase, **updates)


def _lift_gate(state: ViewingState, effects: list[Effect], **updates: Any) -> ViewingState:
    """Leave GATED once the viewer is premium."""
    updates.update(gate_reason=None, attempted_stream=None, watch_seconds=0)
    if state.attempted_stream is not None:
        target = state.attempted_stream
        effects.append(MountStream(target))
        return _transition(state, ViewingPhase.VIEWING, stream=target, **updates)
    if state.stream is not None:
        return _transition(state, ViewingPhase.VIEWING, **updates)
    return _transition(state, ViewingPhase.IDLE, **updates)


def _apply_entitlement(state: ViewingState, snapshot: EntitlementSnapshot) -> Result:
    was_premium = state.premium
    effects: list[Effect] = []

    if snapshot.premium:
        if state.phase == ViewingPhase.GATED:
            effects.append(CancelTimer(TimerKey.WATCH_CLOCK))
            return _lift_gate(state, effects, entitlement=snapshot), effects
        if state.phase == ViewingPhase.VIEWING and not was_premium:
            effects.append(CancelTimer(TimerKey.WATCH_CLOCK))
            return _with(state, entitlement=snapshot, watch_seconds=0), effects
        return _with(state, entitlement=snapshot), effects

    current = state.stream
    if current is not None and current.is_vip_only:
        # Revoked while a VIP-only stream is mounted: it may no longer play.
        effects += [
            CancelTimer(TimerKey.WATCH_CLOCK),
            UnmountStream(),
            PromptUpgrade(GateReason.VIP_ONLY),
        ]
        new_state = _transition(
            state,
            ViewingPhase.GATED,
            entitlement=snapshot,
            stream=None,
            attempted_stream=current,
            gate_reason=GateReason.VIP_ONLY,
            watch_seconds=0,
        )
        return new_state, effects

    if state.phase == ViewingPhase.VIEWING and was_premium:
        effects.append(StartTimer(TimerKey.WATCH_CLOCK))
    return _with(state, entitlement=snapshot), effects


# ==================== HANDLERS ====================


def _select(state: ViewingState, command: Select, gate: WatchTimeGate) -> Result:
    stream = command.stream
    if stream.is_vip_only and not state.premium:
        if state.phase == ViewingPhase.GATED and state.gate_reason == GateReason.TIME_EXPIRED:
            # An exhausted budget stays the gate reason; only the refused stream is recorded.
            new_state = _with(state, attempted_stream=stream)
            return new_state, [PromptUpgrade(GateReason.VIP_ONLY)]
        new_state = _transition(
            state,
            ViewingPhase.GATED,
            attempted_stream=stream,
            gate_reason=GateReason.VIP_ONLY,
        )
        return new_state, [CancelTimer(TimerKey.WATCH_CLOCK), PromptUpgrade(GateReason.VIP_ONLY)]

    new_state = _transition(
        state,
        ViewingPhase.VIEWING,
        stream=stream,
        attempted_stream=None,
        gate_reason=None,
        watch_seconds=0,
    )
    effects: list[Effect] = [CancelTimer(TimerKey.WATCH_CLOCK), MountStream(stream)]
    if not state.premium:
        effects.append(StartTimer(TimerKey.WATCH_CLOCK))
    return new_state, effects


def _tick(state: ViewingState, command: Tick, gate: WatchTimeGate) -> Result:
    if state.phase != ViewingPhase.VIEWING or state.premium:
        return state, []

    watch_seconds = state.watch_seconds + 1
    if gate.is_exhausted(watch_seconds, state.premium):
        new_state = _transition(
            state,
            ViewingPhase.GATED,
            watch_seconds=watch_seconds,
            gate_reason=GateReason.TIME_EXPIRED,
            attempted_stream=None,
        )
        return new_state, [CancelTimer(TimerKey.WATCH_CLOCK), PromptUpgrade(GateReason.TIME_EXPIRED)]

    return state.model_copy(update={"watch_seconds": watch_seconds}), []


def _close(state: ViewingState, command: Close, gate: WatchTimeGate) -> Result:
    if state.phase == ViewingPhase.IDLE:
        return state, []

    effects: list[Effect] = [CancelTimer(TimerKey.WATCH_CLOCK)]
    if state.stream is not None:
        effects.append(UnmountStream())
    new_state = _transition(
        state,
        ViewingPhase.IDLE,
        stream=None,
        attempted_stream=None,
        gate_reason=None,
        watch_seconds=0,
    )
    return new_state, effects


def _upgrade(state: ViewingState, command: Upgrade, gate: WatchTimeGate) -> Result:
    entitlement = state.entitlement.model_copy(update={"premium": True})
    effects: list[Effect] = [CancelTimer(TimerKey.WATCH_CLOCK), PersistEntitlement(entitlement)]
    if not entitlement.is_anonymous:
        effects.append(ResolveEntitlement(entitlement.email))

    if state.phase == ViewingPhase.GATED:
        return _lift_gate(state, effects, entitlement=entitlement), effects

    new_state = _with(
        state,
        entitlement=entitlement,
        watch_seconds=0,
        gate_reason=None,
        attempted_stream=None,
    )
    return new_state, effects


def _dismiss_gate(state: ViewingState, command: DismissGate, gate: WatchTimeGate) -> Result:
    # Only the VIP-only prompt can be dismissed; an exhausted budget stays gated.
    if state.phase != ViewingPhase.GATED or state.gate_reason != GateReason.VIP_ONLY:
        return state, []

    if state.stream is None:
        return _transition(state, ViewingPhase.IDLE, attempted_stream=None, gate_reason=None), []
    if gate.is_exhausted(state.watch_seconds, state.premium):
        return state, []

    new_state = _transition(state, ViewingPhase.VIEWING, attempted_stream=None, gate_reason=None)
    effects: list[Effect] = []
    if not state.premium:
        effects.append(StartTimer(TimerKey.WATCH_CLOCK))
    return new_state, effects


def _login(state: ViewingState, command: Login, gate: WatchTimeGate) -> Result:
    email = command.email.strip()
    if not email:
        return state, []

    if state.entitlement.email == email:
        snapshot = state.entitlement
    else:
        snapshot = EntitlementSnapshot.for_login(email)
    new_state, effects = _apply_entitlement(state, snapshot)
    effects += [PersistEntitlement(snapshot), ResolveEntitlement(email)]
    return new_state, effects


def _restore(state: ViewingState, command: RestoreEntitlement, gate: WatchTimeGate) -> Result:
    new_state, effects = _apply_entitlement(state, command.snapshot)
    if command.snapshot.email:
        effects.append(ResolveEntitlement(command.snapshot.email))
    return new_state, effects


def _entitlement_resolved(
    state: ViewingState, command: EntitlementResolved, gate: WatchTimeGate
) -> Result:
    if command.snapshot == state.entitlement:
        return state, []
    new_state, effects = _apply_entitlement(state, command.snapshot)
    if not command.snapshot.is_anonymous:
        effects.append(PersistEntitlement(command.snapshot))
    return new_state, effects


def _catalog_replaced(state: ViewingState, command: CatalogReplaced, gate: WatchTimeGate) -> Result:
    return _with(state, catalog=tuple(command.streams)), []


_HANDLERS: dict[type, Callable[[ViewingState, Any, WatchTimeGate], Result]] = {
    Select: _select,
    Tick: _tick,
    Close: _close,
    Upgrade: _upgrade,
    DismissGate: _dismiss_gate,
    Login: _login,
    RestoreEntitlement: _restore,
    EntitlementResolved: _entitlement_resolved,
    CatalogReplaced: _catalog_replaced,
}


def reduce(state: ViewingState, command: Command, gate: WatchTimeGate = _DEFAULT_GATE) -> Result:
    """Apply one command to the viewing state.

    Raises:
        InvalidTransitionError: If a handler attempts a transition the state
            machine forbids
    """
    handler = _HANDLERS.get(type(command))
    if handler is None:
        raise TypeError(f"Unknown viewing command: {command!r}")
    return handler(state, command, gate)
