"""Viewing session state, commands and effects.

The reducer consumes commands and produces a new `ViewingState` plus a list of
declarative effects; the runtime (`ViewingSession`) performs the effects.
"""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from livevip.schemas import (
    EntitlementSnapshot,
    GateReason,
    StreamRecord,
    ViewingPhase,
    hidden_vip_count,
    visible_streams,
)


class TimerKey(str, Enum):
    CATALOG_POLL = "catalog-poll"
    WATCH_CLOCK = "watch-clock"
    SYNTHETIC_COMMENT = "synthetic-comment"
    CONTROLS_AUTO_HIDE = "controls-auto-hide"
    PAUSE_RESUME = "pause-resume"
    INITIAL_PLAY = "initial-play"
    NAVIGATION_GUARD = "navigation-guard"
    ENTITLEMENT_RESOLVE = "entitlement-resolve"

    def __str__(self) -> str:
        return self.value


class ViewingState(BaseModel):
    phase: ViewingPhase = ViewingPhase.IDLE
    stream: StreamRecord | None = Field(default=None, description="Mounted stream")
    attempted_stream: StreamRecord | None = Field(
        default=None,
        description="VIP-only stream whose selection was rejected, kept for the upgrade prompt",
    )
    gate_reason: GateReason | None = None
    watch_seconds: int = Field(default=0, ge=0)
    navigation_index: int | None = None
    catalog: tuple[StreamRecord, ...] = ()
    entitlement: EntitlementSnapshot = Field(default_factory=EntitlementSnapshot.anonymous)

    model_config = ConfigDict(frozen=True)

    @property
    def premium(self) -> bool:
        return self.entitlement.premium

    @property
    def visible_streams(self) -> list[StreamRecord]:
        return visible_streams(list(self.catalog), self.premium)

    @property
    def hidden_vip_count(self) -> int:
        return hidden_vip_count(list(self.catalog), self.premium)


# ==================== COMMANDS ====================


@dataclass(frozen=True)
class Select:
    stream: StreamRecord


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class Close:
    pass


@dataclass(frozen=True)
class Upgrade:
    pass


@dataclass(frozen=True)
class DismissGate:
    pass


@dataclass(frozen=True)
class Login:
    email: str


@dataclass(frozen=True)
class RestoreEntitlement:
    snapshot: EntitlementSnapshot


@dataclass(frozen=True)
class EntitlementResolved:
    snapshot: EntitlementSnapshot


@dataclass(frozen=True)
class CatalogReplaced:
    streams: tuple[StreamRecord, ...]


Command = (
    Select
    | Tick
    | Close
    | Upgrade
    | DismissGate
    | Login
    | RestoreEntitlement
    | EntitlementResolved
    | CatalogReplaced
)


# ==================== EFFECTS ====================


@dataclass(frozen=True)
class StartTimer:
    key: TimerKey


@dataclass(frozen=True)
class CancelTimer:
    key: TimerKey


@dataclass(frozen=True)
class MountStream:
    stream: StreamRecord


@dataclass(frozen=True)
class UnmountStream:
    pass


@dataclass(frozen=True)
class PersistEntitlement:
    snapshot: EntitlementSnapshot


@dataclass(frozen=True)
class ResolveEntitlement:
    email: str


@dataclass(frozen=True)
class PromptUpgrade:
    reason: GateReason


Effect = (
    StartTimer
    | CancelTimer
    | MountStream
    | UnmountStream
    | PersistEntitlement
    | ResolveEntitlement
    | PromptUpgrade
)
