"""Common enums used by the viewing session."""

from enum import Enum


class ViewingPhase(str, Enum):
    """Viewing session phases.

    IDLE → VIEWING → {VIEWING, GATED}
    GATED → VIEWING (upgrade / eligible selection) | IDLE (close)

    - IDLE: nothing selected. Initial phase, and the phase after close().
    - VIEWING: a stream is mounted and playing.
    - GATED: an upgrade prompt is active, either because a VIP-only stream was
      selected without premium or because the free-tier budget ran out.
      Playback of the mounted stream (if any) keeps running.
    """

    IDLE = "idle"
    VIEWING = "viewing"
    GATED = "gated"

    def __str__(self) -> str:
        return self.value


class GateReason(str, Enum):
    VIP_ONLY = "vip_only"
    TIME_EXPIRED = "time_expired"

    def __str__(self) -> str:
        return self.value


__all__ = ["ViewingPhase", "GateReason"]
