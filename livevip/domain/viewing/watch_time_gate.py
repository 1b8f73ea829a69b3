"""Free-tier watch budget policy."""

from dataclasses import dataclass

FREE_TIER_BUDGET_SECONDS = 300


def format_clock(seconds: int) -> str:
    """Render seconds as `m:ss` (e.g. 300 -> "5:00", 1 -> "0:01")."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


@dataclass(frozen=True)
class WatchTimeGate:
    """Converts elapsed watch seconds into remaining budget and a gating decision.

    Premium viewers are never gated; `remaining()` is still defined for them
    but callers ignore it.
    """

    budget: int = FREE_TIER_BUDGET_SECONDS

    def remaining(self, watch_seconds: int) -> int:
        return max(0, self.budget - watch_seconds)

    def is_exhausted(self, watch_seconds: int, premium: bool) -> bool:
        return not premium and self.remaining(watch_seconds) == 0

    def remaining_label(self, watch_seconds: int) -> str:
        return format_clock(self.remaining(watch_seconds))
