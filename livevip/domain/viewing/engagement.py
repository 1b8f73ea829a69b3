"""
Per-stream engagement: synthetic + user comments and a single-use like.

A feed lives exactly as long as one stream mount. Synthetic comments fire on an
interval drawn once per mount; the log is trimmed to the newest `limit`
entries only when a synthetic comment is appended. User comments are appended
as-is and require premium.
"""

import random
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from loguru import logger

from livevip.domain.utils.idgen import new_comment_id
from livevip.schemas import CommentEvent, StreamRecord
from livevip.shared.scheduler import Scheduler, TimerHandle
from livevip.utils.app_errors import PremiumRequiredError

from .viewing_models import TimerKey

COMMENT_LOG_LIMIT = 20
SYNTHETIC_INTERVAL_RANGE = (3.0, 11.0)
INITIAL_LIKES_RANGE = (100, 599)

USER_AUTHOR = "You"
USER_AVATAR = "https://images.unsplash.com/photo-1535713875002-d1d0cf377fde?w=50&h=50&fit=crop&crop=face"
PREMIUM_COMMENT_NOTICE = "Upgrade to Premium to comment without limits!"


@dataclass(frozen=True)
class CannedComment:
    author: str
    message: str
    avatar: str


SYNTHETIC_POOL: tuple[CannedComment, ...] = (
    CannedComment(
        "João123",
        "What an amazing show! 🔥",
        "https://images.unsplash.com/photo-1507003211169-0a1dd7228f2d?w=50&h=50&fit=crop&crop=face",
    ),
    CannedComment(
        "Maria_VIP",
        "Best live of the week!",
        "https://images.unsplash.com/photo-1494790108755-2616b612b786?w=50&h=50&fit=crop&crop=face",
    ),
    CannedComment(
        "Pedro_Fan",
        "When is the next one?",
        "https://images.unsplash.com/photo-1472099645785-5658abf4ff4e?w=50&h=50&fit=crop&crop=face",
    ),
    CannedComment(
        "Ana_Live",
        "Truly premium content! 💎",
        "https://images.unsplash.com/photo-1438761681033-6461ffad8d80?w=50&h=50&fit=crop&crop=face",
    ),
    CannedComment(
        "Carlos_VIP",
        "Going premium is so worth it",
        "https://images.unsplash.com/photo-1500648767791-00dcc994a43e?w=50&h=50&fit=crop&crop=face",
    ),
)


class LikeCounter:
    def __init__(self, count: int):
        self.count = count
        self.has_liked = False

    @classmethod
    def seeded(cls, rng: random.Random) -> "LikeCounter":
        return cls(rng.randint(*INITIAL_LIKES_RANGE))

    def like(self) -> bool:
        """Count one like per mount; later calls are no-ops."""
        if self.has_liked:
            return False
        self.count += 1
        self.has_liked = True
        return True


class EngagementFeed:
    def __init__(
        self,
        stream: StreamRecord,
        scheduler: Scheduler,
        *,
        is_premium: Callable[[], bool],
        rng: random.Random,
        clock: Callable[[], datetime],
        interval_range: tuple[float, float] = SYNTHETIC_INTERVAL_RANGE,
        limit: int = COMMENT_LOG_LIMIT,
        pool: tuple[CannedComment, ...] = SYNTHETIC_POOL,
    ):
        if limit < 1:
            raise ValueError(f"comment log limit must be at least 1, got {limit}")
        self.stream = stream
        self.scheduler = scheduler
        self.is_premium = is_premium
        self.rng = rng
        self.clock = clock
        self.interval_range = interval_range
        self.limit = limit
        self.pool = pool

        self.comments: list[CommentEvent] = []
        self.likes = LikeCounter.seeded(rng)
        self.interval: float | None = None
        self._timer: TimerHandle | None = None

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.active

    def start(self) -> None:
        if self.active:
            return
        self.interval = self.rng.uniform(*self.interval_range)
        self._timer = self.scheduler.call_every(
            self.interval,
            self.add_synthetic_comment,
            name=f"{TimerKey.SYNTHETIC_COMMENT}:{self.stream.id}",
        )
        logger.debug("Feed for {} started, synthetic every {:.1f}s", self.stream.id, self.interval)

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def add_synthetic_comment(self) -> CommentEvent:
        canned = self.rng.choice(self.pool)
        comment = CommentEvent(
            id=new_comment_id(),
            author=canned.author,
            message=canned.message,
            timestamp=self.clock(),
            avatar=canned.avatar,
            synthetic=True,
        )
        self.comments.append(comment)
        del self.comments[: -self.limit]
        return comment

    def submit(self, text: str) -> CommentEvent | None:
        """Append a user comment.

        Returns:
            The new comment, or None for a blank message

        Raises:
            PremiumRequiredError: If the viewer is not premium
        """
        if not text.strip():
            return None
        if not self.is_premium():
            raise PremiumRequiredError(PREMIUM_COMMENT_NOTICE)

        comment = CommentEvent(
            id=new_comment_id(),
            author=USER_AUTHOR,
            message=text,
            timestamp=self.clock(),
            avatar=USER_AVATAR,
        )
        self.comments.append(comment)
        return comment

    def like(self) -> bool:
        return self.likes.like()
