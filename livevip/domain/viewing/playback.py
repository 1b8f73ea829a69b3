"""
Playback control for the mounted stream.

Playback is treated as never-ending: media loops, starts on its own shortly
after mount, and resumes shortly after any external pause. There is no pause
control. On a load or playback error the controller falls back to the poster
image and does not retry; re-selecting the stream reloads it.
"""

from abc import ABC, abstractmethod
from enum import Enum

from loguru import logger

from livevip.schemas import StreamRecord
from livevip.shared.scheduler import Scheduler, TimerHandle
from livevip.utils.app_errors import MediaPlaybackError

from .viewing_models import TimerKey


class Presentation(str, Enum):
    NONE = "none"
    VIDEO = "video"
    FALLBACK = "fallback"

    def __str__(self) -> str:
        return self.value


class FallbackReason(str, Enum):
    NO_MEDIA = "no_media"
    MEDIA_ERROR = "media_error"

    def __str__(self) -> str:
        return self.value


class MediaElement(ABC):
    """Media surface driven by the controller.

    The surface reports back through `PlaybackController.on_loaded`,
    `on_error` and `on_pause`.
    """

    @abstractmethod
    def load(self, url: str, poster: str) -> None: ...

    @abstractmethod
    def unload(self) -> None: ...

    @abstractmethod
    async def play(self) -> None:
        """Start playback.

        Raises:
            MediaPlaybackError: If the surface refuses to play
        """

    @abstractmethod
    def set_loop(self, loop: bool) -> None: ...

    @abstractmethod
    def set_muted(self, muted: bool) -> None: ...

    @abstractmethod
    def set_volume(self, volume: float) -> None: ...

    @property
    @abstractmethod
    def ended(self) -> bool: ...


class Display(ABC):
    @property
    @abstractmethod
    def is_fullscreen(self) -> bool: ...

    @abstractmethod
    def enter_fullscreen(self) -> None: ...

    @abstractmethod
    def exit_fullscreen(self) -> None: ...


class HeadlessMediaElement(MediaElement):
    """Media surface with no output; records what it was asked to do."""

    def __init__(self):
        self.url: str | None = None
        self.poster: str | None = None
        self.loop = False
        self.muted = False
        self.volume = 1.0
        self.playing = False
        self.play_calls = 0
        self._ended = False

    def load(self, url: str, poster: str) -> None:
        self.url = url
        self.poster = poster
        self.playing = False
        self._ended = False

    def unload(self) -> None:
        self.url = None
        self.poster = None
        self.playing = False

    async def play(self) -> None:
        self.play_calls += 1
        if self.url is None:
            raise MediaPlaybackError("No media loaded")
        self.playing = True

    def pause(self) -> None:
        self.playing = False

    def set_loop(self, loop: bool) -> None:
        self.loop = loop

    def set_muted(self, muted: bool) -> None:
        self.muted = muted

    def set_volume(self, volume: float) -> None:
        self.volume = volume

    @property
    def ended(self) -> bool:
        return self._ended


class HeadlessDisplay(Display):
    def __init__(self):
        self._fullscreen = False

    @property
    def is_fullscreen(self) -> bool:
        return self._fullscreen

    def enter_fullscreen(self) -> None:
        self._fullscreen = True

    def exit_fullscreen(self) -> None:
        self._fullscreen = False


class PlaybackController:
    def __init__(
        self,
        scheduler: Scheduler,
        media: MediaElement | None = None,
        display: Display | None = None,
        *,
        initial_play_delay: float = 0.2,
        resume_delay: float = 0.1,
        controls_hide_after: float = 4.0,
    ):
        self.scheduler = scheduler
        self.media = media or HeadlessMediaElement()
        self.display = display or HeadlessDisplay()
        self.initial_play_delay = initial_play_delay
        self.resume_delay = resume_delay
        self.controls_hide_after = controls_hide_after

        self.stream: StreamRecord | None = None
        self.presentation = Presentation.NONE
        self.fallback_reason: FallbackReason | None = None
        self.error: str | None = None

        self.muted = False
        self.volume = 1.0
        self._last_audible_volume = 1.0
        self.controls_visible = False

        self._initial_play: TimerHandle | None = None
        self._resume: TimerHandle | None = None
        self._auto_hide: TimerHandle | None = None

    @property
    def fullscreen(self) -> bool:
        return self.display.is_fullscreen

    @property
    def showing_fallback(self) -> bool:
        return self.presentation == Presentation.FALLBACK

    # ==================== LIFECYCLE ====================

    def load(self, stream: StreamRecord) -> None:
        """Mount `stream`; a previous error is cleared."""
        self._cancel_playback_timers()
        self.stream = stream
        self.error = None

        if not stream.has_media:
            self.media.unload()
            self._show_fallback(FallbackReason.NO_MEDIA)
            logger.info("Stream {} has no media, showing poster", stream.id)
        else:
            self.presentation = Presentation.VIDEO
            self.fallback_reason = None
            self.media.set_loop(True)
            self.media.set_muted(self.muted)
            self.media.set_volume(self.volume)
            self.media.load(stream.video_url, poster=stream.thumbnail)
            self._initial_play = self.scheduler.call_later(
                self.initial_play_delay, self._play, name=f"{TimerKey.INITIAL_PLAY}:{stream.id}"
            )

        self.show_controls()

    def unload(self) -> None:
        self._cancel_playback_timers()
        if self._auto_hide is not None:
            self._auto_hide.cancel()
            self._auto_hide = None
        if self.stream is not None:
            self.media.unload()
        self.stream = None
        self.presentation = Presentation.NONE
        self.fallback_reason = None
        self.error = None
        self.controls_visible = False

    # ==================== MEDIA EVENTS ====================

    def on_loaded(self) -> None:
        if self.presentation != Presentation.VIDEO:
            return
        self.error = None
        if self._initial_play is not None:
            self._initial_play.cancel()
        self._initial_play = self.scheduler.spawn(self._play, name=f"{TimerKey.INITIAL_PLAY}:loaded")

    def on_error(self, error: BaseException | str) -> None:
        if self.presentation != Presentation.VIDEO:
            return
        self._cancel_playback_timers()
        self.error = str(error)
        self.media.unload()
        self._show_fallback(FallbackReason.MEDIA_ERROR)
        stream_id = self.stream.id if self.stream else None
        logger.warning("Media error on stream {}, showing poster: {}", stream_id, error)

    def on_pause(self) -> None:
        """External pause: resume shortly unless the media has ended."""
        if self.presentation != Presentation.VIDEO:
            return
        if self._resume is not None:
            self._resume.cancel()
        self._resume = self.scheduler.call_later(
            self.resume_delay, self._resume_if_running, name=str(TimerKey.PAUSE_RESUME)
        )

    async def _resume_if_running(self) -> None:
        if self.presentation == Presentation.VIDEO and not self.media.ended:
            await self._play()

    async def _play(self) -> None:
        if self.presentation != Presentation.VIDEO:
            return
        try:
            await self.media.play()
        except MediaPlaybackError as e:
            logger.info("Autoplay prevented: {}", e.errmesg)

    # ==================== CONTROLS ====================

    def toggle_mute(self) -> bool:
        if self.muted:
            self.muted = False
            if self.volume == 0:
                self.volume = self._last_audible_volume
        else:
            self.muted = True
        self._apply_audio()
        return self.muted

    def set_volume(self, volume: float) -> None:
        volume = min(1.0, max(0.0, float(volume)))
        self.volume = volume
        if volume == 0:
            self.muted = True
        else:
            self._last_audible_volume = volume
            self.muted = False
        self._apply_audio()

    def toggle_fullscreen(self) -> bool:
        if self.display.is_fullscreen:
            self.display.exit_fullscreen()
        else:
            self.display.enter_fullscreen()
        return self.display.is_fullscreen

    def show_controls(self) -> None:
        self.controls_visible = True
        if self._auto_hide is not None:
            self._auto_hide.cancel()
        self._auto_hide = self.scheduler.call_later(
            self.controls_hide_after, self._hide_controls, name=str(TimerKey.CONTROLS_AUTO_HIDE)
        )

    def _hide_controls(self) -> None:
        self.controls_visible = False
        self._auto_hide = None

    # ==================== INTERNALS ====================

    def _apply_audio(self) -> None:
        self.media.set_muted(self.muted)
        self.media.set_volume(self.volume)

    def _show_fallback(self, reason: FallbackReason) -> None:
        self.presentation = Presentation.FALLBACK
        self.fallback_reason = reason

    def _cancel_playback_timers(self) -> None:
        for handle in (self._initial_play, self._resume):
            if handle is not None:
                handle.cancel()
        self._initial_play = None
        self._resume = None
