from pydantic import BaseModel, Field

from livevip.shared.config import config


def _float(key: str, default: float) -> float:
    return float((config.get(key) or "").strip() or default)


def _int(key: str, default: int) -> int:
    return int((config.get(key) or "").strip() or default)


class AppEnvironConfig(BaseModel):
    DEBUG: bool = config.get("DEBUG", "false").strip().lower() == "true"  # type: ignore

    # Live API (catalog + entitlement)
    LIVE_API_BASE_URL: str = config.get("LIVE_API_BASE_URL", "http://localhost:3000").strip()  # type: ignore
    LIVE_API_KEY: str | None = (config.get("LIVE_API_KEY") or "").strip() or None
    LIVE_API_TIMEOUT_SECONDS: float = _float("LIVE_API_TIMEOUT_SECONDS", 10.0)

    # Catalog polling
    CATALOG_POLL_SECONDS: float = _float("CATALOG_POLL_SECONDS", 30.0)

    # Free tier
    FREE_TIER_WATCH_SECONDS: int = _int("FREE_TIER_WATCH_SECONDS", 300)
    WATCH_TICK_SECONDS: float = _float("WATCH_TICK_SECONDS", 1.0)

    # Engagement feed
    SYNTHETIC_COMMENT_MIN_SECONDS: float = _float("SYNTHETIC_COMMENT_MIN_SECONDS", 3.0)
    SYNTHETIC_COMMENT_MAX_SECONDS: float = _float("SYNTHETIC_COMMENT_MAX_SECONDS", 11.0)
    COMMENT_LOG_LIMIT: int = Field(default=_int("COMMENT_LOG_LIMIT", 20), ge=1, validate_default=True)

    # Playback
    CONTROLS_AUTO_HIDE_SECONDS: float = _float("CONTROLS_AUTO_HIDE_SECONDS", 4.0)
    PAUSE_RESUME_DELAY_SECONDS: float = _float("PAUSE_RESUME_DELAY_SECONDS", 0.1)
    INITIAL_PLAY_DELAY_SECONDS: float = _float("INITIAL_PLAY_DELAY_SECONDS", 0.2)

    # Navigation
    NAVIGATION_GUARD_SECONDS: float = _float("NAVIGATION_GUARD_SECONDS", 0.3)
    SWIPE_MIN_VERTICAL_PX: float = _float("SWIPE_MIN_VERTICAL_PX", 50)
    SWIPE_MAX_HORIZONTAL_PX: float = _float("SWIPE_MAX_HORIZONTAL_PX", 100)

    # Local session persistence
    SESSION_STORE_PATH: str = config.get("SESSION_STORE_PATH", ".livevip/user_data.json").strip()  # type: ignore

    # Headless runner
    VIEWER_EMAIL: str | None = (config.get("VIEWER_EMAIL") or "").strip() or None
    DEMO_RUN_SECONDS: float = _float("DEMO_RUN_SECONDS", 60.0)


_app_environ_config = AppEnvironConfig()


def get_app_environ_config() -> AppEnvironConfig:
    return _app_environ_config
