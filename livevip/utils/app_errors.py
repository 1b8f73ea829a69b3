"""Application error types.

Every failure crossing an adapter boundary is expressed as an `AppError`
subclass so callers can convert it into a state flag instead of letting it
escape the viewing session.
"""

from enum import Enum


class AppErrorCode(str, Enum):
    E_INTERNAL_ERROR = "E_INTERNAL_ERROR"
    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_INVALID_TRANSITION = "E_INVALID_TRANSITION"
    E_UPSTREAM_ERROR = "E_UPSTREAM_ERROR"
    E_UPSTREAM_UNAVAILABLE = "E_UPSTREAM_UNAVAILABLE"
    E_CATALOG_FETCH = "E_CATALOG_FETCH"
    E_ENTITLEMENT_FETCH = "E_ENTITLEMENT_FETCH"
    E_STORED_SESSION_CORRUPT = "E_STORED_SESSION_CORRUPT"
    E_MEDIA_PLAYBACK = "E_MEDIA_PLAYBACK"
    E_PREMIUM_REQUIRED = "E_PREMIUM_REQUIRED"

    def __str__(self) -> str:
        return self.value


class AppError(Exception):
    """Base application error carrying an error code and a readable message."""

    default_errcode: AppErrorCode = AppErrorCode.E_INTERNAL_ERROR

    def __init__(
        self,
        errmesg: str,
        errcode: AppErrorCode | None = None,
        *,
        status_code: int | None = None,
    ):
        super().__init__(errmesg)
        self.errcode = errcode or self.default_errcode
        self.errmesg = errmesg
        self.status_code = status_code

    def __str__(self) -> str:
        return f"{self.errcode}: {self.errmesg}"


class UpstreamError(AppError):
    """The live API answered with a non-2xx status or could not be reached."""

    default_errcode = AppErrorCode.E_UPSTREAM_ERROR


class CatalogFetchError(UpstreamError):
    default_errcode = AppErrorCode.E_CATALOG_FETCH


class EntitlementFetchError(UpstreamError):
    default_errcode = AppErrorCode.E_ENTITLEMENT_FETCH


class StoredSessionCorruptError(AppError):
    default_errcode = AppErrorCode.E_STORED_SESSION_CORRUPT


class MediaPlaybackError(AppError):
    default_errcode = AppErrorCode.E_MEDIA_PLAYBACK


class PremiumRequiredError(AppError):
    default_errcode = AppErrorCode.E_PREMIUM_REQUIRED


class InvalidTransitionError(AppError):
    default_errcode = AppErrorCode.E_INVALID_TRANSITION
