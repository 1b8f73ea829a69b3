"""
Local session persistence.

A single durable record holds `{email, name, isPremium, premiumUntil}`. It is
read at startup and written after login/upgrade. A value that fails to parse is
discarded and the viewer falls back to an anonymous session.
"""

from abc import ABC, abstractmethod
from pathlib import Path

import orjson
from loguru import logger
from pydantic import ValidationError

from livevip.schemas import EntitlementSnapshot
from livevip.utils.app_errors import StoredSessionCorruptError

USER_DATA_KEY = "userData"


def decode_snapshot(raw: bytes) -> EntitlementSnapshot:
    """Parse a persisted record.

    Raises:
        StoredSessionCorruptError: If the bytes are not a valid record
    """
    try:
        return EntitlementSnapshot.model_validate(orjson.loads(raw))
    except (orjson.JSONDecodeError, ValidationError) as e:
        raise StoredSessionCorruptError(f"Unreadable stored session: {e}") from e


def encode_snapshot(snapshot: EntitlementSnapshot) -> bytes:
    return orjson.dumps(snapshot.model_dump(mode="json"))


class SessionStore(ABC):
    """Persistence capability for the viewer's entitlement snapshot."""

    @abstractmethod
    def read_raw(self) -> bytes | None: ...

    @abstractmethod
    def write_raw(self, raw: bytes) -> None: ...

    @abstractmethod
    def clear(self) -> None: ...

    def load(self) -> EntitlementSnapshot | None:
        """Return the stored snapshot, or None when absent, unreadable or corrupt."""
        try:
            raw = self.read_raw()
        except OSError as e:
            logger.warning("Could not read stored session: {}", e)
            return None
        if raw is None:
            return None
        try:
            return decode_snapshot(raw)
        except StoredSessionCorruptError as e:
            logger.warning("Discarding stored session: {}", e.errmesg)
            self.clear()
            return None

    def save(self, snapshot: EntitlementSnapshot) -> None:
        self.write_raw(encode_snapshot(snapshot))


class MemorySessionStore(SessionStore):
    def __init__(self, initial: bytes | None = None):
        self._values: dict[str, bytes] = {}
        if initial is not None:
            self._values[USER_DATA_KEY] = initial

    def read_raw(self) -> bytes | None:
        return self._values.get(USER_DATA_KEY)

    def write_raw(self, raw: bytes) -> None:
        self._values[USER_DATA_KEY] = raw

    def clear(self) -> None:
        self._values.pop(USER_DATA_KEY, None)


class FileSessionStore(SessionStore):
    """Stores the record as a JSON file; writes go through a temp file + rename."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def read_raw(self) -> bytes | None:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return None

    def write_raw(self, raw: bytes) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_bytes(raw)
        tmp_path.replace(self.path)
        logger.debug("Session saved to {}", self.path)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
