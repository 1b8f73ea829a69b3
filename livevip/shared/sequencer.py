class RequestSequencer:
    """Monotonic fencing tokens for overlapping requests.

    Each request takes a token when it is issued; when its response arrives the
    caller checks `is_current(token)` and drops the response if a newer request
    has been issued (or the sequence was invalidated) in the meantime.
    """

    def __init__(self, name: str = "request"):
        self.name = name
        self._latest = 0

    @property
    def latest(self) -> int:
        return self._latest

    def issue(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, token: int) -> bool:
        return token == self._latest

    def invalidate(self) -> None:
        """Make every outstanding token stale."""
        self._latest += 1
