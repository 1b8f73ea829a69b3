"""Entitlement resolution against the live API."""

from loguru import logger

from livevip.schemas import EntitlementSnapshot
from livevip.services.live_api.live_api_client import LiveApiClient
from livevip.shared.sequencer import RequestSequencer
from livevip.utils.app_errors import EntitlementFetchError


class EntitlementResolver:
    """Resolves premium status for an email.

    A failed check never downgrades: the previous snapshot is returned as-is.
    Responses are fenced with a sequence token so the most recently *issued*
    request wins; superseded responses resolve to None.
    """

    def __init__(self, client: LiveApiClient):
        self.client = client
        self.last_error: str | None = None
        self._sequencer = RequestSequencer("entitlement")

    async def resolve(
        self, email: str, previous: EntitlementSnapshot
    ) -> EntitlementSnapshot | None:
        token = self._sequencer.issue()
        try:
            response = await self.client.check_entitlement(email)
        except EntitlementFetchError as e:
            if not self._sequencer.is_current(token):
                return None
            self.last_error = e.errmesg
            logger.warning("Entitlement check failed for {}, keeping previous snapshot: {}", email, e)
            return previous

        if not self._sequencer.is_current(token):
            logger.info(
                "Discarding stale entitlement response for {} (token {}, latest {})",
                email,
                token,
                self._sequencer.latest,
            )
            return None

        self.last_error = None
        name = response.user.name if response.user else None
        if not name:
            name = previous.name if previous.email == email else None
        snapshot = EntitlementSnapshot(
            email=email,
            name=name or email.split("@")[0],
            premium=response.is_premium,
            premium_until=response.premium_until,
        )
        logger.info("Entitlement resolved for {}: premium={}", email, snapshot.premium)
        return snapshot

    def invalidate(self) -> None:
        """Drop any in-flight resolution."""
        self._sequencer.invalidate()
