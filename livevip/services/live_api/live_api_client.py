from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from livevip.schemas import StreamRecord
from livevip.services.live_api.live_api_schemas import (
    EntitlementCheckBody,
    EntitlementCheckResponse,
    LiveApiError,
    StreamCreateBody,
    StreamUpdateBody,
)
from livevip.utils.app_errors import (
    AppErrorCode,
    CatalogFetchError,
    EntitlementFetchError,
    UpstreamError,
)


class LiveApiClient:
    """Client for the external live API: stream catalog and entitlement checks."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def _build_headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.api_key:
            headers["X-Api-Key"] = self.api_key
        if extra:
            headers.update(extra)
        return headers

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            return LiveApiError.model_validate(response.json()).error
        except (ValueError, ValidationError):
            return f"HTTP {response.status_code}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        error_cls: type[UpstreamError] = UpstreamError,
        **kwargs: Any,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.request(method, url, headers=self._build_headers(), **kwargs)
        except httpx.HTTPError as e:
            logger.warning("Live API {} {} unreachable: {}", method, path, e)
            raise error_cls(
                f"Connection error: {e}",
                AppErrorCode.E_UPSTREAM_UNAVAILABLE,
            ) from e

        if response.is_error:
            message = self._error_message(response)
            logger.warning("Live API {} {} failed: {} {}", method, path, response.status_code, message)
            raise error_cls(message, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise error_cls(f"Invalid JSON from {path}", status_code=response.status_code) from e
        logger.debug("Live API {} {} response: {}", method, path, data)
        return data

    async def list_streams(self) -> list[StreamRecord]:
        """Fetch the full catalog, normalized into StreamRecords.

        Accepts both a bare list and the `{"streams": [...]}` envelope. Entries
        that cannot be normalized are dropped with a warning.
        """
        data = await self._request("GET", "/api/streams", error_cls=CatalogFetchError)
        if isinstance(data, dict):
            data = data.get("streams")
        if not isinstance(data, list):
            raise CatalogFetchError("Unexpected catalog payload")

        streams: list[StreamRecord] = []
        for raw in data:
            try:
                streams.append(StreamRecord.model_validate(raw))
            except ValidationError as e:
                logger.warning("Dropping malformed catalog entry {}: {}", raw, e.errors())
        return streams

    async def create_stream(self, body: StreamCreateBody) -> StreamRecord:
        data = await self._request(
            "POST",
            "/api/streams",
            json=body.model_dump(mode="json", exclude_none=True),
        )
        return StreamRecord.model_validate(data["stream"])

    async def update_stream(self, body: StreamUpdateBody) -> StreamRecord:
        data = await self._request(
            "PUT",
            "/api/streams",
            json=body.model_dump(mode="json", exclude_none=True),
        )
        return StreamRecord.model_validate(data["stream"])

    async def delete_stream(self, stream_id: str) -> None:
        await self._request("DELETE", "/api/streams", params={"id": stream_id})

    async def check_entitlement(self, email: str) -> EntitlementCheckResponse:
        data = await self._request(
            "POST",
            "/api/user/premium",
            error_cls=EntitlementFetchError,
            json=EntitlementCheckBody(email=email).model_dump(),
        )
        try:
            return EntitlementCheckResponse.model_validate(data)
        except ValidationError as e:
            raise EntitlementFetchError(f"Invalid entitlement payload: {e.errors()}") from e
