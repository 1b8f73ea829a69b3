"""
Mock implementation of the live API consumed by the viewing session.

This FastAPI app exposes the catalog and entitlement routes so the viewer can
run locally without the real service:

* GET    /api/streams          - catalog, newest first
* POST   /api/streams          - create (title, thumbnail, streamerName required)
* PUT    /api/streams          - partial update by id
* DELETE /api/streams?id=...   - delete
* POST   /api/user/premium     - entitlement check for an email

Run with granian:
    granian --interface ASGI --host 127.0.0.1 --port 3000 tools.mock_live_api:app

Then point LIVE_API_BASE_URL to http://127.0.0.1:3000 (e.g. in env.local).
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from livevip.domain.utils.idgen import new_stream_id
from livevip.schemas import StreamRecord
from livevip.schemas.stream import DEFAULT_CATEGORY, DEFAULT_STREAMER_AVATAR
from livevip.services.live_api.live_api_schemas import (
    EntitlementCheckBody,
    StreamCreateBody,
    StreamUpdateBody,
)

SAMPLE_PREMIUM_EMAIL = "premium@example.com"

SAMPLE_STREAMS = [
    {
        "title": "Exclusive Live - Intimate Chat",
        "thumbnail": "https://images.unsplash.com/photo-1516280440614-37939bbacd81?w=500&h=300&fit=crop",
        "videoUrl": "",
        "streamerName": "Ana Premium",
        "streamerAvatar": "https://images.unsplash.com/photo-1494790108755-2616b612b786?w=100&h=100&fit=crop&crop=face",
        "category": "Lifestyle",
        "viewerCount": 150,
        "isVipOnly": True,
    },
    {
        "title": "Live Music - Exclusive Covers",
        "thumbnail": "https://images.unsplash.com/photo-1493225457124-a3eb161ffa5f?w=500&h=300&fit=crop",
        "videoUrl": "",
        "streamerName": "Lucas Music",
        "streamerAvatar": "https://images.unsplash.com/photo-1507003211169-0a1dd7228f2d?w=100&h=100&fit=crop&crop=face",
        "category": "Music",
        "viewerCount": 89,
        "isVipOnly": False,
    },
    {
        "title": "Premium Workout - Advanced Functional",
        "thumbnail": "https://images.unsplash.com/photo-1571019613454-1cb2f99b2d8b?w=500&h=300&fit=crop",
        "videoUrl": "",
        "streamerName": "Carla Fit",
        "streamerAvatar": "https://images.unsplash.com/photo-1438761681033-6461ffad8d80?w=100&h=100&fit=crop&crop=face",
        "category": "Fitness",
        "viewerCount": 234,
        "isVipOnly": True,
    },
    {
        "title": "Gaming Session - Commented Gameplay",
        "thumbnail": "https://images.unsplash.com/photo-1542751371-adc38448a05e?w=500&h=300&fit=crop",
        "videoUrl": "",
        "streamerName": "Pedro Games",
        "streamerAvatar": "https://images.unsplash.com/photo-1472099645785-5658abf4ff4e?w=100&h=100&fit=crop&crop=face",
        "category": "Games",
        "viewerCount": 67,
        "isVipOnly": False,
    },
]


@dataclass
class MockUser:
    email: str
    name: str
    premium_until: datetime | None = None

    def is_premium(self, now: datetime) -> bool:
        return self.premium_until is not None and self.premium_until > now


@dataclass
class MockLiveStore:
    """In-memory catalog and user records."""

    streams: dict[str, dict] = field(default_factory=dict)
    users: dict[str, MockUser] = field(default_factory=dict)
    rng: random.Random = field(default_factory=random.Random)

    def list_streams(self) -> list[dict]:
        # Newest first.
        return list(reversed(self.streams.values()))

    def create_stream(self, body: StreamCreateBody) -> dict:
        record = StreamRecord(
            id=new_stream_id(),
            title=body.title,
            thumbnail=body.thumbnail,
            video_url=body.video_url or "",
            streamer_name=body.streamer_name,
            streamer_avatar=body.streamer_avatar or DEFAULT_STREAMER_AVATAR,
            category=body.category or DEFAULT_CATEGORY,
            viewer_count=body.viewer_count or self.rng.randint(50, 249),
            is_vip_only=bool(body.is_vip_only),
            is_live=True,
        )
        data = record.model_dump(mode="json")
        self.streams[record.id] = data
        return data

    def update_stream(self, body: StreamUpdateBody) -> dict | None:
        current = self.streams.get(body.id)
        if current is None:
            return None
        changes = body.model_dump(mode="json", exclude_none=True, exclude={"id"})
        updated = StreamRecord.model_validate({**current, **changes}).model_dump(mode="json")
        self.streams[body.id] = updated
        return updated

    def delete_stream(self, stream_id: str) -> bool:
        return self.streams.pop(stream_id, None) is not None

    def seed(self) -> None:
        for raw in SAMPLE_STREAMS:
            self.create_stream(StreamCreateBody.model_validate(raw))
        self.users[SAMPLE_PREMIUM_EMAIL] = MockUser(
            email=SAMPLE_PREMIUM_EMAIL,
            name="Premium Tester",
            premium_until=datetime.now(timezone.utc) + timedelta(days=30),
        )


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(store: MockLiveStore | None = None, *, seed: bool = True) -> FastAPI:
    if store is None:
        store = MockLiveStore()
        if seed:
            store.seed()

    app = FastAPI(title="live-api mock", version="0.1.0")
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health():
        """Health check endpoint for container orchestration."""
        return {"status": "ok", "service": "mock-live-api"}

    @app.get("/api/streams")
    async def list_streams():
        return {"streams": store.list_streams()}

    @app.post("/api/streams")
    async def create_stream(request: Request):
        try:
            body = StreamCreateBody.model_validate(await request.json())
        except ValidationError:
            return _error("Missing required fields", 400)
        stream = store.create_stream(body)
        logger.info("Mock catalog: created {} ({})", stream["id"], stream["title"])
        return {"stream": stream}

    @app.put("/api/streams")
    async def update_stream(request: Request):
        payload = await request.json()
        if not payload.get("id"):
            return _error("Stream ID is required", 400)
        try:
            body = StreamUpdateBody.model_validate(payload)
        except ValidationError:
            return _error("Invalid stream fields", 400)
        stream = store.update_stream(body)
        if stream is None:
            return _error("Stream not found", 404)
        logger.info("Mock catalog: updated {}", body.id)
        return {"stream": stream}

    @app.delete("/api/streams")
    async def delete_stream(id: str | None = None):
        if not id:
            return _error("Stream ID is required", 400)
        if not store.delete_stream(id):
            return _error("Stream not found", 404)
        logger.info("Mock catalog: deleted {}", id)
        return {"success": True}

    @app.post("/api/user/premium")
    async def check_premium(request: Request):
        try:
            body = EntitlementCheckBody.model_validate(await request.json())
        except ValidationError:
            return _error("Email is required", 400)
        user = store.users.get(body.email)
        if user is None:
            return {"isPremium": False, "premiumUntil": None, "user": None}
        return {
            "isPremium": user.is_premium(datetime.now(timezone.utc)),
            "premiumUntil": user.premium_until.isoformat() if user.premium_until else None,
            "user": {"name": user.name},
        }

    return app


app = create_app()

__all__ = ["app", "create_app", "MockLiveStore"]
