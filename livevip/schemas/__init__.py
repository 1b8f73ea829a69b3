from .comment import CommentEvent
from .entitlement import EntitlementSnapshot
from .stream import StreamRecord, hidden_vip_count, visible_streams
from .viewing_state import GateReason, ViewingPhase

__all__ = [
    "CommentEvent",
    "EntitlementSnapshot",
    "GateReason",
    "StreamRecord",
    "ViewingPhase",
    "hidden_vip_count",
    "visible_streams",
]
