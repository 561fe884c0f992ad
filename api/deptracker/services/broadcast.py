"""Push notifications for dependency and recommendation changes.

Handlers run in the server's worker threads; WebSocket sends are scheduled
onto the event loop that accepted the connections.
"""
import asyncio
import logging
import threading
from collections import deque
from typing import Any, Callable, Deque, List, Optional, Set

from fastapi import WebSocket

from deptracker.models.dependency import Dependency
from deptracker.models.recommendation import OptimizationRecommendation
from deptracker.schemas.dependency import DependencyResponse
from deptracker.schemas.recommendation import RecommendationResponse

logger = logging.getLogger(__name__)

DEPENDENCY_UPDATE = "dependencyUpdate"
RECOMMENDATION_UPDATE = "recommendationUpdate"

ACTION_CREATED = "created"
ACTION_UPDATED = "updated"
ACTION_IMPORTED = "imported"
ACTION_APPLIED = "applied"

Subscriber = Callable[[dict], Any]


def dependency_message(action: str, dependency: Optional[Dependency] = None,
                       count: Optional[int] = None) -> dict:
    data: dict = {"action": action}
    if dependency is not None:
        data["dependency"] = DependencyResponse.model_validate(dependency).model_dump(mode="json")
    if count is not None:
        data["count"] = count
    return {"type": DEPENDENCY_UPDATE, "data": data}


def recommendation_message(recommendation: OptimizationRecommendation) -> dict:
    return {
        "type": RECOMMENDATION_UPDATE,
        "data": {
            "action": ACTION_APPLIED,
            "recommendation": RecommendationResponse.model_validate(
                recommendation).model_dump(mode="json"),
        },
    }


class BroadcastHub:
    """Fans messages out to WebSocket clients and in-process subscribers."""

    def __init__(self, history_size: int = 50):
        self._lock = threading.Lock()
        self._connections: Set[WebSocket] = set()
        self._subscribers: List[Subscriber] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self.recent: Deque[dict] = deque(maxlen=history_size)

    @property
    def connection_count(self) -> int:
        with self._lock:
            return len(self._connections)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        with self._lock:
            self._loop = asyncio.get_running_loop()
            self._connections.add(websocket)
        logger.info("WebSocket client connected (%d open)", self.connection_count)

    def disconnect(self, websocket: WebSocket) -> None:
        with self._lock:
            self._connections.discard(websocket)
        logger.info("WebSocket client disconnected (%d open)", self.connection_count)

    def subscribe(self, callback: Subscriber) -> None:
        with self._lock:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def publish(self, message: dict) -> None:
        """Deliver a message to every listener; failures are logged, not raised."""
        with self._lock:
            self.recent.append(message)
            subscribers = list(self._subscribers)
            has_connections = bool(self._connections)
            loop = self._loop

        for callback in subscribers:
            try:
                callback(message)
            except Exception:
                logger.exception("Broadcast subscriber failed")

        if has_connections and loop is not None and not loop.is_closed():
            asyncio.run_coroutine_threadsafe(self._send_all(message), loop)

    async def _send_all(self, message: dict) -> None:
        with self._lock:
            connections = list(self._connections)
        for websocket in connections:
            try:
                await websocket.send_json(message)
            except Exception as exc:
                logger.warning("Dropping WebSocket client after send failure: %s", exc)
                self.disconnect(websocket)


broadcaster = BroadcastHub()
