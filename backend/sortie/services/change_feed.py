import asyncio
import logging
import threading
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

Subscriber = Tuple[asyncio.AbstractEventLoop, asyncio.Queue]


class ChangeFeed:
    """In-process change notifications keyed by entity name.

    Handlers publish from any thread; each subscriber owns an asyncio queue
    bound to its event loop. Events only say *that* something changed, so
    subscribers re-query rather than patch their state.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Subscriber]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, entity: str) -> asyncio.Queue:
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()
        with self._lock:
            self._subscribers[entity].append((loop, queue))
        logger.debug("Subscribed to %s changes", entity)
        return queue

    def unsubscribe(self, entity: str, queue: asyncio.Queue) -> None:
        with self._lock:
            self._subscribers[entity] = [
                (loop, q) for loop, q in self._subscribers[entity] if q is not queue
            ]

    def subscriber_count(self, entity: str) -> int:
        with self._lock:
            return len(self._subscribers[entity])

    def publish(self, entity: str, event: str, record_id: Optional[int] = None) -> int:
        message = {
            "entity": entity,
            "event": event,
            "id": record_id,
            "at": datetime.now(timezone.utc).isoformat(),
        }

        with self._lock:
            subscribers = list(self._subscribers[entity])

        delivered = 0
        for loop, queue in subscribers:
            try:
                loop.call_soon_threadsafe(queue.put_nowait, message)
                delivered += 1
            except RuntimeError:
                # loop already closed; the websocket went away without unsubscribing
                self.unsubscribe(entity, queue)

        logger.debug("%s %s -> %d subscriber(s)", entity, event, delivered)
        return delivered


change_feed = ChangeFeed()


def get_change_feed() -> ChangeFeed:
    return change_feed
