import asyncio
import itertools
import logging
import threading
from typing import Dict, Optional, Tuple

from ...application.ports.change_notifier import ChangeEvent, ChangeNotifier, Subscription

logger = logging.getLogger(__name__)


class QueueSubscription(Subscription):
    def __init__(self, notifier: "InMemoryChangeNotifier", subscription_id: int, queue: "asyncio.Queue[ChangeEvent]"):
        self._notifier = notifier
        self._id = subscription_id
        self._queue = queue

    async def next_event(self, timeout: Optional[float] = None) -> Optional[ChangeEvent]:
        """Wait for the next event; None when the timeout elapses first."""
        try:
            return await asyncio.wait_for(self._queue.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return None

    def close(self) -> None:
        self._notifier._unsubscribe(self._id)


class InMemoryChangeNotifier(ChangeNotifier):
    """Fans store changes out to subscribers living on event loops.

    publish() may be called from any thread; delivery is scheduled on each
    subscriber's own loop.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._subscribers: Dict[int, Tuple[asyncio.AbstractEventLoop, "asyncio.Queue[ChangeEvent]"]] = {}

    def subscribe(self) -> QueueSubscription:
        loop = asyncio.get_running_loop()
        queue: "asyncio.Queue[ChangeEvent]" = asyncio.Queue()
        with self._lock:
            subscription_id = next(self._ids)
            self._subscribers[subscription_id] = (loop, queue)
        return QueueSubscription(self, subscription_id, queue)

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            targets = list(self._subscribers.values())
        for loop, queue in targets:
            try:
                loop.call_soon_threadsafe(queue.put_nowait, event)
            except RuntimeError:
                # loop already closed; the subscriber is gone
                logger.debug("Dropping change event for a closed event loop")

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def _unsubscribe(self, subscription_id: int) -> None:
        with self._lock:
            self._subscribers.pop(subscription_id, None)
