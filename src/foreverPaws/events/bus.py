"""In-process publish/subscribe bus used in place of global notifications."""

from __future__ import annotations

import logging
import threading
import uuid
from collections import defaultdict
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Type


@dataclass(kw_only=True)
class Event:
    """Base class for every event published on the bus."""

    timestamp: datetime = field(default_factory=datetime.now)
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass
class Subscription:
    """Handle returned by :meth:`EventBus.subscribe`."""

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    event_type: Type = Event
    handler: Callable = field(default=lambda e: None)
    async_: bool = False
    active: bool = True

    def cancel(self) -> None:
        self.active = False


class EventBus:
    """Dispatch events to handlers registered for their exact type.

    Synchronous handlers run inline on the publishing thread.  Handlers
    registered with ``async_=True`` run on a small worker pool which is only
    created once the first asynchronous handler is used.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, max_workers: int = 2):
        self._logger = logger or logging.getLogger(__name__)
        self._handlers: Dict[Type[Event], List[Subscription]] = defaultdict(list)
        self._max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()

    def subscribe(self, event_type: Type[Event], handler: Callable, async_: bool = False) -> Subscription:
        sub = Subscription(event_type=event_type, handler=handler, async_=async_)
        with self._lock:
            self._handlers[event_type].append(sub)
        return sub

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.active = False
        with self._lock:
            subs = self._handlers.get(subscription.event_type, [])
            if subscription in subs:
                subs.remove(subscription)

    def publish(self, event: Event) -> List[Future]:
        """Deliver *event* and return futures for the asynchronous handlers."""

        event_type = type(event)
        with self._lock:
            subs = [sub for sub in self._handlers.get(event_type, []) if sub.active]

        futures: List[Future] = []
        for sub in subs:
            if sub.async_:
                futures.append(self._pool().submit(self._safe_call, sub.handler, event))
                continue
            self._safe_call(sub.handler, event)
        return futures

    def shutdown(self) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)

    def _pool(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers, thread_name_prefix="event-bus"
                )
            return self._executor

    def _safe_call(self, handler: Callable, event: Event) -> None:
        try:
            handler(event)
        except Exception:
            self._logger.exception("Handler failed for %s", type(event).__name__)
