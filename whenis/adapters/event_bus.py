"""
In-process publish/subscribe bus standing in for the replication layer.
"""

import logging
from collections import defaultdict, deque
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]


class LocalEventBus:
    """
    Ordered, synchronous event delivery within one process.

    Events are addressed by ``(scope, event)``. Handlers run to completion
    one at a time; anything published from inside a handler is queued and
    delivered afterwards, so every subscriber sees the same global order.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Tuple[str, str], List[Handler]] = defaultdict(list)
        self._queue: Deque[Tuple[str, str, Any]] = deque()
        self._dispatching = False

    def subscribe(self, scope: str, event: str, handler: Handler) -> None:
        self._handlers[(scope, event)].append(handler)

    def unsubscribe(self, scope: str, event: str, handler: Handler) -> None:
        handlers = self._handlers.get((scope, event), [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, scope: str, event: str, payload: Any = None) -> None:
        """
        Deliver ``payload`` to every handler of ``(scope, event)``.

        A failing handler does not stop delivery: the remaining handlers and
        queued events still run, then the first failure is re-raised.

        Raises:
            The first exception raised by a handler
        """
        self._queue.append((scope, event, payload))

        if self._dispatching:
            return

        first_error: Optional[Exception] = None
        self._dispatching = True
        try:
            while self._queue:
                current_scope, current_event, current_payload = self._queue.popleft()
                handlers = list(self._handlers.get((current_scope, current_event), ()))
                logger.debug(
                    "Dispatching %s/%s to %d handler(s)",
                    current_scope, current_event, len(handlers)
                )
                for handler in handlers:
                    try:
                        handler(current_payload)
                    except Exception as e:
                        logger.warning("Handler for %s/%s failed: %s", current_scope, current_event, e)
                        if first_error is None:
                            first_error = e
        finally:
            self._dispatching = False

        if first_error is not None:
            raise first_error
