"""
Fire-and-forget dispatch of metrics through a bounded queue.

Callers hand samples to a ``Dispatcher`` which never blocks: when the
queue is full the sample is dropped and reported through the drop
policy. A single background worker forwards queued samples to a handler.
"""
import logging
import threading
from collections import deque
from datetime import datetime
from typing import Any, Callable, Deque, Dict, List, Optional

import pytz

from . import config
from .errors import StatsdError
from .metric import MetricSample

logger = logging.getLogger(__name__)


class BoundedQueue:
    """FIFO with a fixed capacity and a non-blocking put."""

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError("Queue capacity must be positive")
        self.capacity = capacity
        self._items: Deque[Any] = deque()
        self._cond = threading.Condition()
        self._closed = False

    def try_enqueue(self, item: Any) -> bool:
        """
        Append an item unless the queue is full or closed.

        Returns:
            bool: True if the item was queued
        """
        with self._cond:
            if self._closed or len(self._items) >= self.capacity:
                return False
            self._items.append(item)
            self._cond.notify()
            return True

    def get(self) -> Optional[Any]:
        """
        Wait for the next item.

        Returns:
            The oldest item, or None once the queue is closed and empty
        """
        with self._cond:
            while not self._items and not self._closed:
                self._cond.wait()
            if self._items:
                return self._items.popleft()
            return None

    def close(self, discard: bool = False) -> List[Any]:
        """
        Stop accepting items and wake the consumer.

        Args:
            discard (bool): Drop queued items instead of letting them drain

        Returns:
            list: The discarded items
        """
        with self._cond:
            self._closed = True
            discarded = []
            if discard:
                discarded = list(self._items)
                self._items.clear()
            self._cond.notify_all()
            return discarded

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)


class DropAndLog:
    """Overflow policy: log a diagnostic record for each dropped sample."""

    def __init__(self):
        self.dropped = 0
        self._lock = threading.Lock()

    def __call__(self, sample: MetricSample) -> Dict[str, Any]:
        with self._lock:
            self.dropped += 1
        record = {
            'stat': sample.name,
            'value': sample.value,
            'type': sample.type_code,
            'sample_rate': sample.sample_rate,
            'dropped_at': datetime.now(pytz.UTC).isoformat()
        }
        logger.warning(
            "Dispatch queue full, dropped stat:%s,value:%s,type:%s,sampleRate:%s at %s",
            record['stat'], record['value'], record['type'], record['sample_rate'], record['dropped_at']
        )
        return record


class Dispatcher:
    """
    A bounded queue drained by one background worker thread.

    The worker is started on first use. ``handler`` is called with each
    sample in FIFO order; errors it raises are logged and do not stop the
    worker.
    """

    def __init__(
        self,
        handler: Callable[[MetricSample], None],
        capacity: Optional[int] = None,
        on_drop: Optional[Callable[[MetricSample], Any]] = None,
        name: str = 'statsd-dispatcher'
    ):
        self.handler = handler
        self.queue = BoundedQueue(capacity or config.QUEUE_SIZE)
        self.on_drop = on_drop or DropAndLog()
        self.name = name
        self._thread: Optional[threading.Thread] = None
        self._start_lock = threading.Lock()

    def start(self) -> None:
        """
        Start the worker thread.

        Only the first call has any effect, and a stopped dispatcher is
        never restarted.
        """
        if self._thread is not None or self.queue.closed:
            return
        with self._start_lock:
            if self._thread is not None or self.queue.closed:
                return
            thread = threading.Thread(target=self._run, name=self.name, daemon=True)
            thread.start()
            self._thread = thread
        logger.debug("Started dispatcher worker %s", self.name)

    @property
    def started(self) -> bool:
        return self._thread is not None

    def submit(self, sample: MetricSample) -> bool:
        """
        Queue a sample without blocking.

        Args:
            sample (MetricSample): The sample to forward

        Returns:
            bool: True if queued, False if dropped or stopped
        """
        self.start()
        if self.queue.try_enqueue(sample):
            return True
        if self.queue.closed:
            logger.debug("Dispatcher %s is stopped, discarded %s", self.name, sample.name)
            return False
        self.on_drop(sample)
        return False

    def stop(self, timeout: Optional[float] = 5, discard: bool = False) -> None:
        """
        Close the queue and wait for the worker to finish.

        Args:
            timeout (float, optional): Seconds to wait for the worker
            discard (bool): Drop queued samples instead of forwarding them
        """
        discarded = self.queue.close(discard=discard)
        if discarded:
            logger.info("Discarded %d queued metrics on stop", len(discarded))

        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return
        thread.join(timeout=timeout)
        if thread.is_alive():
            logger.warning("Dispatcher worker %s did not stop cleanly", self.name)

    def _run(self) -> None:
        while True:
            sample = self.queue.get()
            if sample is None:
                break
            try:
                self.handler(sample)
            except StatsdError as e:
                logger.error("Failed to send %s: %s", sample.name, e)
            except Exception:
                logger.exception("Unexpected error sending %s", sample.name)
        logger.debug("Dispatcher worker %s stopped", self.name)
