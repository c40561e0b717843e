"""
Periodic flushing of buffered counters.
"""
import logging
import threading
from typing import Callable, Optional

from . import config
from .counter_buffer import CounterBuffer
from .metric import MetricSample

logger = logging.getLogger(__name__)


class Flusher:
    """Drains a CounterBuffer on a fixed interval and sends each entry."""

    def __init__(
        self,
        buffer: CounterBuffer,
        send: Callable[[MetricSample], None],
        interval: Optional[float] = None,
        name: str = 'statsd-flusher'
    ):
        """
        Initialize the flusher.

        Args:
            buffer (CounterBuffer): The buffer to drain
            send (callable): Called with one counter sample per drained entry
            interval (float, optional): Seconds between flushes. Defaults to config.FLUSH_INTERVAL.
            name (str): Name of the timer thread
        """
        self.buffer = buffer
        self.send = send
        self.interval = interval or config.FLUSH_INTERVAL
        self.name = name
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._stopped.is_set()

    def start(self) -> None:
        """Start the timer thread."""
        with self._lock:
            if self._thread is not None:
                logger.warning("Flusher %s already started", self.name)
                return
            if self._stopped.is_set():
                return
            self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
            self._thread.start()

    def stop(self, timeout: Optional[float] = 5) -> None:
        """Cancel the timer. No flush runs after this returns."""
        self._stopped.set()
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return
        thread.join(timeout=timeout)
        if thread.is_alive():
            logger.warning("Flusher %s did not stop cleanly", self.name)

    def flush(self) -> int:
        """
        Drain the buffer and send every entry as a counter.

        Returns:
            int: Number of entries sent
        """
        entries = self.buffer.drain()
        if not entries:
            return 0

        for entry in entries:
            self.send(entry.to_sample())
        logger.debug("Flushed %d buffered counters", len(entries))
        return len(entries)

    def _loop(self) -> None:
        while not self._stopped.wait(self.interval):
            try:
                self.flush()
            except Exception:
                logger.exception("Error flushing buffered counters")
