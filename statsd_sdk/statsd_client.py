"""
StatsD client for recording counters, gauges and timers.

Counters are coalesced in memory and flushed on an interval. Decrements,
gauges and timings are written immediately on the calling thread, and
``submit`` queues any sample for a background worker instead.

Example:
    client = StatsdClient('127.0.0.1:8125', prefix='checkout')
    client.incr('orders')
    client.gauge('queue.depth', 12)
    with client.timer('payment'):
        charge()
    client.close()
"""
import logging
import threading
import time
from contextlib import contextmanager
from datetime import timedelta
from enum import Enum
from typing import Optional, Union

from . import config
from .config import StatsdConfig
from .counter_buffer import CounterBuffer
from .delivery import DeliverBuffered, DeliverImmediate, FireAndForget
from .dispatcher import Dispatcher
from .encoder import normalize_prefix
from .errors import NotConnectedError
from .flusher import Flusher
from .metric import MetricKind, MetricSample, duration_to_ms
from .sampler import Sampler, check_count, check_sample_rate, default_sampler
from .transport import Transport, UDPTransport

logger = logging.getLogger(__name__)


class ClientState(Enum):
    UNINITIALIZED = 'uninitialized'
    CONNECTED = 'connected'
    CLOSED = 'closed'


class StatsdClient:
    """Client sending metrics to one StatsD server."""

    def __init__(
        self,
        address: Optional[str] = None,
        prefix: Optional[str] = None,
        sample_rate: Optional[float] = None,
        transport: Optional[Transport] = None,
        flush_interval: Optional[float] = None,
        queue_size: Optional[int] = None,
        connect_timeout: Optional[float] = None,
        sampler: Optional[Sampler] = None
    ):
        """
        Initialize the client and connect to the server.

        Args:
            address (str, optional): ``host:port`` of the server. Defaults to config.HOST and config.PORT.
            prefix (str, optional): Prefix for every bucket. Defaults to config.PROJECT.
            sample_rate (float, optional): Rate used by the plain recording methods. Defaults to 1.0.
            transport (Transport, optional): Transport to write to instead of a new UDP socket
            flush_interval (float, optional): Seconds between counter flushes. Defaults to config.FLUSH_INTERVAL.
            queue_size (int, optional): Capacity of the async queue. Defaults to config.QUEUE_SIZE.
            connect_timeout (float, optional): Connect timeout in seconds. Defaults to config.CONNECT_TIMEOUT.
            sampler (Sampler, optional): Sampling source. Defaults to the shared sampler.

        Raises:
            NotConnectedError: If the server address cannot be resolved
            InvalidSampleRateError: If sample_rate is outside [0, 1]
        """
        self._state = ClientState.UNINITIALIZED
        self._state_lock = threading.Lock()

        self.address = address or f"{config.HOST}:{config.PORT}"
        self.prefix = normalize_prefix(config.PROJECT if prefix is None else prefix)
        self.sample_rate = sample_rate or config.DEFAULT_SAMPLE_RATE
        check_sample_rate(self.sample_rate)
        self.sampler = sampler or default_sampler

        self.transport = transport or UDPTransport.connect(self.address, timeout=connect_timeout)
        self.buffer = CounterBuffer()

        self._immediate = DeliverImmediate(self.transport, self.prefix)
        self._buffered = DeliverBuffered(self.buffer)
        self._background = FireAndForget(self._immediate)

        self.dispatcher = Dispatcher(self._immediate, capacity=queue_size)
        self.flusher = Flusher(self.buffer, self._background, interval=flush_interval)
        self.flusher.start()

        self._state = ClientState.CONNECTED

    @classmethod
    def from_config(cls, cfg: StatsdConfig, transport: Optional[Transport] = None) -> 'StatsdClient':
        """
        Create a client from a StatsdConfig.

        Args:
            cfg (StatsdConfig): Connection and sampling settings
            transport (Transport, optional): Transport to use instead of a new UDP socket

        Returns:
            StatsdClient: The connected client
        """
        return cls(
            address=cfg.address,
            prefix=cfg.project,
            sample_rate=cfg.sample_rate,
            transport=transport,
            flush_interval=cfg.flush_interval,
            queue_size=cfg.queue_size,
            connect_timeout=cfg.connect_timeout
        )

    @property
    def state(self) -> ClientState:
        return self._state

    @property
    def connected(self) -> bool:
        return self._state is ClientState.CONNECTED

    def _check_connected(self) -> None:
        if self._state is not ClientState.CONNECTED:
            raise NotConnectedError()

    def _gate(self, sample_rate: float, count: Optional[int] = None) -> bool:
        # Validation and state checks raise before the sampling draw
        check_sample_rate(sample_rate)
        if count is not None:
            check_count(count)
        self._check_connected()
        return self.sampler.should_fire(sample_rate)

    # Counters

    def incr(self, stat: str, count: int = 1) -> None:
        """Increment a buffered counter at the client's sample rate."""
        self.incr_with_sampling(stat, count, self.sample_rate)

    def incr_with_sampling(self, stat: str, count: int, sample_rate: float) -> None:
        """
        Increment a counter.

        The increment is coalesced in memory and sent by the next flush;
        transport errors during that flush are logged, not raised.

        Args:
            stat (str): Counter name
            count (int): Amount to increment by, must be positive
            sample_rate (float): Probability the increment is recorded

        Raises:
            InvalidSampleRateError: If sample_rate is outside [0, 1]
            InvalidCountError: If count is not positive
            NotConnectedError: If the client is closed
        """
        if not self._gate(sample_rate, count):
            return
        self._buffered.deliver(MetricSample(stat, count, MetricKind.COUNT, sample_rate))

    def decr(self, stat: str, count: int = 1) -> None:
        """Decrement a counter at the client's sample rate."""
        self.decr_with_sampling(stat, count, self.sample_rate)

    def decr_with_sampling(self, stat: str, count: int, sample_rate: float) -> None:
        """
        Send a negative counter delta immediately.

        Raises:
            InvalidSampleRateError: If sample_rate is outside [0, 1]
            InvalidCountError: If count is not positive
            NotConnectedError: If the client is closed
            TransportError: If the write fails
        """
        if not self._gate(sample_rate, count):
            return
        self._immediate.deliver(MetricSample(stat, -count, MetricKind.COUNT, sample_rate))

    # Timers

    def timing(self, stat: str, duration: Union[timedelta, int]) -> None:
        """Record a duration at the client's sample rate."""
        self.timing_with_sampling(stat, duration, self.sample_rate)

    def timing_with_sampling(self, stat: str, duration: Union[timedelta, int], sample_rate: float) -> None:
        """
        Send a duration immediately, in whole milliseconds.

        Args:
            stat (str): Timer name
            duration (timedelta or int): The duration, or a number of milliseconds
            sample_rate (float): Probability the timing is recorded

        Raises:
            InvalidSampleRateError: If sample_rate is outside [0, 1]
            NotConnectedError: If the client is closed
            TransportError: If the write fails
        """
        if not self._gate(sample_rate):
            return
        self._immediate.deliver(MetricSample(stat, duration_to_ms(duration), MetricKind.TIMER, sample_rate))

    @contextmanager
    def timer(self, stat: str, sample_rate: Optional[float] = None):
        """
        Time the enclosed block and record it with ``timing``.

        Args:
            stat (str): Timer name
            sample_rate (float, optional): Defaults to the client's sample rate
        """
        sample_rate = self.sample_rate if sample_rate is None else sample_rate
        check_sample_rate(sample_rate)
        start = time.monotonic_ns()
        try:
            yield
        finally:
            elapsed_ms = (time.monotonic_ns() - start) // 1_000_000
            self.timing_with_sampling(stat, elapsed_ms, sample_rate)

    # Gauges

    def gauge(self, stat: str, value: int) -> None:
        """Set an integer gauge at the client's sample rate."""
        self.gauge_with_sampling(stat, value, self.sample_rate)

    def gauge_with_sampling(self, stat: str, value: int, sample_rate: float) -> None:
        """
        Send an integer gauge immediately.

        Negative values are sent as a reset to zero followed by the value.

        Raises:
            InvalidSampleRateError: If sample_rate is outside [0, 1]
            NotConnectedError: If the client is closed
            TransportError: If a write fails
        """
        if not self._gate(sample_rate):
            return
        self._immediate.deliver(MetricSample(stat, int(value), MetricKind.GAUGE, sample_rate))

    def fgauge(self, stat: str, value: float) -> None:
        """Set a floating point gauge at the client's sample rate."""
        self.fgauge_with_sampling(stat, value, self.sample_rate)

    def fgauge_with_sampling(self, stat: str, value: float, sample_rate: float) -> None:
        """Send a floating point gauge immediately. See ``gauge_with_sampling``."""
        if not self._gate(sample_rate):
            return
        self._immediate.deliver(MetricSample(stat, float(value), MetricKind.FLOAT_GAUGE, sample_rate))

    # Asynchronous path

    def submit(self, sample: MetricSample) -> bool:
        """
        Record a sample without waiting on the network.

        Positive counter increments go to the coalescing buffer; every
        other sample is queued for the dispatcher worker, which starts on
        first use. Transport errors are logged by the worker and a full
        queue drops the sample.

        Args:
            sample (MetricSample): The sample to record

        Returns:
            bool: True if the sample was buffered or queued

        Raises:
            InvalidSampleRateError: If the sample rate is outside [0, 1]
            NotConnectedError: If the client is closed
        """
        if not self._gate(sample.sample_rate):
            return False
        if sample.kind is MetricKind.COUNT and sample.value > 0:
            self._buffered.deliver(sample)
            return True
        return self.dispatcher.submit(sample)

    def flush(self) -> int:
        """
        Send buffered counters now instead of waiting for the next tick.

        Returns:
            int: Number of counters sent
        """
        self._check_connected()
        return self.flusher.flush()

    def buffered_count(self) -> int:
        """Number of distinct counters waiting for the next flush."""
        return len(self.buffer)

    def dropped_count(self) -> int:
        """Number of samples dropped because the dispatch queue was full."""
        return getattr(self.dispatcher.on_drop, 'dropped', 0)

    def close(self) -> None:
        """
        Stop background work and close the transport.

        Buffered counters and queued samples are sent before the socket is
        closed. Calling close again is a no-op.
        """
        with self._state_lock:
            was_connected = self._state is ClientState.CONNECTED
            self._state = ClientState.CLOSED

        if was_connected:
            self.flusher.stop()
            self.flusher.flush()
            self.dispatcher.stop()
            logger.info("Closed StatsD client for %s", self.address)

        self.transport.close()

    def __enter__(self) -> 'StatsdClient':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
