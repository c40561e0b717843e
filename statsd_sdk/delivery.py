"""
Delivery strategies connecting recorded samples to the transport.

``DeliverImmediate`` encodes and writes on the calling thread and raises
transport errors. ``DeliverBuffered`` hands counters to the coalescing
buffer and never touches the network. ``FireAndForget`` wraps a delivery
for background threads, logging failures instead of raising them.
"""
import logging
from typing import Optional

from .counter_buffer import CounterBuffer
from .encoder import encode_sample, normalize_prefix
from .errors import StatsdError
from .metric import MetricKind, MetricSample
from .transport import Transport

logger = logging.getLogger(__name__)

GAUGE_KINDS = (MetricKind.GAUGE, MetricKind.FLOAT_GAUGE)


class DeliverImmediate:
    """Encode a sample and write it to the transport right away."""

    def __init__(self, transport: Transport, prefix: Optional[str] = None):
        self.transport = transport
        self.prefix = normalize_prefix(prefix)

    def deliver(self, sample: MetricSample) -> None:
        """
        Send a sample.

        A negative gauge cannot be set directly in StatsD (a signed value is
        read as a delta), so it is preceded by a reset to zero at rate 1.
        The value is sent even if the reset fails; the reset error is raised
        afterwards.

        Raises:
            NotConnectedError: If the transport is closed
            TransportError: If the write fails
        """
        reset_error = None
        if sample.kind in GAUGE_KINDS and sample.value < 0:
            try:
                self._write(MetricSample(sample.name, 0, MetricKind.GAUGE, 1.0))
            except StatsdError as e:
                reset_error = e
        self._write(sample)
        if reset_error is not None:
            raise reset_error

    __call__ = deliver

    def _write(self, sample: MetricSample) -> None:
        data = encode_sample(sample, self.prefix)
        self.transport.write(data)
        logger.debug("Sent %r", data)


class DeliverBuffered:
    """Add counter samples to the coalescing buffer."""

    def __init__(self, buffer: CounterBuffer):
        self.buffer = buffer

    def deliver(self, sample: MetricSample) -> None:
        if sample.kind is not MetricKind.COUNT:
            raise ValueError(f"Only counters can be buffered, got {sample.kind.name}")
        self.buffer.add(sample.name, sample.value, sample.sample_rate)

    __call__ = deliver


class FireAndForget:
    """Run a delivery, logging and swallowing SDK errors."""

    def __init__(self, delivery):
        self.delivery = delivery

    def deliver(self, sample: MetricSample) -> bool:
        """
        Deliver a sample without raising.

        Returns:
            bool: True if delivered, False if an error was logged
        """
        try:
            self.delivery.deliver(sample)
            return True
        except StatsdError as e:
            logger.error("Dropped %s after send failure: %s", sample.name, e)
            return False

    __call__ = deliver
