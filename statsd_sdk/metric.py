"""
Metric records passed between the recording calls and the wire encoder.
"""
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Union

Number = Union[int, float]


class MetricKind(Enum):
    """Kinds of metric carried by a sample."""
    COUNT = 'count'
    GAUGE = 'gauge'
    FLOAT_GAUGE = 'fgauge'
    TIMER = 'timer'

    @property
    def type_code(self) -> str:
        """The StatsD type code written on the wire."""
        return _TYPE_CODES[self]


_TYPE_CODES = {
    MetricKind.COUNT: 'c',
    MetricKind.GAUGE: 'g',
    MetricKind.FLOAT_GAUGE: 'g',
    MetricKind.TIMER: 'ms',
}


@dataclass(frozen=True)
class MetricSample:
    """One recorded observation, ready to be encoded."""
    name: str
    value: Number
    kind: MetricKind
    sample_rate: float = 1.0

    @property
    def type_code(self) -> str:
        return self.kind.type_code


@dataclass
class BufferedCounter:
    """
    Aggregate of the increments recorded for one counter between flushes.

    At most one live entry exists per name; the counter buffer mutates
    ``count`` in place until the entry is drained.
    """
    name: str
    count: int
    sample_rate: float

    def to_sample(self) -> MetricSample:
        """
        Convert the aggregate into a counter sample.

        Returns:
            MetricSample: A COUNT sample carrying the aggregate count
        """
        return MetricSample(self.name, self.count, MetricKind.COUNT, self.sample_rate)


def duration_to_ms(duration: Union[timedelta, int]) -> int:
    """
    Convert a duration into whole milliseconds.

    Args:
        duration (timedelta or int): A timedelta, or a number of milliseconds

    Returns:
        int: The duration in milliseconds, truncated toward zero
    """
    if isinstance(duration, timedelta):
        # Integer arithmetic on microseconds avoids float rounding
        micros = (duration.days * 86400 + duration.seconds) * 1_000_000 + duration.microseconds
        if micros < 0:
            return -(-micros // 1000)
        return micros // 1000
    return int(duration)
