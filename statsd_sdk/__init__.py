"""
StatsD SDK for emitting counters, gauges and timers over UDP.
"""
from .config import StatsdConfig
from .errors import (
    StatsdError,
    NotConnectedError,
    InvalidCountError,
    InvalidSampleRateError,
    TransportError
)
from .metric import MetricKind, MetricSample
from .statsd_client import StatsdClient, ClientState
from .stats import (
    setup,
    get_client,
    shutdown,
    incr,
    incr_with_sampling,
    decr,
    decr_with_sampling,
    timing,
    timing_with_sampling,
    gauge,
    gauge_with_sampling,
    fgauge,
    fgauge_with_sampling
)

__all__ = [
    'StatsdConfig',
    'StatsdClient',
    'ClientState',
    'MetricKind',
    'MetricSample',
    'StatsdError',
    'NotConnectedError',
    'InvalidCountError',
    'InvalidSampleRateError',
    'TransportError',
    'setup',
    'get_client',
    'shutdown',
    'incr',
    'incr_with_sampling',
    'decr',
    'decr_with_sampling',
    'timing',
    'timing_with_sampling',
    'gauge',
    'gauge_with_sampling',
    'fgauge',
    'fgauge_with_sampling',
]
