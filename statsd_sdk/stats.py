"""
Module-level recording functions backed by a lazily created default client.

Call ``setup`` once with a StatsdConfig; the client is connected on the
first recording call. Every function here is a no-op until ``setup`` has
run, or when the configuration disables StatsD. Recording goes through the
client's asynchronous path, so transport errors never reach the caller.
"""
import logging
import threading
from datetime import timedelta
from typing import Optional, Union

from . import config
from .config import StatsdConfig
from .metric import MetricKind, MetricSample, duration_to_ms
from .sampler import check_count, check_sample_rate
from .statsd_client import StatsdClient

logger = logging.getLogger(__name__)

_config: Optional[StatsdConfig] = None
_client: Optional[StatsdClient] = None
_lock = threading.Lock()


def setup(cfg: Optional[StatsdConfig] = None) -> None:
    """
    Configure the default client.

    A client created under a previous configuration is closed.

    Args:
        cfg (StatsdConfig, optional): Settings to use. Defaults to StatsdConfig.from_env().
    """
    global _config, _client
    with _lock:
        previous, _client = _client, None
        _config = cfg or StatsdConfig.from_env()
    if previous is not None:
        previous.close()
    logger.debug("StatsD configured for %s (enabled=%s)", _config.address, _config.enable)


def get_config() -> Optional[StatsdConfig]:
    return _config


def get_client() -> Optional[StatsdClient]:
    """
    Get the default client, connecting it on first use.

    Concurrent first calls create exactly one client.

    Returns:
        StatsdClient: The default client, or None if setup has not run

    Raises:
        NotConnectedError: If the configured address cannot be resolved
    """
    global _client
    client = _client
    if client is not None:
        return client
    with _lock:
        if _client is None and _config is not None:
            _client = StatsdClient.from_config(_config)
        return _client


def shutdown() -> None:
    """Close the default client. The next recording call reconnects."""
    global _client
    with _lock:
        client, _client = _client, None
    if client is not None:
        client.close()


def _enabled() -> bool:
    return _config is not None and _config.enable


def _default_rate() -> float:
    return _config.sample_rate if _config is not None else config.DEFAULT_SAMPLE_RATE


def _submit(sample: MetricSample) -> bool:
    if not _enabled():
        return False
    client = get_client()
    if client is None:
        return False
    return client.submit(sample)


def incr(stat: str, count: int = 1) -> bool:
    """Increment a counter at the configured sample rate."""
    return incr_with_sampling(stat, count, _default_rate())


def incr_with_sampling(stat: str, count: int, sample_rate: float) -> bool:
    """
    Increment a counter.

    Args:
        stat (str): Counter name
        count (int): Amount to increment by, must be positive
        sample_rate (float): Probability the increment is recorded

    Returns:
        bool: True if the increment was recorded

    Raises:
        InvalidSampleRateError: If sample_rate is outside [0, 1]
        InvalidCountError: If count is not positive
    """
    check_sample_rate(sample_rate)
    check_count(count)
    return _submit(MetricSample(stat, count, MetricKind.COUNT, sample_rate))


def decr(stat: str, count: int = 1) -> bool:
    """Decrement a counter at the configured sample rate."""
    return decr_with_sampling(stat, count, _default_rate())


def decr_with_sampling(stat: str, count: int, sample_rate: float) -> bool:
    check_sample_rate(sample_rate)
    check_count(count)
    return _submit(MetricSample(stat, -count, MetricKind.COUNT, sample_rate))


def timing(stat: str, duration: Union[timedelta, int]) -> bool:
    """Record a duration at the configured sample rate."""
    return timing_with_sampling(stat, duration, _default_rate())


def timing_with_sampling(stat: str, duration: Union[timedelta, int], sample_rate: float) -> bool:
    """
    Record a duration in whole milliseconds.

    Args:
        stat (str): Timer name
        duration (timedelta or int): The duration, or a number of milliseconds
        sample_rate (float): Probability the timing is recorded

    Returns:
        bool: True if the timing was queued
    """
    check_sample_rate(sample_rate)
    return _submit(MetricSample(stat, duration_to_ms(duration), MetricKind.TIMER, sample_rate))


def gauge(stat: str, value: int) -> bool:
    """Set an integer gauge at the configured sample rate."""
    return gauge_with_sampling(stat, value, _default_rate())


def gauge_with_sampling(stat: str, value: int, sample_rate: float) -> bool:
    check_sample_rate(sample_rate)
    return _submit(MetricSample(stat, int(value), MetricKind.GAUGE, sample_rate))


def fgauge(stat: str, value: float) -> bool:
    """Set a floating point gauge at the configured sample rate."""
    return fgauge_with_sampling(stat, value, _default_rate())


def fgauge_with_sampling(stat: str, value: float, sample_rate: float) -> bool:
    check_sample_rate(sample_rate)
    return _submit(MetricSample(stat, float(value), MetricKind.FLOAT_GAUGE, sample_rate))
