"""
Configuration settings for the StatsD SDK.
"""
import os
from dataclasses import dataclass


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


# Server configuration
HOST = os.getenv('STATSD_HOST', '127.0.0.1')
PORT = int(os.getenv('STATSD_PORT', '8125'))

# Prefix prepended to every bucket, usually the service name
PROJECT = os.getenv('STATSD_PROJECT', '')

# Recording through the default client is a no-op when disabled
ENABLE = _env_flag('STATSD_ENABLE', True)

# Global sample rate, 0 means unset
SAMPLE_RATE = float(os.getenv('STATSD_SAMPLE_RATE', '0'))
DEFAULT_SAMPLE_RATE = 1.0

# Buffering configuration
FLUSH_INTERVAL = float(os.getenv('STATSD_FLUSH_INTERVAL', '10'))  # seconds
QUEUE_SIZE = int(os.getenv('STATSD_QUEUE_SIZE', '1024'))  # pending async metrics

# Socket configuration
CONNECT_TIMEOUT = 10  # seconds
MAX_RETRIES = 3  # connect attempts, writes are never retried
RETRY_DELAY = 1  # seconds

# Logging configuration
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


@dataclass
class StatsdConfig:
    """Connection and sampling settings for one StatsD client."""
    host: str = HOST
    port: int = PORT
    project: str = PROJECT
    enable: bool = ENABLE
    sample_rate: float = SAMPLE_RATE
    flush_interval: float = FLUSH_INTERVAL
    queue_size: int = QUEUE_SIZE
    connect_timeout: float = CONNECT_TIMEOUT

    def __post_init__(self):
        # A zero rate means the caller never set one
        if self.sample_rate == 0:
            self.sample_rate = DEFAULT_SAMPLE_RATE

    @property
    def address(self) -> str:
        """The ``host:port`` address of the StatsD server."""
        return f"{self.host}:{self.port}"

    @classmethod
    def from_env(cls) -> 'StatsdConfig':
        """
        Build a configuration from the current environment.

        Unlike the module constants, which are read once at import time,
        this re-reads every ``STATSD_*`` variable.

        Returns:
            StatsdConfig: The configuration
        """
        return cls(
            host=os.getenv('STATSD_HOST', '127.0.0.1'),
            port=int(os.getenv('STATSD_PORT', '8125')),
            project=os.getenv('STATSD_PROJECT', ''),
            enable=_env_flag('STATSD_ENABLE', True),
            sample_rate=float(os.getenv('STATSD_SAMPLE_RATE', '0')),
            flush_interval=float(os.getenv('STATSD_FLUSH_INTERVAL', '10')),
            queue_size=int(os.getenv('STATSD_QUEUE_SIZE', '1024')),
        )
