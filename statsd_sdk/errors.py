"""
Exceptions raised by the StatsD SDK.
"""


class StatsdError(Exception):
    """Base exception for all StatsD SDK errors."""
    pass


class NotConnectedError(StatsdError):
    """Raised when a metric is sent without an open connection."""

    def __init__(self, message: str = "can't send stats, not connected to StatsD server"):
        super().__init__(message)


class InvalidCountError(StatsdError, ValueError):
    """Raised when a counter operation is given a count that is not positive."""

    def __init__(self, count=None):
        message = "count must be greater than zero"
        if count is not None:
            message = f"{message}, got {count}"
        super().__init__(message)
        self.count = count


class InvalidSampleRateError(StatsdError, ValueError):
    """Raised when a sample rate falls outside [0, 1]."""

    def __init__(self, rate=None):
        message = "sample rate must be between 0 and 1"
        if rate is not None:
            message = f"{message}, got {rate}"
        super().__init__(message)
        self.rate = rate


class TransportError(StatsdError):
    """Raised when the socket reports an error while writing a datagram."""
    pass
