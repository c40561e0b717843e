import threading
import time

import pytest

from statsd_sdk.errors import NotConnectedError, TransportError
from statsd_sdk.statsd_client import StatsdClient
from statsd_sdk.transport import Transport


class FakeTransport(Transport):
    """Transport recording datagrams in memory."""

    def __init__(self, fail: bool = False):
        self.sent = []
        self.closed = False
        self.fail = fail
        self.close_calls = 0
        self._lock = threading.Lock()

    def write(self, data: bytes) -> None:
        if self.closed:
            raise NotConnectedError()
        if self.fail:
            raise TransportError("write failed")
        with self._lock:
            self.sent.append(data)

    def close(self) -> None:
        self.close_calls += 1
        self.closed = True

    @property
    def lines(self):
        with self._lock:
            return [data.decode('utf-8') for data in self.sent]


def _wait_until(predicate, timeout=2.0, interval=0.005):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def wait_until():
    return _wait_until


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def client(transport):
    # Long interval so only explicit flushes send counters
    cli = StatsdClient('127.0.0.1:8125', prefix='', transport=transport, flush_interval=3600)
    yield cli
    cli.close()
