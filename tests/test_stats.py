import threading
import time
from datetime import timedelta
from unittest.mock import patch

import pytest

from statsd_sdk import stats
from statsd_sdk.config import StatsdConfig
from statsd_sdk.errors import InvalidCountError, InvalidSampleRateError
from statsd_sdk.statsd_client import ClientState, StatsdClient

from .conftest import FakeTransport


@pytest.fixture(autouse=True)
def reset_default_client():
    yield
    stats.shutdown()
    stats._config = None


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def fake_factory(transport):
    def build(cfg):
        return StatsdClient.from_config(cfg, transport=transport)

    with patch('statsd_sdk.stats.StatsdClient') as factory:
        factory.from_config.side_effect = build
        yield factory


def configure(**kwargs):
    kwargs.setdefault('flush_interval', 3600)
    stats.setup(StatsdConfig(**kwargs))


def test_calls_before_setup_are_noops():
    assert stats.get_client() is None
    assert stats.incr('foo') is False
    assert stats.gauge('foo', 1) is False


def test_disabled_config_records_nothing(fake_factory):
    configure(enable=False)

    assert stats.incr('foo') is False
    assert stats.fgauge('foo', 1.5) is False
    fake_factory.from_config.assert_not_called()


def test_validation_errors_raise_even_when_disabled():
    configure(enable=False)

    with pytest.raises(InvalidCountError):
        stats.incr('foo', 0)
    with pytest.raises(InvalidSampleRateError):
        stats.gauge_with_sampling('foo', 1, 1.5)


def test_client_is_created_lazily(fake_factory):
    configure()
    fake_factory.from_config.assert_not_called()

    stats.incr('foo')
    assert fake_factory.from_config.call_count == 1
    assert stats.get_client().state is ClientState.CONNECTED


def test_concurrent_first_use_creates_one_client(fake_factory, transport):
    def slow_build(cfg):
        time.sleep(0.05)
        return StatsdClient.from_config(cfg, transport=transport)

    fake_factory.from_config.side_effect = slow_build
    configure()

    barrier = threading.Barrier(8)
    clients = []

    def racer():
        barrier.wait()
        clients.append(stats.get_client())

    threads = [threading.Thread(target=racer) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert fake_factory.from_config.call_count == 1
    assert len({id(client) for client in clients}) == 1


def test_incr_is_buffered(fake_factory, transport):
    configure()
    assert stats.incr('hits')
    assert stats.incr('hits')

    client = stats.get_client()
    assert client.buffered_count() == 1
    client.flush()
    assert transport.lines == ['hits:2|c|@1.000000']


def test_gauges_and_timings_are_dispatched(fake_factory, transport, wait_until):
    configure(project='svc')
    stats.gauge('mem', -5)
    stats.fgauge('load', 0.5)
    stats.timing('req', timedelta(milliseconds=1500))
    stats.decr('jobs', 2)

    assert wait_until(lambda: len(transport.lines) == 5)
    assert transport.lines == [
        'svc.mem:0|g|@1.000000',
        'svc.mem:-5|g|@1.000000',
        'svc.load:0.5|g|@1.000000',
        'svc.req:1500|ms|@1.000000',
        'svc.jobs:-2|c|@1.000000',
    ]


def test_plain_forms_use_configured_rate(fake_factory):
    configure(sample_rate=1.0)
    with patch.object(StatsdClient, 'submit', return_value=True) as submit:
        stats.timing('req', 5)

    sample = submit.call_args.args[0]
    assert sample.sample_rate == 1.0
    assert sample.value == 5


def test_setup_replaces_previous_client(fake_factory):
    configure()
    first = stats.get_client()

    configure(project='other')
    assert first.state is ClientState.CLOSED
    assert stats.get_client() is not first


def test_shutdown_closes_client(fake_factory, transport):
    configure()
    stats.incr('hits')
    client = stats.get_client()

    stats.shutdown()

    assert client.state is ClientState.CLOSED
    assert transport.lines == ['hits:1|c|@1.000000']
