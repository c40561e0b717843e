from collections import namedtuple
from unittest.mock import MagicMock, patch

from collectors.battery_collector.battery_collector import BatteryCollector
from collectors.system_collector.system_collector import SystemCollector
from statsd_sdk.collector import Collector
from statsd_sdk.errors import NotConnectedError
from statsd_sdk.metric import MetricKind, MetricSample


class StaticCollector(Collector):
    default_metric_name = 'static'

    def __init__(self, readings=None, error=None):
        self.readings = readings or {'value': 3}
        self.error = error

    def collect(self):
        if self.error:
            raise self.error
        return self.readings

    def format_metrics(self, raw_metrics):
        return [MetricSample(f"{self.metric_name}.value", raw_metrics['value'], MetricKind.GAUGE)]


def test_name_and_metric_name():
    collector = StaticCollector()
    assert collector.name == 'StaticCollector'
    assert collector.metric_name == 'static'

    collector.metric_name = 'custom'
    assert collector.metric_name == 'custom'


def test_collect_and_send_submits_samples():
    client = MagicMock()
    result = StaticCollector().collect_and_send(client)

    assert result == {'value': 3}
    client.submit.assert_called_once_with(MetricSample('static.value', 3, MetricKind.GAUGE))


def test_collection_error_increments_error_counter():
    client = MagicMock()
    result = StaticCollector(error=RuntimeError('sensor offline')).collect_and_send(client)

    assert result == {'error': 'sensor offline'}
    client.incr.assert_called_once_with('static.errors')
    client.submit.assert_not_called()


def test_dry_run_sends_nothing():
    client = MagicMock()
    StaticCollector().collect_and_send(client, dry_run=True)
    StaticCollector(error=RuntimeError('x')).collect_and_send(client, dry_run=True)

    client.submit.assert_not_called()
    client.incr.assert_not_called()


def test_send_errors_are_logged_not_raised():
    client = MagicMock()
    client.submit.side_effect = NotConnectedError()
    assert StaticCollector().collect_and_send(client) == {'value': 3}


def test_system_collector_formats_gauges():
    with patch('collectors.system_collector.system_collector.psutil') as fake_psutil:
        fake_psutil.Error = Exception
        fake_psutil.cpu_percent.return_value = 12.5
        fake_psutil.virtual_memory.return_value = MagicMock(percent=40.0)
        fake_psutil.disk_usage.return_value = MagicMock(percent=71.2)
        fake_psutil.pids.return_value = [1, 2, 3]

        collector = SystemCollector(sample_rate=0.5)
        samples = collector.format_metrics(collector.collect())

    assert samples == [
        MetricSample('system.cpu.percent', 12.5, MetricKind.FLOAT_GAUGE, 0.5),
        MetricSample('system.memory.percent', 40.0, MetricKind.FLOAT_GAUGE, 0.5),
        MetricSample('system.disk.percent', 71.2, MetricKind.FLOAT_GAUGE, 0.5),
        MetricSample('system.processes', 3, MetricKind.GAUGE, 0.5),
    ]


Battery = namedtuple('Battery', 'percent secsleft power_plugged')


def test_battery_collector_formats_gauges():
    with patch('collectors.battery_collector.battery_collector.psutil') as fake_psutil:
        fake_psutil.sensors_battery.return_value = Battery(87.0, 3600, True)
        collector = BatteryCollector()
        samples = collector.format_metrics(collector.collect())

    assert samples == [
        MetricSample('battery.percent', 87.0, MetricKind.FLOAT_GAUGE),
        MetricSample('battery.charging', 1, MetricKind.GAUGE),
    ]


def test_battery_collector_without_battery_reports_error():
    with patch('collectors.battery_collector.battery_collector.psutil') as fake_psutil:
        fake_psutil.sensors_battery.return_value = None
        result = BatteryCollector().safe_collect()

    assert result == {'error': 'Battery information not available'}
