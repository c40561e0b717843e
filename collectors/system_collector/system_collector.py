import logging
from typing import Any, Dict, List

import psutil

from statsd_sdk.collector import Collector
from statsd_sdk.metric import MetricKind, MetricSample

logger = logging.getLogger(__name__)


class SystemCollector(Collector):
    """Collector for CPU, memory, disk and process metrics."""

    default_metric_name = 'system'

    def __init__(self, disk_path: str = '/', sample_rate: float = 1.0):
        self.disk_path = disk_path
        self.sample_rate = float(sample_rate)

    def collect(self) -> Dict[str, Any]:
        """Collect system metrics.

        Returns:
            dict: CPU, memory and disk usage percentages and the process count
        """
        try:
            return {
                # Non-blocking, compares against the previous call
                'cpu_percent': psutil.cpu_percent(interval=None),
                'memory_percent': psutil.virtual_memory().percent,
                'disk_percent': psutil.disk_usage(self.disk_path).percent,
                'process_count': len(psutil.pids()),
            }
        except (psutil.Error, OSError) as e:
            logger.error("Error collecting system metrics: %s", str(e))
            raise RuntimeError(f"Error collecting system metrics: {str(e)}")

    def format_metrics(self, raw_metrics: Dict[str, Any]) -> List[MetricSample]:
        prefix = self.metric_name
        rate = self.sample_rate
        return [
            MetricSample(f"{prefix}.cpu.percent", float(raw_metrics['cpu_percent']), MetricKind.FLOAT_GAUGE, rate),
            MetricSample(f"{prefix}.memory.percent", float(raw_metrics['memory_percent']), MetricKind.FLOAT_GAUGE, rate),
            MetricSample(f"{prefix}.disk.percent", float(raw_metrics['disk_percent']), MetricKind.FLOAT_GAUGE, rate),
            MetricSample(f"{prefix}.processes", int(raw_metrics['process_count']), MetricKind.GAUGE, rate),
        ]
