import logging
from typing import Any, Dict, List

import psutil

from statsd_sdk.collector import Collector
from statsd_sdk.metric import MetricKind, MetricSample

logger = logging.getLogger(__name__)


class BatteryCollector(Collector):
    """Collector for battery metrics."""

    default_metric_name = 'battery'

    def collect(self):
        """Collect battery metrics.

        Returns:
            dict: Battery charge percentage and charging status
        """
        battery = psutil.sensors_battery()
        if battery is None:
            raise RuntimeError('Battery information not available')

        return {
            'metric': battery.percent,
            'is_charging': bool(battery.power_plugged),
        }

    def format_metrics(self, raw_metrics: Dict[str, Any]) -> List[MetricSample]:
        """
        Format the raw battery readings as gauges.

        Args:
            raw_metrics (dict): Raw battery metrics from collect()

        Returns:
            list: Percentage and charging gauges
        """
        return [
            MetricSample(f"{self.metric_name}.percent", float(raw_metrics['metric']), MetricKind.FLOAT_GAUGE),
            MetricSample(f"{self.metric_name}.charging", int(raw_metrics.get('is_charging', False)), MetricKind.GAUGE),
        ]


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO,
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    collector = BatteryCollector()
    result = collector.safe_collect()

    if 'error' not in result:
        print("Battery: %s%% (%s)" % (result['metric'], 'charging' if result['is_charging'] else 'discharging'))
    else:
        print("Error: %s" % result['error'])
