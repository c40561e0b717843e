"""
Base collector class for standardizing host metric collection.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from .errors import StatsdError
from .metric import MetricSample
from .statsd_client import StatsdClient

logger = logging.getLogger(__name__)


class Collector(ABC):
    """
    Abstract base class for all metric collectors.

    All collectors should inherit from this class and implement the required methods:
    - collect(): Implement the specific data collection logic
    - format_metrics(): Turn the raw readings into StatsD samples
    """

    default_metric_name = 'collector'

    @abstractmethod
    def collect(self) -> Dict[str, Any]:
        """
        Collect metrics.

        Returns:
            dict: The collected readings
        """
        pass

    @property
    def name(self) -> str:
        """
        Get the name of the collector.

        Returns:
            str: The name of the collector (class name by default)
        """
        return self.__class__.__name__

    @property
    def metric_name(self) -> str:
        """
        Get the bucket prefix used for this collector's metrics.

        Returns:
            str: The custom metric name if one was set, otherwise the default
        """
        return getattr(self, '_metric_name', None) or self.default_metric_name

    @metric_name.setter
    def metric_name(self, value: str) -> None:
        self._metric_name = value

    def safe_collect(self) -> Dict[str, Any]:
        """
        Safely collect metrics, catching any exceptions.

        Returns:
            dict: The collected metrics or an error dict if collection fails
        """
        try:
            return self.collect()
        except Exception as e:
            logger.error("Error collecting metrics from %s: %s", self.name, str(e))
            return {'error': str(e)}

    @abstractmethod
    def format_metrics(self, raw_metrics: Dict[str, Any]) -> List[MetricSample]:
        """
        Format the raw readings as StatsD samples.

        Args:
            raw_metrics (dict): Raw readings from collect()

        Returns:
            list: Samples ready to send
        """
        pass

    def collect_and_send(self, client: StatsdClient, dry_run: bool = False) -> Dict[str, Any]:
        """
        Collect, format and send metrics.

        Samples go through the client's asynchronous path, so a slow or
        unreachable server never stalls collection. Failed collections
        increment ``<metric_name>.errors``.

        Args:
            client (StatsdClient): The client to send through
            dry_run (bool): If True, log the samples instead of sending them

        Returns:
            dict: Collected readings or error information
        """
        metrics = self.safe_collect()

        if 'error' in metrics:
            logger.error("%s collection error: %s", self.name, metrics['error'])
            if not dry_run:
                client.incr(f"{self.metric_name}.errors")
            return metrics

        samples = self.format_metrics(metrics)

        if dry_run:
            logger.info("DRY RUN: Would send %s metrics: %s", self.name, samples)
            return metrics

        for sample in samples:
            try:
                client.submit(sample)
            except StatsdError as e:
                logger.warning("Cannot send %s: %s", sample.name, e)

        return metrics
