#!/usr/bin/env python3
"""
CLI application for collecting host metrics and emitting them to StatsD.
"""
import argparse
import importlib
import inspect
import json
import logging
import os
import pkgutil
import sys
import time
from typing import Any, Dict, List, Optional, Tuple, Type

from statsd_sdk import config as sdk_config
from statsd_sdk.collector import Collector
from statsd_sdk.config import StatsdConfig
from statsd_sdk.errors import StatsdError
from statsd_sdk.statsd_client import StatsdClient

logger = logging.getLogger(__name__)


class CollectorRegistry:
    """
    Registry for dynamically discovering and instantiating collectors.
    """

    def __init__(self):
        self.collectors: Dict[str, Type[Collector]] = {}

    def discover_collectors(self, package_name: str = 'collectors') -> None:
        """
        Discover all collector classes that inherit from the base Collector class.
        """
        try:
            package = importlib.import_module(package_name)
        except ImportError as e:
            logger.warning("Could not import collector package %s: %s", package_name, e)
            return

        for module_name in self._find_collector_modules(package):
            try:
                module = importlib.import_module(module_name)
                self._register_collectors_from_module(module)
            except ImportError as e:
                logger.warning("Could not import collector module %s: %s", module_name, e)

    def _find_collector_modules(self, package) -> List[str]:
        modules = []
        prefix = package.__name__ + "."

        for _, name, is_pkg in pkgutil.iter_modules(package.__path__, prefix):
            if is_pkg:
                try:
                    subpackage = importlib.import_module(name)
                    modules.extend(self._find_collector_modules(subpackage))
                except ImportError as e:
                    logger.warning("Could not import collector package %s: %s", name, e)
            else:
                modules.append(name)

        return modules

    def _register_collectors_from_module(self, module) -> None:
        for _, obj in inspect.getmembers(module, inspect.isclass):
            if issubclass(obj, Collector) and obj is not Collector and not inspect.isabstract(obj):
                collector_type = obj.__name__.replace('Collector', '').lower()
                self.collectors[collector_type] = obj
                logger.debug("Registered collector: %s from class %s", collector_type, obj.__name__)

    def get_collector_class(self, collector_type: str) -> Optional[Type[Collector]]:
        return self.collectors.get(collector_type.lower())

    def get_available_collectors(self) -> List[str]:
        return sorted(self.collectors)


collector_registry = CollectorRegistry()


def setup_logging(log_level: str) -> None:
    """
    Setup logging with the specified log level.

    Args:
        log_level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {log_level}")

    logging.basicConfig(
        level=numeric_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def build_client(args: argparse.Namespace) -> StatsdClient:
    """
    Create a StatsD client from command line arguments.

    Args:
        args (argparse.Namespace): Command line arguments

    Returns:
        StatsdClient: The connected client
    """
    cfg = StatsdConfig(
        host=args.host,
        port=int(args.port),
        project=args.project or '',
        sample_rate=float(args.sample_rate),
        flush_interval=float(args.flush_interval),
        queue_size=int(args.queue_size)
    )
    return StatsdClient.from_config(cfg)


def parse_collector_spec(spec: str) -> Tuple[str, Dict[str, Any]]:
    """
    Parse a collector specification string into a collector type and parameters.

    Args:
        spec (str): Collector specification in format "type:param1=value1,param2=value2"

    Returns:
        tuple: (collector_type, parameters_dict)
    """
    parts = spec.split(':', 1)
    collector_type = parts[0].strip().lower()
    if collector_type.endswith('collector'):
        collector_type = collector_type[:-len('collector')]

    params = {}
    if len(parts) > 1 and parts[1].strip():
        for param in parts[1].strip().split(','):
            if '=' in param:
                key, value = param.split('=', 1)
                params[key.strip()] = value.strip()

    return collector_type, params


def instantiate_collector(collector_type: str, collector_args: Dict[str, Any]) -> Optional[Collector]:
    """
    Instantiate a collector of the specified type with the provided arguments.

    Returns:
        Collector: An instance of the requested collector or None if not found
    """
    collector_class = collector_registry.get_collector_class(collector_type)

    if not collector_class:
        available = collector_registry.get_available_collectors()
        logger.error("Collector type not found: %s. Available collectors: %s",
                     collector_type, available if available else "None discovered")
        return None

    metric_name = collector_args.pop('metric_name', None)
    try:
        collector = collector_class(**collector_args)
    except Exception as e:
        logger.error("Error instantiating collector %s: %s", collector_type, e)
        return None

    if metric_name:
        collector.metric_name = metric_name
    return collector


def load_config_from_file(config_file: str) -> Dict[str, Any]:
    """
    Load configuration from a JSON file.

    Args:
        config_file (str): Path to the JSON config file

    Returns:
        dict: Configuration dictionary with argument names as keys
    """
    if not os.path.exists(config_file):
        logger.error("Config file not found: %s", config_file)
        return {}

    try:
        with open(config_file, 'r') as f:
            config = json.load(f)
            logger.debug("Loaded configuration from %s: %s", config_file, config)
            return config
    except (json.JSONDecodeError, ValueError) as e:
        logger.error("Error parsing config file %s: %s", config_file, e)
        return {}


def merge_config_with_args(config: Dict[str, Any], args: argparse.Namespace) -> argparse.Namespace:
    """
    Merge configuration from a file with command line arguments.
    Command line arguments take precedence over config file values.

    Args:
        config (dict): Configuration dictionary from file
        args (argparse.Namespace): Command line arguments

    Returns:
        argparse.Namespace: Updated arguments namespace
    """
    args_dict = vars(args).copy()

    for key, value in config.items():
        arg_key = key.replace('-', '_')
        if args_dict.get(arg_key) is None:
            args_dict[arg_key] = value

    return argparse.Namespace(**args_dict)


def run_round(client: StatsdClient, collectors: List[Collector], dry_run: bool = False) -> Dict[str, Any]:
    """
    Run every collector once, timing the round.

    Args:
        client (StatsdClient): The client to send through
        collectors (list): Collectors to run
        dry_run (bool): Log samples instead of sending them

    Returns:
        dict: Readings keyed by collector name
    """
    results = {}
    start = time.monotonic()

    for collector in collectors:
        results[collector.name] = collector.collect_and_send(client, dry_run=dry_run)

    if not dry_run:
        elapsed_ms = int((time.monotonic() - start) * 1000)
        try:
            client.incr('collector.rounds')
            client.timing('collector.round_time', elapsed_ms)
        except StatsdError as e:
            logger.warning("Failed to record round metrics: %s", e)

    return results


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Collect host metrics and send them to a StatsD server.',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument('--config-file', type=str,
                        help='Path to JSON configuration file')
    parser.add_argument('--log-level', type=str, default=None,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help=f'Log level (default: {sdk_config.LOG_LEVEL})')
    parser.add_argument('--interval', type=float, default=None,
                        help='Interval between collections in seconds (default: 60)')
    parser.add_argument('--count', type=int, default=None,
                        help='Number of collection rounds, 0 for infinite (default: 0)')
    parser.add_argument('--dry-run', action='store_true', default=None,
                        help='Do not send metrics, just log them')
    parser.add_argument('--collectors', type=str, nargs='*', default=None,
                        help='Collectors to run in format "type:param1=value1,param2=value2"')

    # StatsD configuration
    parser.add_argument('--host', type=str, default=None,
                        help=f'StatsD server host (default: {sdk_config.HOST})')
    parser.add_argument('--port', type=int, default=None,
                        help=f'StatsD server port (default: {sdk_config.PORT})')
    parser.add_argument('--project', type=str, default=None,
                        help='Prefix for every metric name')
    parser.add_argument('--sample-rate', type=float, default=None,
                        help='Default sample rate between 0 and 1')
    parser.add_argument('--flush-interval', type=float, default=None,
                        help=f'Seconds between counter flushes (default: {sdk_config.FLUSH_INTERVAL})')
    parser.add_argument('--queue-size', type=int, default=None,
                        help=f'Capacity of the async send queue (default: {sdk_config.QUEUE_SIZE})')

    return parser


DEFAULTS = {
    'log_level': sdk_config.LOG_LEVEL,
    'interval': 60,
    'count': 0,
    'dry_run': False,
    'collectors': ['system'],
    'host': sdk_config.HOST,
    'port': sdk_config.PORT,
    'project': sdk_config.PROJECT,
    'sample_rate': sdk_config.SAMPLE_RATE,
    'flush_interval': sdk_config.FLUSH_INTERVAL,
    'queue_size': sdk_config.QUEUE_SIZE,
}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments, filling gaps from the config file and defaults.

    Precedence is command line, then config file, then built-in defaults.
    """
    args = build_parser().parse_args(argv)

    if args.config_file:
        args = merge_config_with_args(load_config_from_file(args.config_file), args)

    return merge_config_with_args(DEFAULTS, args)


def main(argv: Optional[List[str]] = None) -> int:
    """Main function to parse arguments and run the collectors."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    collector_registry.discover_collectors()
    logger.info("Available collectors: %s", collector_registry.get_available_collectors())

    collectors = []
    for spec in args.collectors:
        collector_type, params = parse_collector_spec(spec)
        collector = instantiate_collector(collector_type, params)
        if collector:
            collectors.append(collector)

    if not collectors:
        logger.error("No usable collectors specified. Use --collectors to specify the collectors to run.")
        return 1

    try:
        client = build_client(args)
    except StatsdError as e:
        logger.error("Cannot start StatsD client: %s", e)
        return 1

    round_count = 0
    next_collection_time = time.time()
    try:
        while args.count == 0 or round_count < args.count:
            round_count += 1
            logger.info("Collection round %s%s", round_count,
                        ("/%s" % args.count if args.count > 0 else ""))
            run_round(client, collectors, dry_run=args.dry_run)

            if args.count == 0 or round_count < args.count:
                next_collection_time = max(next_collection_time + args.interval, time.time())
                wait_time = next_collection_time - time.time()
                if wait_time > 0:
                    logger.debug("Waiting %.2f seconds until next collection...", wait_time)
                    time.sleep(wait_time)
    except KeyboardInterrupt:
        logger.info("Collection interrupted by user.")
    finally:
        dropped = client.dropped_count()
        if dropped:
            logger.warning("%d metrics were dropped because the send queue was full", dropped)
        client.close()

    logger.info("Collection completed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
