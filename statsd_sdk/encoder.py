"""
Formatting of metrics into StatsD protocol lines.

A line has the form ``[<prefix>.]<bucket>:<value>|<type>|@<sample_rate>``
and is sent as a single UDP datagram.
"""
from decimal import Decimal
from typing import Optional

from .metric import MetricSample, Number


def normalize_prefix(prefix: Optional[str]) -> str:
    """Strip trailing separators from a bucket prefix."""
    return (prefix or '').rstrip('.')


def format_value(value: Number) -> str:
    """
    Render a metric value, keeping integers and floats distinct.

    Args:
        value (int or float): The metric value

    Returns:
        str: ``5`` for integers, the shortest round-tripping form for floats
    """
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    return repr(float(value))


def format_rate(sample_rate: float) -> str:
    """
    Render a sample rate with six decimals, or more when six would lose precision.

    Args:
        sample_rate (float): The sample rate

    Returns:
        str: ``0.500000`` for 0.5, ``0.0000001`` for 1e-7
    """
    rate = float(sample_rate)
    text = f"{rate:f}"
    if float(text) == rate:
        return text
    # repr is the shortest form that round-trips, Decimal expands its exponent
    return format(Decimal(repr(rate)), 'f')


def encode(bucket: str, value: Number, type_code: str, sample_rate: float,
           prefix: Optional[str] = None) -> bytes:
    """
    Encode one metric as a StatsD line.

    Args:
        bucket (str): Metric name
        value (int or float): Metric value
        type_code (str): 'c', 'g' or 'ms'
        sample_rate (float): Sample rate the value was recorded at
        prefix (str, optional): Prefix joined to the bucket with a dot

    Returns:
        bytes: The encoded line
    """
    prefix = normalize_prefix(prefix)
    if prefix:
        bucket = f"{prefix}.{bucket}"
    line = f"{bucket}:{format_value(value)}|{type_code}|@{format_rate(sample_rate)}"
    return line.encode('utf-8')


def encode_sample(sample: MetricSample, prefix: Optional[str] = None) -> bytes:
    """Encode a MetricSample as a StatsD line."""
    return encode(sample.name, sample.value, sample.type_code, sample.sample_rate, prefix)
