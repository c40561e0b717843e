"""
Sampling gate and argument validation for recording calls.
"""
import random
from typing import Optional

from .errors import InvalidCountError, InvalidSampleRateError


def check_sample_rate(rate: float) -> None:
    """
    Validate a sample rate.

    Args:
        rate (float): Probability that an observation is sent

    Raises:
        InvalidSampleRateError: If rate is outside [0, 1]
    """
    if rate < 0 or rate > 1:
        raise InvalidSampleRateError(rate)


def check_count(count: int) -> None:
    """
    Validate a counter increment.

    Args:
        count (int): Amount to add to or remove from a counter

    Raises:
        InvalidCountError: If count is not positive
    """
    if count <= 0:
        raise InvalidCountError(count)


class Sampler:
    """Decides whether a sampled call fires, using one shared random source."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def should_fire(self, rate: float) -> bool:
        """
        Decide whether an observation at the given rate is sent.

        Args:
            rate (float): Sample rate, already validated

        Returns:
            bool: True if the observation should be recorded
        """
        if rate == 1:
            return True
        if rate <= 0:
            return False
        return self.rng.random() <= rate


default_sampler = Sampler()


def should_fire(rate: float) -> bool:
    """Decide whether an observation fires using the default sampler."""
    return default_sampler.should_fire(rate)
