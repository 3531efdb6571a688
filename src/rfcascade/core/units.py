"""Unit conversions between logarithmic and linear power quantities."""

import math
from typing import Union

import numpy as np


def db_to_linear(db_value: float) -> float:
    """Convert a power ratio in dB to a linear ratio."""
    return float(10 ** (db_value / 10.0))


def linear_to_db(linear_value: float) -> float:
    """Convert a linear power ratio to dB.

    Non-positive ratios map to negative infinity rather than raising.
    """
    if linear_value <= 0:
        return -math.inf
    return float(10 * np.log10(linear_value))


def dbm_to_mw(power_dbm: float) -> float:
    """Convert power from dBm to milliwatts."""
    return float(10 ** (power_dbm / 10.0))


def mw_to_dbm(power_mw: float) -> float:
    """Convert power from milliwatts to dBm.

    Non-positive powers map to negative infinity; infinite power stays infinite.
    """
    if power_mw <= 0:
        return -math.inf
    if math.isinf(power_mw):
        return math.inf
    return float(10 * np.log10(power_mw))


def frequency_key(frequency: Union[str, float, int]) -> str:
    """Normalise a frequency (GHz) to the text key used by spec tables.

    Frequencies are declared as text but compared numerically, so ``"1"``,
    ``1`` and ``"1.0"`` all map to ``"1.0"``.

    Raises:
        ValueError: If the value does not parse as a finite number.
    """
    try:
        value = float(frequency)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid frequency: {frequency!r}")
    if not math.isfinite(value):
        raise ValueError(f"Invalid frequency: {frequency!r}")
    return repr(value)
