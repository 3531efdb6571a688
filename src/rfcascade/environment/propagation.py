"""Free-space propagation loss for short air-gap segments."""

import math

import numpy as np
from scipy.constants import c as SPEED_OF_LIGHT

from rfcascade.utils.logger import get_logger

logger = get_logger(__name__)


def free_space_path_loss(frequency_ghz: float, distance_cm: float) -> float:
    """
    Calculate Free Space Path Loss, FSPL = 20*log10(4*pi*d*f/c).

    Args:
        frequency_ghz: Signal frequency in GHz.
        distance_cm: Path length in centimeters.

    Returns:
        Path loss in dB (non-negative). Zero for a non-positive distance or
        frequency, and inside the near field where 4*pi*d*f/c < 1.
    """
    if distance_cm <= 0 or frequency_ghz <= 0:
        return 0.0

    frequency_hz = frequency_ghz * 1e9
    distance_m = distance_cm / 100.0
    ratio = (4 * math.pi * distance_m * frequency_hz) / SPEED_OF_LIGHT
    if ratio < 1:
        # Near field; the far-field formula would report a gain
        logger.debug(f"FSPL near field: dist={distance_cm}cm, freq={frequency_ghz}GHz -> 0 dB")
        return 0.0

    fspl_db = float(20 * np.log10(ratio))
    logger.debug(f"FSPL calculation: dist={distance_cm}cm, freq={frequency_ghz}GHz -> Loss={fspl_db:.2f}dB")
    return fspl_db
