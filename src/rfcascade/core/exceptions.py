"""Error taxonomy for cascade calculations and chain reduction."""

from typing import Any, Optional


class CascadeError(ValueError):
    """Base class for all rfcascade errors."""


class SpecificationError(CascadeError):
    """Raised when raw specification inputs are invalid."""


class MissingSpecificationError(CascadeError):
    """Raised when a stage has no spec for the requested frequency/direction."""

    def __init__(self, component: Any, frequency: str, direction: Any):
        self.component = component
        self.frequency = frequency
        self.direction = direction
        direction_name = getattr(direction, "value", direction)
        super().__init__(
            f"Component '{component.name}' has no {direction_name} specification at {frequency} GHz"
        )


class CompressionError(CascadeError):
    """Raised when a forward-direction stage is driven past its output P1dB.

    ``result`` holds the partial cascade; its stage table already contains
    the row of the offending stage.
    """

    def __init__(self, component: Any, output_power_dbm: float, op1db_dbm: float,
                 result: Optional[Any] = None):
        self.component = component
        self.output_power_dbm = output_power_dbm
        self.op1db_dbm = op1db_dbm
        self.overshoot_db = output_power_dbm - op1db_dbm
        self.result = result
        super().__init__(
            f"Component '{component.name}' is compressed: Pout {output_power_dbm:.2f} dBm "
            f"exceeds P1dB {op1db_dbm:.2f} dBm by {self.overshoot_db:.2f} dB"
        )


class TopologyError(CascadeError):
    """Raised when a chain or merge selection is not a single acyclic path."""


class NoCommonFrequencyError(CascadeError):
    """Raised when a merge selection shares no declared frequency."""
