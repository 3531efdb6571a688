"""Data structures shared by the component model and the cascade engine."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from rfcascade.core.units import db_to_linear, dbm_to_mw

# --- Enumerations ---

class Direction(Enum):
    """Signal flow through a chain. Values match the serialized spec keys."""
    FORWARD = "TX"  # Transmit path
    REVERSE = "RX"  # Receive path

    @classmethod
    def parse(cls, value: Union["Direction", str]) -> "Direction":
        """Accept a Direction, its value ('TX'/'RX') or its name ('forward'/'reverse')."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().upper()
        for member in cls:
            if text in (member.value, member.name):
                return member
        raise ValueError(f"Unknown direction: {value!r}")


class ComponentCategory(Enum):
    """Closed set of component variants."""
    ACTIVE = "active"
    PASSIVE = "passive"
    ANTENNA = "antenna"
    MERGED = "merged"
    PROPAGATION_LOSS = "propagation_loss"
    PHASED_ARRAY = "phased_array"

    @property
    def is_passive(self) -> bool:
        return self in (ComponentCategory.PASSIVE, ComponentCategory.PROPAGATION_LOSS)

    @property
    def is_antenna(self) -> bool:
        return self in (ComponentCategory.ANTENNA, ComponentCategory.PHASED_ARRAY)

# --- Specifications ---

@dataclass(frozen=True)
class ComponentSpec:
    """Resolved specification of one component at one frequency and direction.

    ``raw`` keeps the untransformed dB-domain inputs the spec was resolved
    from; only those are ever serialized. The linear fields are caches.
    Merged components also carry the active/passive/antenna gain partition,
    whose three parts sum to ``gain_db``.
    """
    gain_db: float
    noise_figure_db: float
    op1db_dbm: float
    gain_linear: float
    nf_linear: float
    op1db_mw: float
    raw: Dict[str, float] = field(default_factory=dict)
    active_gain_db: Optional[float] = None
    passive_gain_db: Optional[float] = None
    antenna_gain_db: Optional[float] = None

    @classmethod
    def from_db(cls,
                gain_db: float,
                noise_figure_db: float,
                op1db_dbm: float,
                raw: Optional[Dict[str, float]] = None,
                **partition: float) -> "ComponentSpec":
        """Build a spec from dB values, computing the linear caches."""
        return cls(
            gain_db=gain_db,
            noise_figure_db=noise_figure_db,
            op1db_dbm=op1db_dbm,
            gain_linear=db_to_linear(gain_db),
            nf_linear=db_to_linear(noise_figure_db),
            op1db_mw=dbm_to_mw(op1db_dbm),
            raw=dict(raw or {}),
            **partition
        )

    @property
    def has_partition(self) -> bool:
        return self.active_gain_db is not None

# --- Cascade results ---

@dataclass
class StageResult:
    """One row of the per-stage cascade table, cumulative through this stage."""
    label: str
    component_id: str
    cumulative_gain_db: float
    cumulative_nf_db: float
    cumulative_power_dbm: float


@dataclass
class StagePower:
    """Input and output power of one stage during a single run."""
    input_dbm: float
    output_dbm: float


@dataclass
class CascadeResult:
    """Outcome of one cascade pass.

    ``stage_powers`` is the per-run side table of stage input/output powers,
    keyed by component id. It belongs to the caller and is never stored on
    the components themselves.
    """
    frequency: str
    direction: Direction
    input_power_dbm: float
    stages: List[StageResult] = field(default_factory=list)
    stage_powers: Dict[str, StagePower] = field(default_factory=dict)
    complete: bool = False

    total_gain_db: float = 0.0
    total_nf_db: float = 0.0
    output_p1db_dbm: Optional[float] = None  # forward only; inf when unbounded
    final_output_dbm: float = 0.0            # Pout, or EIRP when the chain ends in an antenna

    active_gain_db: float = 0.0
    passive_gain_db: float = 0.0
    antenna_gain_db: float = 0.0

    # Receive-direction G/T budget
    g_ant_db: Optional[float] = None
    t_ant_k: Optional[float] = None
    t_rx_k: Optional[float] = None
    t_sys_k: Optional[float] = None
    g_over_t_dbk: Optional[float] = None

    @property
    def eirp_dbm(self) -> Optional[float]:
        """Final forward output power, None for receive runs."""
        if self.direction is not Direction.FORWARD:
            return None
        return self.final_output_dbm

    @property
    def t_sys_dbk(self) -> Optional[float]:
        if self.t_sys_k is None:
            return None
        return 10 * math.log10(self.t_sys_k) if self.t_sys_k > 0 else -math.inf

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data view for YAML/JSON export."""
        data: Dict[str, Any] = {
            'frequency': self.frequency,
            'direction': self.direction.value,
            'input_power_dbm': self.input_power_dbm,
            'complete': self.complete,
            'stages': [
                {
                    'label': stage.label,
                    'component_id': stage.component_id,
                    'cumulative_gain_db': stage.cumulative_gain_db,
                    'cumulative_nf_db': stage.cumulative_nf_db,
                    'cumulative_power_dbm': stage.cumulative_power_dbm,
                }
                for stage in self.stages
            ],
            'stage_powers': {
                comp_id: {'input_dbm': power.input_dbm, 'output_dbm': power.output_dbm}
                for comp_id, power in self.stage_powers.items()
            },
            'total_gain_db': self.total_gain_db,
            'total_nf_db': self.total_nf_db,
            'final_output_dbm': self.final_output_dbm,
            'active_gain_db': self.active_gain_db,
            'passive_gain_db': self.passive_gain_db,
            'antenna_gain_db': self.antenna_gain_db,
        }
        if self.direction is Direction.FORWARD:
            data['output_p1db_dbm'] = self.output_p1db_dbm
        else:
            data.update({
                'g_ant_db': self.g_ant_db,
                't_ant_k': self.t_ant_k,
                't_rx_k': self.t_rx_k,
                't_sys_k': self.t_sys_k,
                'g_over_t_dbk': self.g_over_t_dbk,
            })
        return data
