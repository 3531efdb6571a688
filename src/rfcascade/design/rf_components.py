"""RF component definitions for cascade budgeting.

Every component keeps a table of resolved specifications keyed by frequency
(text, compared numerically) and direction. The category of a component is
its class; each class knows how to turn raw dB-domain inputs into a
``ComponentSpec`` for its own kind of stage.
"""

import copy
import math
import uuid
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type, Union

from rfcascade.core.constants import (
    DEFAULT_ARRAY_COLS, DEFAULT_ARRAY_ROWS, DEFAULT_FREQUENCY,
    DEFAULT_PROPAGATION_DISTANCE_CM, UNCOMPRESSIBLE_OP1DB_DBM
)
from rfcascade.core.data_structures import ComponentCategory, ComponentSpec, Direction
from rfcascade.core.exceptions import SpecificationError
from rfcascade.core.units import frequency_key
from rfcascade.design.antenna_array import array_gain_db
from rfcascade.environment.propagation import free_space_path_loss
from rfcascade.utils.logger import get_logger

logger = get_logger(__name__)

RawSpec = Dict[str, float]
FrequencyLike = Union[str, float, int]


def _raw_value(raw: Mapping[str, Any], key: str, default: float) -> float:
    """Read one numeric raw input, falling back to ``default`` when absent."""
    value = raw.get(key)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        raise SpecificationError(f"Invalid value for '{key}': {value!r}")


def _direction_entry(modes: Mapping[Any, Any], direction: Direction) -> RawSpec:
    """Pick one direction's raw inputs out of a serialized frequency entry."""
    entry = modes.get(direction.value)
    if entry is None:
        entry = modes.get(direction)
    return dict(entry or {})


class RFComponent:
    """Base class for all RF components."""

    category = ComponentCategory.ACTIVE
    default_name = "RF Component"

    def __init__(self,
                 component_id: Optional[str] = None,
                 name: Optional[str] = None,
                 specs_by_freq: Optional[Mapping[FrequencyLike, Mapping[str, RawSpec]]] = None):
        """Initialize the RF component.

        Args:
            component_id: Unique ID for the component (auto-generated if None)
            name: Human-readable name
            specs_by_freq: Serialized raw specs, ``{freq: {'TX': {...}, 'RX': {...}}}``.
                When omitted the component gets one default frequency with
                zero-valued specs.
        """
        self.id = component_id or str(uuid.uuid4())
        self.name = name or self.default_name
        self.specs_by_freq: Dict[str, Dict[Direction, ComponentSpec]] = {}
        self.load_specs(specs_by_freq)

    # --- Category helpers ---

    @property
    def is_passive(self) -> bool:
        return self.category.is_passive

    @property
    def is_antenna(self) -> bool:
        return self.category.is_antenna

    @property
    def is_merged(self) -> bool:
        return self.category is ComponentCategory.MERGED

    # --- Spec resolution ---

    def resolve_spec(self, frequency: str, direction: Direction, raw: Mapping[str, Any]) -> ComponentSpec:
        """Turn raw dB-domain inputs into a resolved spec. Pure; stores nothing."""
        raise NotImplementedError

    def load_specs(self, specs_by_freq: Optional[Mapping[FrequencyLike, Mapping[str, RawSpec]]]) -> None:
        """Replace the whole spec table from serialized raw inputs.

        A frequency entry with only one direction filled in reuses it for the
        other direction.
        """
        table: Dict[str, Dict[Direction, ComponentSpec]] = {}
        for freq, modes in (specs_by_freq or {}).items():
            key = frequency_key(freq)
            modes = modes or {}
            raw_tx = _direction_entry(modes, Direction.FORWARD)
            raw_rx = _direction_entry(modes, Direction.REVERSE)
            final_tx = raw_tx if raw_tx else raw_rx
            final_rx = raw_rx if raw_rx else final_tx
            table[key] = {
                Direction.FORWARD: self.resolve_spec(key, Direction.FORWARD, final_tx),
                Direction.REVERSE: self.resolve_spec(key, Direction.REVERSE, final_rx),
            }
        if not table:
            table[DEFAULT_FREQUENCY] = self._default_entry(DEFAULT_FREQUENCY)
        self.specs_by_freq = table

    def _default_entry(self, key: str) -> Dict[Direction, ComponentSpec]:
        return {direction: self.resolve_spec(key, direction, {}) for direction in Direction}

    def _recompute(self) -> None:
        """Re-resolve every stored spec from its own raw inputs."""
        for key, modes in self.specs_by_freq.items():
            for direction, spec in list(modes.items()):
                modes[direction] = self.resolve_spec(key, direction, spec.raw)

    def set_spec(self, frequency: FrequencyLike, direction: Union[Direction, str],
                 raw: Mapping[str, Any]) -> ComponentSpec:
        """Resolve and store one frequency/direction spec.

        An undeclared frequency is created with default specs in both
        directions before the requested direction is written.

        Returns:
            The stored ComponentSpec.
        """
        key = frequency_key(frequency)
        direction = Direction.parse(direction)
        spec = self.resolve_spec(key, direction, raw)
        if key not in self.specs_by_freq:
            self.specs_by_freq[key] = self._default_entry(key)
            logger.debug(f"Declared frequency {key} GHz on '{self.name}'")
        self.specs_by_freq[key][direction] = spec
        return spec

    def get_spec(self, frequency: FrequencyLike, direction: Union[Direction, str]) -> Optional[ComponentSpec]:
        """Look up a resolved spec; None when the frequency/direction is undeclared."""
        try:
            key = frequency_key(frequency)
        except ValueError:
            return None
        modes = self.specs_by_freq.get(key)
        if modes is None:
            return None
        return modes.get(Direction.parse(direction))

    def raw_spec(self, frequency: FrequencyLike, direction: Union[Direction, str]) -> RawSpec:
        """The untransformed inputs behind a spec (empty if undeclared)."""
        spec = self.get_spec(frequency, direction)
        return dict(spec.raw) if spec else {}

    def available_frequencies(self) -> List[str]:
        """Declared frequencies in ascending numeric order."""
        return sorted(self.specs_by_freq, key=float)

    def has_frequency(self, frequency: FrequencyLike) -> bool:
        return self.get_spec(frequency, Direction.FORWARD) is not None

    def remove_frequency(self, frequency: FrequencyLike) -> None:
        """Drop a declared frequency. At least one frequency always remains.

        Raises:
            SpecificationError: If the frequency is the last one declared.
        """
        key = frequency_key(frequency)
        if key not in self.specs_by_freq:
            return
        if len(self.specs_by_freq) <= 1:
            raise SpecificationError(f"'{self.name}' must keep at least one frequency")
        del self.specs_by_freq[key]

    # --- Serialization ---

    def _config_dict(self) -> Dict[str, Any]:
        """Auto-calculator or member data specific to a category."""
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to plain data. Only raw dB-domain inputs are written."""
        specs_to_save = {
            key: {
                direction.value: dict(self.specs_by_freq[key][direction].raw)
                for direction in Direction
            }
            for key in self.available_frequencies()
        }
        data = {
            'id': self.id,
            'name': self.name,
            'category': self.category.value,
            'specs_by_freq': specs_to_save,
        }
        data.update(self._config_dict())
        return data

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any], component_id: Optional[str]) -> "RFComponent":
        return cls(component_id=component_id,
                   name=data.get('name'),
                   specs_by_freq=data.get('specs_by_freq'))

    def duplicate(self, name: Optional[str] = None) -> "RFComponent":
        """Copy this component under a fresh id."""
        clone = component_from_dict(self.to_dict(), keep_id=False)
        clone.name = name or f"{self.name} (Copy)"
        return clone

    def __repr__(self) -> str:
        freqs = self.available_frequencies()
        shown = ", ".join(freqs[:3]) + ("..." if len(freqs) > 3 else "")
        return f"<{type(self).__name__} '{self.name}' ({shown} GHz)>"


class ActiveComponent(RFComponent):
    """Amplifier, mixer or any stage with explicit gain, NF and output P1dB."""

    category = ComponentCategory.ACTIVE
    default_name = "Amplifier"

    def resolve_spec(self, frequency: str, direction: Direction, raw: Mapping[str, Any]) -> ComponentSpec:
        gain_db = _raw_value(raw, 'gain_db', 0.0)
        nf_db = _raw_value(raw, 'nf_db', 0.0)
        stored = {'gain_db': gain_db, 'nf_db': nf_db}
        if direction is Direction.REVERSE:
            # Receive-path stages are never checked for compression
            op1db_dbm = UNCOMPRESSIBLE_OP1DB_DBM
        else:
            op1db_dbm = _raw_value(raw, 'op1db_dbm', UNCOMPRESSIBLE_OP1DB_DBM)
            stored['op1db_dbm'] = op1db_dbm
        return ComponentSpec.from_db(gain_db, nf_db, op1db_dbm, raw=stored)


class PassiveComponent(RFComponent):
    """Filter, attenuator, divider, trace: a lossy two-port with F = L."""

    category = ComponentCategory.PASSIVE
    default_name = "Filter"

    def _loss_db(self, frequency: str, raw: Mapping[str, Any]) -> float:
        return _raw_value(raw, 'loss_db', 0.0)

    def resolve_spec(self, frequency: str, direction: Direction, raw: Mapping[str, Any]) -> ComponentSpec:
        loss_db = self._loss_db(frequency, raw)
        if loss_db < 0:
            raise SpecificationError(
                f"Passive component '{self.name}' needs a non-negative loss, got {loss_db} dB"
            )
        return ComponentSpec.from_db(
            gain_db=-loss_db,
            noise_figure_db=loss_db,
            op1db_dbm=UNCOMPRESSIBLE_OP1DB_DBM,
            raw={'loss_db': loss_db}
        )


class AntennaComponent(RFComponent):
    """Antenna stage. Its NF is stored but never enters the noise cascade."""

    category = ComponentCategory.ANTENNA
    default_name = "Antenna"

    def resolve_spec(self, frequency: str, direction: Direction, raw: Mapping[str, Any]) -> ComponentSpec:
        gain_db = _raw_value(raw, 'gain_db', 0.0)
        nf_db = _raw_value(raw, 'nf_db', 0.0)
        return ComponentSpec.from_db(
            gain_db=gain_db,
            noise_figure_db=nf_db,
            op1db_dbm=UNCOMPRESSIBLE_OP1DB_DBM,
            raw={'gain_db': gain_db, 'nf_db': nf_db}
        )


class PhasedArray(AntennaComponent):
    """Antenna whose gain is the aperture gain of a rows x cols element grid."""

    category = ComponentCategory.PHASED_ARRAY
    default_name = "Array"

    def __init__(self,
                 component_id: Optional[str] = None,
                 name: Optional[str] = None,
                 specs_by_freq: Optional[Mapping[FrequencyLike, Mapping[str, RawSpec]]] = None,
                 rows: int = DEFAULT_ARRAY_ROWS,
                 cols: int = DEFAULT_ARRAY_COLS):
        self._gain_db = array_gain_db(rows, cols)
        self.rows = int(rows)
        self.cols = int(cols)
        super().__init__(component_id, name, specs_by_freq)

    @property
    def element_count(self) -> int:
        return self.rows * self.cols

    def resolve_spec(self, frequency: str, direction: Direction, raw: Mapping[str, Any]) -> ComponentSpec:
        raw = dict(raw)
        raw['gain_db'] = self._gain_db
        return super().resolve_spec(frequency, direction, raw)

    def configure(self, rows: Optional[int] = None, cols: Optional[int] = None) -> None:
        """Change the element grid and recompute every declared frequency."""
        rows = self.rows if rows is None else rows
        cols = self.cols if cols is None else cols
        self._gain_db = array_gain_db(rows, cols)
        self.rows, self.cols = int(rows), int(cols)
        self._recompute()
        logger.debug(f"Array '{self.name}' set to {self.rows}x{self.cols}: {self._gain_db:.2f} dB")

    def _config_dict(self) -> Dict[str, Any]:
        return {'array': {'rows': self.rows, 'cols': self.cols}}

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any], component_id: Optional[str]) -> "PhasedArray":
        array_cfg = data.get('array') or {}
        return cls(component_id=component_id,
                   name=data.get('name'),
                   specs_by_freq=data.get('specs_by_freq'),
                   rows=array_cfg.get('rows', DEFAULT_ARRAY_ROWS),
                   cols=array_cfg.get('cols', DEFAULT_ARRAY_COLS))


class PropagationLoss(PassiveComponent):
    """Free-space path segment ("air loss").

    In ``calc`` mode the loss at every frequency follows from the distance;
    in ``manual`` mode it is entered per frequency like any passive.
    """

    category = ComponentCategory.PROPAGATION_LOSS
    default_name = "Air Loss"
    MODES = ('calc', 'manual')

    def __init__(self,
                 component_id: Optional[str] = None,
                 name: Optional[str] = None,
                 specs_by_freq: Optional[Mapping[FrequencyLike, Mapping[str, RawSpec]]] = None,
                 distance_cm: float = DEFAULT_PROPAGATION_DISTANCE_CM,
                 mode: str = 'calc'):
        self.mode = self._check_mode(mode)
        self.distance_cm = self._check_distance(distance_cm)
        super().__init__(component_id, name, specs_by_freq)

    @classmethod
    def _check_mode(cls, mode: str) -> str:
        if mode not in cls.MODES:
            raise SpecificationError(f"Unknown propagation mode '{mode}', expected one of {cls.MODES}")
        return mode

    @staticmethod
    def _check_distance(distance_cm: float) -> float:
        try:
            distance_cm = float(distance_cm)
        except (TypeError, ValueError):
            raise SpecificationError(f"Invalid propagation distance: {distance_cm!r}")
        if math.isnan(distance_cm) or distance_cm < 0:
            logger.warning(f"Propagation distance {distance_cm} cm clamped to 0")
            return 0.0
        return distance_cm

    def _loss_db(self, frequency: str, raw: Mapping[str, Any]) -> float:
        if self.mode == 'calc':
            return free_space_path_loss(float(frequency), self.distance_cm)
        return super()._loss_db(frequency, raw)

    def configure(self, distance_cm: Optional[float] = None, mode: Optional[str] = None) -> None:
        """Change distance and/or mode and recompute every declared frequency."""
        if mode is not None:
            self.mode = self._check_mode(mode)
        if distance_cm is not None:
            self.distance_cm = self._check_distance(distance_cm)
        self._recompute()
        logger.debug(f"Propagation '{self.name}' set to {self.mode} mode, {self.distance_cm} cm")

    def _config_dict(self) -> Dict[str, Any]:
        return {'propagation': {'mode': self.mode, 'distance_cm': self.distance_cm}}

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any], component_id: Optional[str]) -> "PropagationLoss":
        config = data.get('propagation')
        if config is None:
            legacy = data.get('airLossConfig') or {}
            config = {'mode': legacy.get('mode', 'calc'),
                      'distance_cm': legacy.get('dist_cm', DEFAULT_PROPAGATION_DISTANCE_CM)}
        return cls(component_id=component_id,
                   name=data.get('name'),
                   specs_by_freq=data.get('specs_by_freq'),
                   distance_cm=config.get('distance_cm', DEFAULT_PROPAGATION_DISTANCE_CM),
                   mode=config.get('mode', 'calc'))


class MergedComponent(RFComponent):
    """Single stage standing in for a reduced sub-chain.

    Keeps full serialized copies of the original members (in merge order),
    the internal connections between them per direction as index pairs, and
    per direction the (entry, exit) member indices where new boundary edges
    attach. ``boundary`` records, per direction, every outside edge present
    at merge time as (outside id, member index, side), side being 'in' for
    outside -> member and 'out' for member -> outside. Frequencies come
    from the members and cannot be edited.
    """

    category = ComponentCategory.MERGED
    default_name = "Merged"

    def __init__(self,
                 component_id: Optional[str] = None,
                 name: Optional[str] = None,
                 specs_by_freq: Optional[Mapping[FrequencyLike, Mapping[str, RawSpec]]] = None,
                 children: Optional[Sequence[Mapping[str, Any]]] = None,
                 internal_connections: Optional[Mapping[Any, Sequence[Sequence[int]]]] = None,
                 ports: Optional[Mapping[Any, Sequence[int]]] = None,
                 boundary: Optional[Mapping[Any, Sequence[Sequence[Any]]]] = None):
        super().__init__(component_id, name, specs_by_freq)
        self.children: List[Dict[str, Any]] = [copy.deepcopy(dict(child)) for child in (children or [])]
        last = max(len(self.children) - 1, 0)
        self.internal_connections: Dict[Direction, List[Tuple[int, int]]] = {}
        self.ports: Dict[Direction, Tuple[int, int]] = {}
        self.boundary: Dict[Direction, List[Tuple[str, int, str]]] = {}
        for direction in Direction:
            if internal_connections is None:
                # Members chained in order, as in a plain left-to-right cascade
                edges = [(i, i + 1) for i in range(len(self.children) - 1)]
            else:
                edges = internal_connections.get(direction.value, internal_connections.get(direction, []))
            self.internal_connections[direction] = [(int(a), int(b)) for a, b in edges]
            port = None if ports is None else ports.get(direction.value, ports.get(direction))
            self.ports[direction] = (int(port[0]), int(port[1])) if port else (0, last)
            recorded = [] if boundary is None else boundary.get(direction.value, boundary.get(direction, []))
            self.boundary[direction] = [(str(outside), int(index), str(side)) for outside, index, side in recorded]

    def resolve_spec(self, frequency: str, direction: Direction, raw: Mapping[str, Any]) -> ComponentSpec:
        gain_db = _raw_value(raw, 'gain_db', 0.0)
        nf_db = _raw_value(raw, 'nf_db', 0.0)
        active_db = _raw_value(raw, 'active_gain_db', 0.0)
        passive_db = _raw_value(raw, 'passive_gain_db', 0.0)
        antenna_db = _raw_value(raw, 'antenna_gain_db', _raw_value(raw, 'system_gain_db', 0.0))
        stored = {
            'gain_db': gain_db,
            'nf_db': nf_db,
            'active_gain_db': active_db,
            'passive_gain_db': passive_db,
            'antenna_gain_db': antenna_db,
        }
        if direction is Direction.REVERSE:
            op1db_dbm = UNCOMPRESSIBLE_OP1DB_DBM
        else:
            op1db_dbm = _raw_value(raw, 'op1db_dbm', UNCOMPRESSIBLE_OP1DB_DBM)
            stored['op1db_dbm'] = op1db_dbm
        return ComponentSpec.from_db(
            gain_db, nf_db, op1db_dbm, raw=stored,
            active_gain_db=active_db,
            passive_gain_db=passive_db,
            antenna_gain_db=antenna_db
        )

    def set_spec(self, frequency: FrequencyLike, direction: Union[Direction, str],
                 raw: Mapping[str, Any]) -> ComponentSpec:
        raise SpecificationError(f"Specs of merged component '{self.name}' are derived from its members")

    def remove_frequency(self, frequency: FrequencyLike) -> None:
        raise SpecificationError(f"Frequencies of merged component '{self.name}' are derived from its members")

    def _config_dict(self) -> Dict[str, Any]:
        return {
            'children': copy.deepcopy(self.children),
            'connections': {
                direction.value: [list(edge) for edge in self.internal_connections[direction]]
                for direction in Direction
            },
            'ports': {direction.value: list(self.ports[direction]) for direction in Direction},
            'boundary': {
                direction.value: [list(edge) for edge in self.boundary[direction]]
                for direction in Direction
            },
        }

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any], component_id: Optional[str]) -> "MergedComponent":
        children = data.get('children')
        if children is None:
            children = data.get('childrenData') or []
        return cls(component_id=component_id,
                   name=data.get('name'),
                   specs_by_freq=data.get('specs_by_freq'),
                   children=children,
                   internal_connections=data.get('connections'),
                   ports=data.get('ports'),
                   boundary=data.get('boundary'))


COMPONENT_TYPES: Dict[ComponentCategory, Type[RFComponent]] = {
    ComponentCategory.ACTIVE: ActiveComponent,
    ComponentCategory.PASSIVE: PassiveComponent,
    ComponentCategory.ANTENNA: AntennaComponent,
    ComponentCategory.MERGED: MergedComponent,
    ComponentCategory.PROPAGATION_LOSS: PropagationLoss,
    ComponentCategory.PHASED_ARRAY: PhasedArray,
}


def _category_of(data: Mapping[str, Any]) -> ComponentCategory:
    if data.get('category') is not None:
        try:
            return ComponentCategory(str(data['category']).lower())
        except ValueError:
            raise SpecificationError(f"Unknown component category: {data['category']!r}")
    # Legacy flag-style definitions
    if data.get('isMerged'):
        return ComponentCategory.MERGED
    if data.get('isAirLoss'):
        return ComponentCategory.PROPAGATION_LOSS
    if data.get('isPassive'):
        return ComponentCategory.PASSIVE
    if data.get('isSystem'):
        return ComponentCategory.ANTENNA
    return ComponentCategory.ACTIVE


def component_from_dict(data: Mapping[str, Any], keep_id: bool = True) -> RFComponent:
    """
    Rebuild a component from its serialized definition.

    Args:
        data: Output of ``RFComponent.to_dict`` or a legacy flag-style definition.
        keep_id: Reuse the stored id when present; otherwise a fresh id is made.

    Returns:
        A component of the class matching the stored category.
    """
    category = _category_of(data)
    component_id = data.get('id') if keep_id else None
    return COMPONENT_TYPES[category]._from_dict(data, component_id)
