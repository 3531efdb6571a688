"""Defines the structure for representing RF cascade designs."""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union
import uuid
import networkx as nx  # Using networkx for graph representation of connections

from rfcascade.analysis.link_budget import LinkBudgetCalculator
from rfcascade.core.constants import DEFAULT_INPUT_POWER_DBM
from rfcascade.core.data_structures import CascadeResult, Direction
from rfcascade.core.exceptions import TopologyError
from rfcascade.design.chain_reduction import merge_chain, order_selection
from rfcascade.design.rf_components import MergedComponent, RFComponent, component_from_dict
from rfcascade.utils.logger import get_logger

logger = get_logger(__name__)

class RFSystemDesign:
    """
    Represents an RF design: a set of components and, for each direction,
    the directed connections that order them into a chain.
    Provides methods to build the topology, walk it, and merge or unmerge
    sub-chains.
    """

    def __init__(self, design_id: Optional[str] = None, name: str = "RF System Design"):
        """
        Initialize the RF System Design.

        Args:
            design_id: Optional unique identifier for the design.
            name: Human-readable name for the design.
        """
        self.id = design_id or str(uuid.uuid4())
        self.name = name
        self.components: Dict[str, RFComponent] = {}
        # One directed graph per signal direction; nodes are component ids
        self.graphs: Dict[Direction, nx.DiGraph] = {direction: nx.DiGraph() for direction in Direction}
        logger.info(f"Created RF System Design: {self.name} (ID: {self.id})")

    def add_component(self, component: RFComponent) -> RFComponent:
        """
        Add an RF component to the system design.

        Args:
            component: The RFComponent instance to add.

        Raises:
            ValueError: If a component with the same ID already exists.
        """
        if component.id in self.components:
            raise ValueError(f"Component with ID {component.id} already exists in the design.")

        self.components[component.id] = component
        for graph in self.graphs.values():
            graph.add_node(component.id)
        logger.debug(f"Added component '{component.name}' (ID: {component.id}) to design '{self.name}'.")
        return component

    def get_component(self, component_id: str) -> Optional[RFComponent]:
        """
        Retrieve a component by its ID.

        Args:
            component_id: The ID of the component to retrieve.

        Returns:
            The RFComponent instance, or None if not found.
        """
        return self.components.get(component_id)

    def _require(self, component_id: str) -> RFComponent:
        component = self.get_component(component_id)
        if component is None:
            raise ValueError(f"Component with ID {component_id} not found in the design.")
        return component

    def remove_component(self, component_id: str) -> RFComponent:
        """Remove a component and every connection touching it, in both directions."""
        component = self._require(component_id)
        for graph in self.graphs.values():
            graph.remove_node(component_id)
        del self.components[component_id]
        logger.info(f"Removed component '{component.name}' from design '{self.name}'.")
        return component

    def connect(self, from_id: str, to_id: str,
                direction: Union[Direction, str] = Direction.FORWARD) -> None:
        """
        Connect two components in one direction (signal flows from -> to).

        Raises:
            ValueError: If a component is not found or both ids are the same.
        """
        direction = Direction.parse(direction)
        source = self._require(from_id)
        target = self._require(to_id)
        if from_id == to_id:
            raise ValueError(f"Cannot connect {source.name} to itself")
        self.graphs[direction].add_edge(from_id, to_id)
        logger.info(f"Connected {source.name} -> {target.name} ({direction.value}) in design '{self.name}'.")

    def disconnect(self, from_id: str, to_id: str,
                   direction: Union[Direction, str] = Direction.FORWARD) -> None:
        """Remove one directed connection if present."""
        graph = self.graphs[Direction.parse(direction)]
        if graph.has_edge(from_id, to_id):
            graph.remove_edge(from_id, to_id)

    def get_connections(self, direction: Union[Direction, str] = Direction.FORWARD) -> List[Tuple[str, str]]:
        """
        Get the directed connections of one direction.

        Returns:
            List of (from_id, to_id) tuples
        """
        return list(self.graphs[Direction.parse(direction)].edges)

    def ordered_chain(self, direction: Union[Direction, str] = Direction.FORWARD) -> List[RFComponent]:
        """
        Walk the connections of one direction into an ordered chain.

        Only components that take part in a connection are included. With
        several start components the first one added is used.

        Raises:
            TopologyError: If there are no connections, no start component
                (cycle), a branch, a merge point fed by several components,
                or a component is visited twice.
        """
        direction = Direction.parse(direction)
        graph = self.graphs[direction]
        linked = [node for node in graph.nodes if graph.degree(node) > 0]
        if not linked:
            raise TopologyError(f"No connections in {direction.value} direction")

        starts = [node for node in linked if graph.in_degree(node) == 0]
        if not starts:
            raise TopologyError(f"No start component in {direction.value} direction; check for a cycle")
        if len(starts) > 1:
            names = ", ".join(self.components[node].name for node in starts)
            logger.warning(f"{len(starts)} start components in {direction.value} direction ({names}); "
                           f"using '{self.components[starts[0]].name}'")

        chain: List[RFComponent] = []
        visited = set()
        current = starts[0]
        while current is not None:
            if current in visited:
                raise TopologyError(f"Cycle detected: '{self.components[current].name}' visited twice")
            if graph.in_degree(current) > 1:
                raise TopologyError(f"'{self.components[current].name}' is fed by {graph.in_degree(current)} components; "
                                    f"a chain must be a single path")
            visited.add(current)
            chain.append(self.components[current])
            successors = list(graph.successors(current))
            if len(successors) > 1:
                raise TopologyError(f"'{self.components[current].name}' feeds {len(successors)} components; "
                                    f"a chain must be a single path")
            current = successors[0] if successors else None
        return chain

    def calculate(self,
                  frequency: Union[str, float],
                  direction: Union[Direction, str] = Direction.FORWARD,
                  input_power_dbm: float = DEFAULT_INPUT_POWER_DBM,
                  calculator: Optional[LinkBudgetCalculator] = None) -> CascadeResult:
        """Order the chain of ``direction`` and run the cascade over it."""
        chain = self.ordered_chain(direction)
        calculator = calculator or LinkBudgetCalculator()
        return calculator.calculate(chain, frequency, direction, input_power_dbm)

    # --- Merge / unmerge ---

    def merge_components(self,
                         component_ids: Iterable[str],
                         direction: Union[Direction, str] = Direction.FORWARD,
                         name: Optional[str] = None,
                         calculator: Optional[LinkBudgetCalculator] = None) -> MergedComponent:
        """
        Replace a selected sub-chain with one merged component.

        The selection is ordered along ``direction``. The design is only
        modified after ordering and every per-frequency cascade succeeded.

        Raises:
            ValueError: If a selected id is unknown.
            TopologyError: If the selection is not one continuous acyclic chain.
            NoCommonFrequencyError: If the members share no frequency.
        """
        direction = Direction.parse(direction)
        selected = [self._require(component_id) for component_id in component_ids]
        chain = order_selection(selected, self.graphs[direction])
        merged = merge_chain(chain, name=name, calculator=calculator, graphs=self.graphs)

        member_ids = {comp.id for comp in chain}
        boundary = {d: self._boundary_edges(d, member_ids) for d in Direction}

        self.add_component(merged)
        for d, (incoming, outgoing) in boundary.items():
            graph = self.graphs[d]
            for source in incoming:
                graph.add_edge(source, merged.id)
            for target in outgoing:
                graph.add_edge(merged.id, target)
        for member_id in member_ids:
            for graph in self.graphs.values():
                graph.remove_node(member_id)
            del self.components[member_id]

        logger.info(f"Merged {len(chain)} components into '{merged.name}' in design '{self.name}'.")
        return merged

    def _boundary_edges(self, direction: Direction, member_ids) -> Tuple[List[str], List[str]]:
        """Outside neighbours feeding into, and fed from, a set of members."""
        graph = self.graphs[direction]
        incoming = [u for u, v in graph.edges if v in member_ids and u not in member_ids]
        outgoing = [v for u, v in graph.edges if u in member_ids and v not in member_ids]
        return list(dict.fromkeys(incoming)), list(dict.fromkeys(outgoing))

    def unmerge_component(self, component_id: str) -> List[RFComponent]:
        """
        Restore the original members of a merged component.

        Members come back with their stored specs and ids and their internal
        connections. Outside edges recorded at merge time are reattached to
        the member they belonged to, as long as that neighbour is still
        connected to the merged component. Neighbours connected after the
        merge attach at the entry/exit members. No recomputation happens.

        Raises:
            ValueError: If the component is unknown, not merged, or has no
                member data.
        """
        merged = self._require(component_id)
        if not isinstance(merged, MergedComponent):
            raise ValueError(f"Component '{merged.name}' is not a merged component")
        if not merged.children:
            raise ValueError(f"Merged component '{merged.name}' holds no member data")

        members = [component_from_dict(child) for child in merged.children]
        for member in members:
            if member.id in self.components:
                member.id = str(uuid.uuid4())
                logger.warning(f"Member '{member.name}' id already in use; assigned a new one")

        boundary = {}
        for direction, graph in self.graphs.items():
            boundary[direction] = (list(graph.predecessors(merged.id)), list(graph.successors(merged.id)))

        self.remove_component(merged.id)
        for member in members:
            self.add_component(member)
        for direction, (incoming, outgoing) in boundary.items():
            graph = self.graphs[direction]
            for a, b in merged.internal_connections[direction]:
                graph.add_edge(members[a].id, members[b].id)
            # Edges present at merge time go back to the member they left
            replayed = set()
            for outside, index, side in merged.boundary[direction]:
                if side == 'in' and outside in incoming:
                    graph.add_edge(outside, members[index].id)
                    replayed.add((outside, side))
                elif side == 'out' and outside in outgoing:
                    graph.add_edge(members[index].id, outside)
                    replayed.add((outside, side))
            entry, exit_ = merged.ports[direction]
            for source in incoming:
                if (source, 'in') not in replayed:
                    graph.add_edge(source, members[entry].id)
            for target in outgoing:
                if (target, 'out') not in replayed:
                    graph.add_edge(members[exit_].id, target)

        logger.info(f"Unmerged '{merged.name}' into {len(members)} components in design '{self.name}'.")
        return members

    # --- Serialization ---

    def to_dict(self) -> Dict[str, Any]:
        """Serialize components and per-direction connections."""
        return {
            'id': self.id,
            'name': self.name,
            'components': [comp.to_dict() for comp in self.components.values()],
            'connections': {
                direction.value: [list(edge) for edge in self.graphs[direction].edges]
                for direction in Direction
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RFSystemDesign":
        """Rebuild a design written by ``to_dict``."""
        design = cls(design_id=data.get('id'), name=data.get('name', "RF System Design"))
        for comp_data in data.get('components', []):
            design.add_component(component_from_dict(comp_data))
        for direction_key, edges in (data.get('connections') or {}).items():
            for from_id, to_id in edges:
                design.connect(from_id, to_id, direction_key)
        return design

    def __str__(self) -> str:
        """String representation of the design."""
        component_list = "\n  ".join([f"{comp.name} (ID: {comp.id})" for comp in self.components.values()])
        connection_lines = []
        for direction in Direction:
            for u, v in self.get_connections(direction):
                connection_lines.append(f"{self.components[u].name} -> {self.components[v].name} ({direction.value})")
        connection_list = "\n  ".join(connection_lines)
        return (
            f"RF System Design: {self.name} (ID: {self.id})\n"
            f"Components:\n  {component_list or 'None'}\n"
            f"Connections:\n  {connection_list or 'None'}"
        )
