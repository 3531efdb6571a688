"""Chain reduction: collapse an ordered sub-chain into one merged component."""

from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import networkx as nx

from rfcascade.analysis.link_budget import LinkBudgetCalculator
from rfcascade.core.constants import MERGE_REFERENCE_INPUT_DBM
from rfcascade.core.data_structures import Direction
from rfcascade.core.exceptions import NoCommonFrequencyError, TopologyError
from rfcascade.design.rf_components import MergedComponent, RFComponent
from rfcascade.utils.logger import get_logger

logger = get_logger(__name__)


def order_selection(components: Sequence[RFComponent], graph: nx.DiGraph) -> List[RFComponent]:
    """
    Order a selection along the edges of ``graph`` restricted to the selection.

    Args:
        components: Selected components, in any order.
        graph: Directed connection graph (node = component id) of one direction.

    Returns:
        The components from start node to end node.

    Raises:
        TopologyError: If fewer than two components are selected, or the
            selection is not exactly one start, one end and one acyclic path.
    """
    if len(components) < 2:
        raise TopologyError("Select at least 2 components to merge")
    by_id = {comp.id: comp for comp in components}
    if len(by_id) != len(components):
        raise TopologyError("Selection contains the same component twice")

    sub = nx.DiGraph()
    sub.add_nodes_from(by_id)
    sub.add_edges_from((u, v) for u, v in graph.edges if u in by_id and v in by_id)

    starts = [node for node in sub.nodes if sub.in_degree(node) == 0]
    if not starts:
        raise TopologyError("Selected components contain a cycle")
    if len(starts) > 1:
        raise TopologyError(
            f"Selected components must form a single continuous chain ({len(starts)} start points found)"
        )
    if not nx.is_directed_acyclic_graph(sub):
        raise TopologyError("Selected components contain a cycle")

    order = list(nx.topological_sort(sub))
    is_path = sub.number_of_edges() == len(order) - 1 and all(
        sub.has_edge(u, v) for u, v in zip(order, order[1:])
    )
    if not is_path:
        raise TopologyError("Selected components are not one continuous chain")
    return [by_id[node] for node in order]


def common_frequencies(components: Sequence[RFComponent]) -> List[str]:
    """
    Frequencies declared, in both directions, by every component.

    Raises:
        NoCommonFrequencyError: If the intersection is empty.
    """
    shared = None
    for comp in components:
        declared = {
            freq for freq in comp.available_frequencies()
            if all(comp.get_spec(freq, direction) is not None for direction in Direction)
        }
        shared = declared if shared is None else shared & declared
    if not shared:
        names = ", ".join(f"'{comp.name}'" for comp in components)
        raise NoCommonFrequencyError(f"Components {names} share no common frequency")
    return sorted(shared, key=float)


def reduce_chain(chain: Sequence[RFComponent],
                 calculator: Optional[LinkBudgetCalculator] = None,
                 reference_input_dbm: float = MERGE_REFERENCE_INPUT_DBM,
                 orders: Optional[Mapping[Direction, Sequence[RFComponent]]] = None
                 ) -> Dict[str, Dict[str, Dict[str, float]]]:
    """
    Derive the raw specs of one component equivalent to ``chain``.

    The cascade is re-run for every common frequency in both directions; the
    totals become the merged stage's gain, NF, output P1dB and gain partition.
    ``orders`` gives the member order of a direction whose signal path does
    not follow ``chain``.

    Returns:
        Serialized specs, ``{freq: {'TX': {...}, 'RX': {...}}}``.

    Raises:
        NoCommonFrequencyError: If the members share no frequency.
        MissingSpecificationError, CompressionError: Propagated from the cascade.
    """
    calculator = calculator or LinkBudgetCalculator()

    specs_by_freq: Dict[str, Dict[str, Dict[str, float]]] = {}
    for freq in common_frequencies(chain):
        specs_by_freq[freq] = {}
        for direction in Direction:
            members = (orders or {}).get(direction, chain)
            totals = calculator.calculate(members, freq, direction, reference_input_dbm)
            raw = {
                'gain_db': totals.total_gain_db,
                'nf_db': totals.total_nf_db,
                'active_gain_db': totals.active_gain_db,
                'passive_gain_db': totals.passive_gain_db,
                'antenna_gain_db': totals.antenna_gain_db,
            }
            if totals.output_p1db_dbm is not None:
                raw['op1db_dbm'] = totals.output_p1db_dbm
            specs_by_freq[freq][direction.value] = raw
    return specs_by_freq


def merge_chain(chain: Sequence[RFComponent],
                name: Optional[str] = None,
                calculator: Optional[LinkBudgetCalculator] = None,
                graphs: Optional[Mapping[Direction, nx.DiGraph]] = None) -> MergedComponent:
    """
    Build the merged component for an already ordered chain.

    Nothing outside the returned component is touched. When ``graphs`` is
    given, each direction is reduced in its own signal order, and the
    internal edges, boundary attachment points and every outside edge of
    each direction are recorded so unmerging restores them exactly.
    """
    orders = {}
    if graphs is not None:
        for direction in Direction:
            try:
                orders[direction] = order_selection(chain, graphs[direction])
            except TopologyError:
                logger.warning(f"Selection is not a chain in {direction.value} direction; "
                               f"reducing it in merge order")
    specs_by_freq = reduce_chain(chain, calculator, orders=orders)
    index_of = {comp.id: i for i, comp in enumerate(chain)}
    last = len(chain) - 1

    connections = None
    ports = None
    boundary = None
    if graphs is not None:
        connections = {}
        ports = {}
        boundary = {}
        for direction in Direction:
            graph = graphs[direction]
            edges = [(index_of[u], index_of[v]) for u, v in graph.edges
                     if u in index_of and v in index_of]
            connections[direction.value] = edges
            ports[direction.value] = _boundary_ports(graph, index_of, edges, last)
            boundary[direction.value] = _outside_edges(graph, index_of)

    merged = MergedComponent(
        name=name or f"Merged-{chain[0].name}",
        specs_by_freq=specs_by_freq,
        children=[comp.to_dict() for comp in chain],
        internal_connections=connections,
        ports=ports,
        boundary=boundary
    )
    logger.info(f"Reduced {len(chain)} components into '{merged.name}' "
                f"at {', '.join(merged.available_frequencies())} GHz")
    return merged


def _outside_edges(graph: nx.DiGraph, index_of: Mapping[str, int]) -> List[Tuple[str, int, str]]:
    """Edges crossing the selection as (outside id, member index, 'in' or 'out')."""
    crossing = []
    for u, v in graph.edges:
        if v in index_of and u not in index_of:
            crossing.append((u, index_of[v], 'in'))
        elif u in index_of and v not in index_of:
            crossing.append((v, index_of[u], 'out'))
    return crossing


def _boundary_ports(graph: nx.DiGraph, index_of: Mapping[str, int], edges, last: int) -> List[int]:
    """Member indices where outside edges enter and leave the selection."""
    entry = next((index_of[v] for u, v in graph.edges if v in index_of and u not in index_of), None)
    exit_ = next((index_of[u] for u, v in graph.edges if u in index_of and v not in index_of), None)
    if entry is None or exit_ is None:
        # No outside edge on that side: fall back to the ends of the internal path
        targets = {b for _, b in edges}
        sources = {a for a, _ in edges}
        if entry is None:
            heads = [a for a in sources if a not in targets]
            entry = heads[0] if len(heads) == 1 else 0
        if exit_ is None:
            tails = [b for b in targets if b not in sources]
            exit_ = tails[0] if len(tails) == 1 else last
    return [entry, exit_]
