"""
Execution ordering
Topological sort of a graph with deterministic tie-breaking
"""
import heapq
from typing import Dict, List

from .errors import CycleError
from .graph import Graph
from ..types import NodeID


def resolve_execution_order(graph: Graph) -> List[NodeID]:
    """
    Resolve execution order using topological sort (Kahn's algorithm)

    When several nodes are ready at once, the one inserted into the graph
    first runs first, so the order is stable across runs of the same graph.

    Args:
        graph: Graph to order

    Returns:
        List of node IDs in execution order

    Raises:
        CycleError: If some nodes can never become ready
    """
    node_ids = graph.node_ids()
    index: Dict[NodeID, int] = {node_id: i for i, node_id in enumerate(node_ids)}
    in_degree: Dict[NodeID, int] = {node_id: 0 for node_id in node_ids}
    successors: Dict[NodeID, List[NodeID]] = {node_id: [] for node_id in node_ids}

    for edge in graph.edges:
        successors[edge.source_node].append(edge.target_node)
        in_degree[edge.target_node] += 1

    ready = [index[node_id] for node_id in node_ids if in_degree[node_id] == 0]
    heapq.heapify(ready)
    execution_order: List[NodeID] = []

    while ready:
        node_id = node_ids[heapq.heappop(ready)]
        execution_order.append(node_id)
        for target_id in successors[node_id]:
            in_degree[target_id] -= 1
            if in_degree[target_id] == 0:
                heapq.heappush(ready, index[target_id])

    if len(execution_order) != len(node_ids):
        ordered = set(execution_order)
        cycle_nodes = [node_id for node_id in node_ids if node_id not in ordered]
        raise CycleError(cycle_nodes, len(execution_order), len(node_ids))

    return execution_order
