"""
Graph model for execution engine
Nodes, connections and structural accessors
"""
import copy
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Iterable, Mapping

from .errors import GraphValidationError, DanglingEdgeError, PortArityError, UnknownNodeTypeError
from .node_registry import NodeRegistry, NODE_REGISTRY
from ..types import NodeID, PortID, ConnectionID, NodeState, NodeGraph


@dataclass
class Node:
    """One instance of a processing step"""
    id: NodeID
    type: str
    state: NodeState = field(default_factory=dict)
    position: Dict[str, float] = field(default_factory=lambda: {'x': 0, 'y': 0})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Node":
        # 'data' is the template format of the web UI
        state = data.get('state', data.get('data', {})) or {}
        position = data.get('position')
        if position is None and 'x' in data:
            position = {'x': data.get('x', 0), 'y': data.get('y', 0)}
        return cls(
            id=str(data['id']),
            type=str(data.get('type', '')),
            state=copy.deepcopy(dict(state)),
            position=dict(position or {'x': 0, 'y': 0}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.type,
            'state': copy.deepcopy(self.state),
            'position': dict(self.position),
        }


@dataclass(frozen=True)
class Edge:
    """Directed link from one node's output port to another node's input port"""
    id: ConnectionID
    source_node: NodeID
    source_port: PortID
    target_node: NodeID
    target_port: PortID

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Edge":
        source_node = data.get('source_node', data.get('startNodeId'))
        source_port = data.get('source_output', data.get('startPortId', 'out'))
        target_node = data.get('target_node', data.get('endNodeId'))
        target_port = data.get('target_input', data.get('endPortId', 'in'))
        if source_node is None or target_node is None:
            raise DanglingEdgeError(f"Connection is missing an endpoint: {dict(data)}")
        edge_id = data.get('id') or f"conn-{source_node}-{target_node}-{target_port}"
        return cls(
            id=str(edge_id),
            source_node=str(source_node),
            source_port=str(source_port),
            target_node=str(target_node),
            target_port=str(target_port),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'source_node': self.source_node,
            'source_output': self.source_port,
            'target_node': self.target_node,
            'target_input': self.target_port,
        }


class Graph:
    """
    Nodes and directed edges between their ports

    Construct with from_user_edit() (structural checks, no cycle check) and
    hand for_execution() copies to the engine. Node order is insertion order
    and is what the scheduler uses to break ties.
    """

    def __init__(
        self,
        nodes: Iterable[Node],
        edges: Iterable[Edge],
        registry: Optional[NodeRegistry] = None,
        graph_id: str = "graph",
        name: str = "",
    ):
        self.registry = registry if registry is not None else NODE_REGISTRY
        self.id = graph_id
        self.name = name
        self._nodes: Dict[NodeID, Node] = {}
        for node in nodes:
            if node.id in self._nodes:
                raise GraphValidationError(f"Duplicate node id: {node.id}")
            self._nodes[node.id] = node
        self._edges: List[Edge] = list(edges)
        self._validate()

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_user_edit(
        cls,
        data: Mapping[str, Any],
        registry: Optional[NodeRegistry] = None,
    ) -> "Graph":
        """
        Build a graph from its dict form (as edited live in the UI)

        Raises:
            GraphValidationError: On unknown types, dangling edges, or two
                edges into the same input port. Cycles are allowed here.
        """
        nodes = [Node.from_dict(node_data) for node_data in data.get('nodes', [])]
        edges = [Edge.from_dict(conn) for conn in data.get('connections', data.get('edges', []))]
        return cls(
            nodes,
            edges,
            registry=registry,
            graph_id=str(data.get('id', 'graph')),
            name=str(data.get('name', '')),
        )

    def for_execution(self, registry: Optional[NodeRegistry] = None) -> "Graph":
        """
        Independent copy of this graph for one run

        The copy is re-validated (against `registry` when given) so a graph
        mutated in place since construction still cannot reach the engine in
        an invalid shape.
        """
        return Graph(
            [copy.deepcopy(node) for node in self._nodes.values()],
            list(self._edges),
            registry=registry if registry is not None else self.registry,
            graph_id=self.id,
            name=self.name,
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate(self) -> None:
        for node in self._nodes.values():
            if not node.type:
                raise GraphValidationError(f"Node {node.id} has no type")
            if node.type not in self.registry:
                raise UnknownNodeTypeError(node.type, node.id)

        targeted: Dict[tuple, ConnectionID] = {}
        for edge in self._edges:
            source = self._nodes.get(edge.source_node)
            target = self._nodes.get(edge.target_node)
            if source is None:
                raise DanglingEdgeError(f"Connection {edge.id} references invalid source node: {edge.source_node}")
            if target is None:
                raise DanglingEdgeError(f"Connection {edge.id} references invalid target node: {edge.target_node}")
            if edge.source_port not in self.registry.lookup(source.type).output_ports:
                raise DanglingEdgeError(
                    f"Connection {edge.id} references undeclared output port "
                    f"{edge.source_port!r} on {source.type} node {source.id}"
                )
            if edge.target_port not in self.registry.lookup(target.type).input_ports:
                raise DanglingEdgeError(
                    f"Connection {edge.id} references undeclared input port "
                    f"{edge.target_port!r} on {target.type} node {target.id}"
                )
            key = (edge.target_node, edge.target_port)
            if key in targeted:
                raise PortArityError(
                    f"Input port {edge.target_port!r} of node {edge.target_node} is already "
                    f"connected by {targeted[key]}"
                )
            targeted[key] = edge.id

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> List[Node]:
        return list(self._nodes.values())

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges)

    def node_ids(self) -> List[NodeID]:
        return list(self._nodes.keys())

    def get_node(self, node_id: NodeID) -> Node:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise KeyError(f"Node not found: {node_id}") from None

    def has_node(self, node_id: NodeID) -> bool:
        return node_id in self._nodes

    def inputs_of(self, node_id: NodeID) -> List[PortID]:
        """Declared input ports of a node, in order"""
        return list(self.registry.lookup(self.get_node(node_id).type).input_ports)

    def outputs_of(self, node_id: NodeID) -> List[PortID]:
        """Declared output ports of a node, in order"""
        return list(self.registry.lookup(self.get_node(node_id).type).output_ports)

    def edges_into(self, node_id: NodeID) -> List[Edge]:
        return [edge for edge in self._edges if edge.target_node == node_id]

    def edges_out_of(self, node_id: NodeID) -> List[Edge]:
        return [edge for edge in self._edges if edge.source_node == node_id]

    def states(self) -> Dict[NodeID, NodeState]:
        """Deep copy of every node's state"""
        return {node_id: copy.deepcopy(node.state) for node_id, node in self._nodes.items()}

    def to_dict(self) -> NodeGraph:
        return {
            'id': self.id,
            'name': self.name,
            'nodes': [node.to_dict() for node in self._nodes.values()],
            'connections': [edge.to_dict() for edge in self._edges],
        }

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"Graph(id={self.id!r}, nodes={len(self._nodes)}, edges={len(self._edges)})"
