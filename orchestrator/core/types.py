"""
Type definitions for Orchestration Core

This module provides:
- Type aliases for graph identifiers
- TypedDict wire formats for graphs, templates and run results
"""
from typing import TypedDict, TypeAlias, Optional, Dict, Any, List, Literal
from typing_extensions import NotRequired


# ============================================================================
# Type Aliases
# ============================================================================

NodeID: TypeAlias = str
PortID: TypeAlias = str
ConnectionID: TypeAlias = str
NodeTypeID: TypeAlias = str
NodeState: TypeAlias = Dict[str, Any]
StateSnapshot: TypeAlias = Dict[NodeID, NodeState]
RunStatusValue: TypeAlias = Literal["completed", "aborted", "rejected"]


# ============================================================================
# Graph wire format
# ============================================================================

class NodeData(TypedDict):
    """Data for a single node in the graph"""
    id: NodeID
    type: NodeTypeID
    state: NotRequired[NodeState]
    position: NotRequired[Dict[str, float]]  # {"x": 0.0, "y": 0.0}, carried for the UI


class ConnectionData(TypedDict):
    """Connection between two nodes"""
    id: ConnectionID
    source_node: NodeID
    source_output: PortID  # Output port on source node
    target_node: NodeID
    target_input: PortID  # Input port on target node


class NodeGraph(TypedDict):
    """Complete node graph"""
    id: NotRequired[str]
    name: NotRequired[str]
    nodes: List[NodeData]
    connections: List[ConnectionData]


class TemplateData(TypedDict):
    """A named, persisted graph"""
    name: str
    description: str
    nodes: List[NodeData]
    connections: List[ConnectionData]


# ============================================================================
# Node type catalog
# ============================================================================

class NodeTypeDefinition(TypedDict):
    """Public description of a registered node type"""
    type: NodeTypeID
    name: str
    category: str
    description: str
    inputs: List[PortID]
    outputs: List[PortID]
    default_state: NodeState
    sticky_fields: List[str]


# ============================================================================
# Execution results
# ============================================================================

class NodeExecutionResult(TypedDict):
    """Result from executing a node"""
    node_id: NodeID
    success: bool
    outputs: Dict[str, Any]
    error: NotRequired[Optional[str]]
    execution_time: NotRequired[float]


class GraphExecutionResult(TypedDict):
    """Result from one run over an entire graph"""
    graph_id: str
    status: RunStatusValue
    success: bool
    node_results: List[NodeExecutionResult]
    states: StateSnapshot
    execution_order: List[NodeID]
    error: NotRequired[Optional[str]]
    total_execution_time: NotRequired[float]
