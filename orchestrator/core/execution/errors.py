"""
Structural errors for the execution engine

All of these abort a run before any node executes.
"""
from typing import List, Optional


class GraphValidationError(ValueError):
    """Raised when a graph is structurally invalid"""
    pass


class UnknownNodeTypeError(GraphValidationError):
    """Raised when a node's type is not registered"""

    def __init__(self, type_id: str, node_id: Optional[str] = None):
        self.type_id = type_id
        self.node_id = node_id
        where = f" (node {node_id})" if node_id else ""
        super().__init__(f"Unknown node type: {type_id}{where}")


class DanglingEdgeError(GraphValidationError):
    """Raised when an edge references a missing node or an undeclared port"""
    pass


class PortArityError(GraphValidationError):
    """Raised when more than one edge targets the same input port"""
    pass


class CycleError(GraphValidationError):
    """Raised when a cycle is detected in the graph"""

    def __init__(self, node_ids: List[str], ordered: int, total: int):
        self.node_ids = list(node_ids)
        super().__init__(
            f"Cycle detected in graph: {ordered}/{total} nodes in execution order. "
            f"Nodes involved in cycle: {self.node_ids}"
        )
