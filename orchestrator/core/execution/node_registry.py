"""
Node registry for execution engine
Maps node type strings to node classes and runs the per-type operations
"""
import inspect
from typing import Dict, Type, Optional, Any, List, Iterator

from .errors import UnknownNodeTypeError
from .node_base import BaseNode, ExecutionContext, StateDelta
from ..types import NodeState, PortID


class NodeRegistry:
    """
    Registry of node types

    Types are registered once at process start. The engine never dispatches on
    type names itself; adding a type only needs a register() call.
    """

    def __init__(self, node_classes: Optional[Dict[str, Type[BaseNode]]] = None):
        self._classes: Dict[str, Type[BaseNode]] = {}
        for type_id, node_class in (node_classes or {}).items():
            self.register(type_id, node_class)

    def register(self, type_id: str, node_class: Type[BaseNode]) -> None:
        """
        Register a node type

        Args:
            type_id: String identifier for the node type (e.g., "GEMINI")
            node_class: Node class that extends BaseNode
        """
        if not (isinstance(node_class, type) and issubclass(node_class, BaseNode)):
            raise TypeError(f"Node class for {type_id} must extend BaseNode")
        self._classes[type_id] = node_class

    def get(self, type_id: str) -> Optional[Type[BaseNode]]:
        """Get node class for a type, or None if not registered"""
        return self._classes.get(type_id)

    def lookup(self, type_id: str) -> Type[BaseNode]:
        """
        Get node class for a type

        Raises:
            UnknownNodeTypeError: If the type is not registered
        """
        node_class = self._classes.get(type_id)
        if node_class is None:
            raise UnknownNodeTypeError(type_id)
        return node_class

    def types(self) -> List[str]:
        return list(self._classes.keys())

    def describe_all(self) -> List[Dict[str, Any]]:
        return [node_class.describe() for node_class in self._classes.values()]

    def copy(self) -> "NodeRegistry":
        """Independent registry with the same types (tests swap in stubs on copies)"""
        return NodeRegistry(dict(self._classes))

    def reset_state(self, node) -> NodeState:
        """
        Compute a node's state at the start of a run

        Args:
            node: Graph node (anything with .type and .state)
        """
        return self.lookup(node.type).reset_state(node.state)

    async def invoke(self, node, inputs: Dict[PortID, Any], context: ExecutionContext) -> StateDelta:
        """
        Call the node type's effect with resolved upstream inputs

        Sync effects are called directly, coroutine effects are awaited.
        Exceptions propagate to the caller.
        """
        node_class = self.lookup(node.type)
        instance = node_class(node.id, node.state)
        delta = instance.execute(dict(inputs), context)
        if inspect.isawaitable(delta):
            delta = await delta
        if delta is None:
            return {}
        if not isinstance(delta, dict):
            raise TypeError(
                f"{node.type} effect returned {type(delta).__name__}, expected a state delta dict"
            )
        return delta

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._classes

    def __iter__(self) -> Iterator[str]:
        return iter(self._classes)

    def __len__(self) -> int:
        return len(self._classes)


# Default registry holding the built-in node types
NODE_REGISTRY = NodeRegistry()


def register_node(node_type: str, node_class: Type[BaseNode]) -> None:
    """Register a node type on the default registry"""
    NODE_REGISTRY.register(node_type, node_class)


def get_node_class(node_type: str) -> Optional[Type[BaseNode]]:
    """Get node class for a given type from the default registry"""
    return NODE_REGISTRY.get(node_type)


# Import and register all node types
# This ensures nodes are registered when the module is imported
def _register_all_nodes():
    """Register all built-in node types"""
    from .nodes import BUILTIN_NODES

    for node_class in BUILTIN_NODES:
        register_node(node_class.type_id, node_class)


# Auto-register on import
_register_all_nodes()
