"""
Base node class for execution engine
"""
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, Tuple, ClassVar, Awaitable, Union
from dataclasses import dataclass, field
import copy

from ..config import Config
from ..types import NodeID, PortID, NodeState


@dataclass(frozen=True)
class GlobalConfig:
    """
    Run-wide configuration that is not part of the graph

    Read-only and identical for every node in a run.
    """
    ai_supervisor_instruction: str = ""
    system_orchestrator_instruction: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_config(cls) -> "GlobalConfig":
        """Build the defaults from Config"""
        return cls(
            ai_supervisor_instruction=Config.AI_SUPERVISOR_INSTRUCTION,
            system_orchestrator_instruction=Config.SYSTEM_ORCHESTRATOR_INSTRUCTION,
        )

    def system_instruction(self) -> str:
        """Global instructions joined the way they are prepended to AI calls"""
        parts = [self.ai_supervisor_instruction, self.system_orchestrator_instruction]
        return "\n\n".join(part for part in parts if part)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ai_supervisor_instruction': self.ai_supervisor_instruction,
            'system_orchestrator_instruction': self.system_orchestrator_instruction,
            'extra': copy.deepcopy(self.extra),
        }


@dataclass
class ExecutionContext:
    """Context passed to nodes during execution"""
    config: GlobalConfig = field(default_factory=GlobalConfig)
    container: Any = None  # Optional ServiceContainer holding external service clients
    run_id: Optional[str] = None


StateDelta = Dict[str, Any]


class BaseNode(ABC):
    """
    Base class for all node types

    A subclass is the descriptor of one node type: its class attributes declare
    the port signature and state schema, and execute() is its effect. The engine
    creates a short-lived instance per invocation, bound to the node id and a
    copy of the node's state, so execute() can never mutate the run's state
    directly. It returns a state delta instead, or raises on failure.
    """

    type_id: ClassVar[str] = ""
    name: ClassVar[str] = ""
    category: ClassVar[str] = "Utilities"
    description: ClassVar[str] = ""

    input_ports: ClassVar[Tuple[PortID, ...]] = ()
    output_ports: ClassVar[Tuple[PortID, ...]] = ()

    # State a freshly added node starts with
    default_state: ClassVar[Dict[str, Any]] = {}
    # User-authored configuration preserved across resets
    sticky_fields: ClassVar[Tuple[str, ...]] = ()
    # Output port -> state field holding that port's value
    output_fields: ClassVar[Dict[PortID, str]] = {}
    # Run outputs removed on reset
    transient_fields: ClassVar[Tuple[str, ...]] = ('result', 'error')

    def __init__(self, node_id: NodeID, state: NodeState):
        """
        Initialize node

        Args:
            node_id: Unique node identifier
            state: Current node state (deep-copied, mutations do not leak)
        """
        self.node_id = node_id
        self.state = copy.deepcopy(state)

    @abstractmethod
    def execute(self, inputs: Dict[PortID, Any], context: ExecutionContext) -> Union[StateDelta, Awaitable[StateDelta]]:
        """
        Execute the node

        Args:
            inputs: Resolved upstream values, keyed by input port. Ports that are
                not connected, or whose source produced no value, are absent.
            context: Execution context with global config and services

        Returns:
            State delta to merge into the node's state (may be a coroutine)
        """

    @classmethod
    def is_source(cls) -> bool:
        """Source nodes have no input ports; their authored content is never reset"""
        return not cls.input_ports

    @classmethod
    def output_field(cls, port: PortID) -> str:
        """State field that carries the value of an output port"""
        return cls.output_fields.get(port, port)

    @classmethod
    def reset_state(cls, state: NodeState) -> NodeState:
        """
        Compute the state a node starts a run with

        Non-source nodes return to default_state, keeping only their sticky
        fields. Source nodes keep everything they have. Both lose their
        transient outputs, and a loading flag is always cleared.

        Args:
            state: Prior node state

        Returns:
            New state (never aliases the prior one)
        """
        if cls.is_source():
            new_state = copy.deepcopy(state)
        else:
            new_state = copy.deepcopy(cls.default_state)
            for key in cls.sticky_fields:
                if key in state:
                    new_state[key] = copy.deepcopy(state[key])

        for key in cls.transient_fields:
            new_state.pop(key, None)

        if 'isLoading' in new_state or 'isLoading' in cls.default_state:
            new_state['isLoading'] = False

        return new_state

    @classmethod
    def has_loading_flag(cls) -> bool:
        return 'isLoading' in cls.default_state

    @classmethod
    def describe(cls) -> Dict[str, Any]:
        """Public description of this node type (NodeTypeDefinition)"""
        return {
            'type': cls.type_id,
            'name': cls.name or cls.type_id,
            'category': cls.category,
            'description': cls.description,
            'inputs': list(cls.input_ports),
            'outputs': list(cls.output_ports),
            'default_state': copy.deepcopy(cls.default_state),
            'sticky_fields': list(cls.sticky_fields),
        }
