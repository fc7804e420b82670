"""
Workspace for Orchestration Core
The canonical graph plus the engine and scheduler timers that act on it
"""
import copy
from typing import Dict, Any, List, Optional, Callable, Mapping, Union, Awaitable
from uuid import uuid4

from .config import Config
from .execution.engine import ExecutionEngine
from .execution.errors import GraphValidationError
from .execution.graph import Graph, Node, Edge
from .execution.node_base import GlobalConfig
from .execution.node_registry import NodeRegistry, NODE_REGISTRY
from .execution.nodes import SchedulerNode
from .execution.triggers import TriggerManager
from .templates import TEMPLATES, get_builtin_template, template_to_graph
from .types import NodeID, PortID, NodeState, StateSnapshot, TemplateData, GraphExecutionResult
from ..storage.base import TemplateStore, TemplateNotFoundError, normalize_template
from ..utils.logger import get_logger

logger = get_logger(__name__)

Subscriber = Callable[[StateSnapshot], None]


class Workspace:
    """
    Owns the graph being edited and everything that runs it

    User edits replace the canonical graph; runs work on copies of it and
    report back through snapshots, which are applied here and forwarded to
    subscribers. Snapshots from a run of a graph that has since been replaced
    are dropped, and values edited while a run is in flight survive its
    snapshots. Scheduler timers are only started or stopped through
    toggle_scheduler(), and all of them are stopped when the graph is replaced.
    """

    def __init__(
        self,
        registry: Optional[NodeRegistry] = None,
        container: Any = None,
        store: Optional[TemplateStore] = None,
        global_config: Optional[GlobalConfig] = None,
        graph: Union[Graph, Mapping[str, Any], None] = None,
    ):
        """
        Args:
            registry: Node type registry (defaults to the built-in registry)
            container: ServiceContainer handed to node effects
            store: Template store (defaults to container.template_store)
            global_config: Run-wide configuration (defaults from Config)
            graph: Initial graph (defaults to the first built-in template)
        """
        self.registry = registry if registry is not None else NODE_REGISTRY
        self.container = container
        self.store = store if store is not None else getattr(container, 'template_store', None)
        self.global_config = global_config if global_config is not None else GlobalConfig.from_config()

        self.engine = ExecutionEngine(self.registry, container)
        self.triggers = TriggerManager(self.start_run, min_interval=Config.MIN_SCHEDULER_INTERVAL)
        self._subscribers: List[Subscriber] = []
        self._graph = Graph([], [], registry=self.registry)
        self._snapshot: StateSnapshot = {}
        # Bumped on every whole-graph replacement
        self._generation = 0
        # Edits made while a run is in flight, re-applied over its snapshots
        self._mid_run_edits: Dict[NodeID, NodeState] = {}
        self.last_result: Optional[GraphExecutionResult] = None

        if graph is None:
            self.clear()
        else:
            self.load_graph(graph)

    # ------------------------------------------------------------------
    # Graph access
    # ------------------------------------------------------------------

    @property
    def graph(self) -> Graph:
        return self._graph

    @property
    def is_running(self) -> bool:
        return self.engine.is_running

    def scheduler_node_ids(self) -> List[NodeID]:
        return [node.id for node in self._graph.nodes if self._is_scheduler(node)]

    def snapshot(self) -> StateSnapshot:
        """Copy of the latest known state of every node"""
        return copy.deepcopy(self._snapshot)

    def to_dict(self) -> Dict[str, Any]:
        return self._graph.to_dict()

    # ------------------------------------------------------------------
    # Whole-graph replacement
    # ------------------------------------------------------------------

    def load_graph(self, data: Union[Graph, Mapping[str, Any]]) -> Graph:
        """
        Replace the canonical graph

        Every scheduler timer is stopped and every scheduler node comes in
        stopped. An invalid graph raises before anything is changed.

        Raises:
            GraphValidationError: If the new graph is structurally invalid
        """
        if isinstance(data, Graph):
            graph = data.for_execution(self.registry)
        else:
            graph = Graph.from_user_edit(data, self.registry)

        self.triggers.stop_all()
        self._generation += 1
        self._mid_run_edits.clear()
        for node in graph.nodes:
            if self._is_scheduler(node):
                node.state['isRunning'] = False

        self._graph = graph
        logger.info(f"Loaded graph {graph.id!r}: {len(graph)} nodes, {len(graph.edges)} connections")
        self._sync_snapshot()
        return graph

    def clear(self) -> Graph:
        """Reset the workspace to the first built-in template"""
        return self.load_graph(template_to_graph(TEMPLATES[0]))

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def list_templates(self) -> List[TemplateData]:
        """Built-in templates followed by saved ones; a saved template shadows a built-in of the same name"""
        saved = self.store.list_templates() if self.store is not None else []
        saved_names = {template['name'] for template in saved}
        builtins = [copy.deepcopy(t) for t in TEMPLATES if t['name'] not in saved_names]
        return builtins + saved

    def get_template(self, name: str) -> TemplateData:
        """
        Raises:
            TemplateNotFoundError: If neither the store nor the built-ins have it
        """
        template = self.store.get_template(name) if self.store is not None else None
        if template is None:
            template = get_builtin_template(name)
        if template is None:
            raise TemplateNotFoundError(name)
        return template

    def load_template(self, name: str) -> Graph:
        return self.load_graph(template_to_graph(self.get_template(name)))

    def save_as_template(self, name: str, description: str = "") -> TemplateData:
        """Persist the current graph under a name (replaces a saved template of that name)"""
        if self.store is None:
            raise RuntimeError("No template store configured")
        graph_data = self._graph.to_dict()
        template = normalize_template({
            'name': name,
            'description': description,
            'nodes': graph_data['nodes'],
            'connections': graph_data['connections'],
        })
        return self.store.save_template(template)

    def delete_template(self, name: str) -> None:
        """
        Raises:
            TemplateNotFoundError: If no saved template has that name
            ValueError: If the name belongs to a built-in template only
        """
        if self.store is not None and self.store.has_template(name):
            self.store.delete_template(name)
            return
        if get_builtin_template(name) is not None:
            raise ValueError(f"Built-in template {name!r} cannot be deleted")
        raise TemplateNotFoundError(name)

    # ------------------------------------------------------------------
    # User edits
    # ------------------------------------------------------------------

    def update_node_state(self, node_id: NodeID, patch: Mapping[str, Any]) -> NodeState:
        """
        Merge authored values into a node's state

        Raises:
            KeyError: If the node does not exist
            ValueError: If the patch touches isRunning (use toggle_scheduler)
        """
        node = self._graph.get_node(node_id)
        if self._is_scheduler(node) and 'isRunning' in patch:
            raise ValueError("isRunning can only be changed with toggle_scheduler")
        node.state.update(copy.deepcopy(dict(patch)))
        if self.engine.is_running:
            self._mid_run_edits.setdefault(node_id, {}).update(copy.deepcopy(dict(patch)))
        self._sync_snapshot()
        return copy.deepcopy(node.state)

    def add_node(
        self,
        type_id: str,
        state: Optional[Mapping[str, Any]] = None,
        position: Optional[Mapping[str, float]] = None,
        node_id: Optional[NodeID] = None,
    ) -> Node:
        """Add a node of a registered type, starting from its default state"""
        node_class = self.registry.lookup(type_id)
        node_state = copy.deepcopy(node_class.default_state)
        node_state.update(copy.deepcopy(dict(state or {})))
        if issubclass(node_class, SchedulerNode):
            node_state['isRunning'] = False
        node = Node(
            id=node_id or f"node-{uuid4().hex[:8]}",
            type=type_id,
            state=node_state,
            position=dict(position or {'x': 0, 'y': 0}),
        )
        self._replace_structure(self._graph.nodes + [node], self._graph.edges)
        return node

    def remove_node(self, node_id: NodeID) -> None:
        """Remove a node with its connections (and its timer, if any)"""
        self._graph.get_node(node_id)
        self.triggers.stop(node_id)
        nodes = [node for node in self._graph.nodes if node.id != node_id]
        edges = [
            edge for edge in self._graph.edges
            if edge.source_node != node_id and edge.target_node != node_id
        ]
        self._replace_structure(nodes, edges)

    def connect(self, source_node: NodeID, source_output: PortID, target_node: NodeID, target_input: PortID) -> Edge:
        """
        Connect an output port to an input port

        Raises:
            GraphValidationError: On a self-connection, unknown node or port, or
                an input port that is already connected
        """
        if source_node == target_node:
            raise GraphValidationError(f"Node {source_node} cannot be connected to itself")
        edge = Edge.from_dict({
            'source_node': source_node,
            'source_output': source_output,
            'target_node': target_node,
            'target_input': target_input,
        })
        self._replace_structure(self._graph.nodes, self._graph.edges + [edge])
        return edge

    def disconnect(self, connection_id: str) -> bool:
        edges = [edge for edge in self._graph.edges if edge.id != connection_id]
        if len(edges) == len(self._graph.edges):
            return False
        self._replace_structure(self._graph.nodes, edges)
        return True

    def _replace_structure(self, nodes: List[Node], edges: List[Edge]) -> None:
        # Constructing the Graph validates it; on failure the old graph stays
        self._graph = Graph(
            nodes,
            edges,
            registry=self.registry,
            graph_id=self._graph.id,
            name=self._graph.name,
        )
        self._sync_snapshot()

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    async def run(self) -> GraphExecutionResult:
        """
        Run the current graph once

        Returns the engine's result; a run requested while another is in
        flight comes back with status "rejected".
        """
        return await self.start_run()

    def start_run(self) -> Awaitable[GraphExecutionResult]:
        """
        Claim the engine for a run of the current graph and return the run to await

        The engine's guard is taken before this returns, which is how scheduler
        timers trigger their first run at registration.
        """
        generation = self._generation
        run_types = {node.id: node.type for node in self._graph.nodes}

        def apply(snapshot: StateSnapshot) -> None:
            if generation != self._generation:
                return
            self._apply_snapshot(snapshot, run_types)

        pending = self.engine.start(self._graph, self.global_config, on_snapshot=apply)
        return self._finish_run(pending, generation)

    async def _finish_run(self, pending: Awaitable[GraphExecutionResult], generation: int) -> GraphExecutionResult:
        try:
            result = await pending
        finally:
            # A rejected call leaves the in-flight run's edits in place
            if not self.engine.is_running:
                self._mid_run_edits.clear()
        if result['status'] == 'rejected':
            return result
        if generation != self._generation:
            logger.info(f"Discarded result of a run on replaced graph {result['graph_id']!r}")
            return result
        self.last_result = result
        return result

    def toggle_scheduler(self, node_id: NodeID) -> bool:
        """
        Start or stop a scheduler node's timer

        Must be called from within a running event loop.

        Returns:
            New isRunning value

        Raises:
            KeyError: If the node does not exist
            ValueError: If the node is not a scheduler
            InvalidIntervalError: If the interval is invalid (nothing is changed)
        """
        node = self._graph.get_node(node_id)
        if not self._is_scheduler(node):
            raise ValueError(f"Node {node_id} is not a scheduler")

        if self.triggers.is_active(node_id):
            self.triggers.stop(node_id)
            node.state['isRunning'] = False
        else:
            self.triggers.start(node_id, node.state.get('intervalSeconds'))
            node.state['isRunning'] = True

        self._sync_snapshot()
        return node.state['isRunning']

    async def shutdown(self) -> None:
        """Stop every timer and wait for runs they already started"""
        self.triggers.stop_all()
        await self.triggers.drain()

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Receive every state snapshot

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _apply_snapshot(self, snapshot: StateSnapshot, run_types: Mapping[NodeID, str]) -> None:
        """Apply a run's snapshot to the canonical graph"""
        for node_id, state in snapshot.items():
            if not self._graph.has_node(node_id):
                # Removed while the run was in flight
                continue
            node = self._graph.get_node(node_id)
            if node.type != run_types.get(node_id):
                # Removed and re-added as another type
                continue
            state.update(copy.deepcopy(self._mid_run_edits.get(node_id, {})))
            node.state = state
            if self._is_scheduler(node):
                node.state['isRunning'] = self.triggers.is_active(node_id)
        self._sync_snapshot()

    def _sync_snapshot(self) -> None:
        self._snapshot = self._graph.states()
        for subscriber in list(self._subscribers):
            try:
                subscriber(self._graph.states())
            except Exception:
                logger.exception("Snapshot subscriber raised")

    def _is_scheduler(self, node: Node) -> bool:
        node_class = self.registry.get(node.type)
        return node_class is not None and issubclass(node_class, SchedulerNode)
