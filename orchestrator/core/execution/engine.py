"""
Execution Engine for Orchestration Core
Runs node graphs: reset, order, resolve inputs, invoke effects, publish snapshots
"""
import copy
import time
from enum import Enum
from typing import Dict, Any, List, Optional, Callable, Mapping, Union, Awaitable
from uuid import uuid4

from .errors import CycleError, GraphValidationError
from .graph import Graph
from .node_base import ExecutionContext, GlobalConfig
from .node_registry import NodeRegistry, NODE_REGISTRY
from .ordering import resolve_execution_order
from ..types import NodeID, PortID, StateSnapshot, GraphExecutionResult, NodeExecutionResult
from ...utils.logger import get_logger

logger = get_logger(__name__)

ALREADY_RUNNING = "already running"

SnapshotObserver = Callable[[StateSnapshot], None]


class RunState(Enum):
    """Lifecycle of the engine's current run"""
    IDLE = "idle"
    RESETTING = "resetting"
    READY = "ready"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"


class RunStatus(str, Enum):
    """Outcome reported for one execute() call"""
    COMPLETED = "completed"
    ABORTED = "aborted"
    REJECTED = "rejected"


_ACTIVE_STATES = (RunState.RESETTING, RunState.READY, RunState.RUNNING)


class ExecutionEngine:
    """
    Executes node graphs, one run at a time

    Features:
    - Per-run working copy of node states (the caller's graph is never mutated)
    - Reset with sticky fields before every run
    - Topological sort for execution order
    - Connection handling between node ports
    - Per-node failure isolation
    - Snapshot publishing after reset and after every node
    - "Already running" guard against overlapping runs
    """

    def __init__(
        self,
        registry: Optional[NodeRegistry] = None,
        container: Any = None,
        on_snapshot: Optional[SnapshotObserver] = None,
    ):
        """
        Initialize execution engine

        Args:
            registry: Node type registry (defaults to the built-in registry)
            container: Optional ServiceContainer handed to node effects
            on_snapshot: Observer called with every published snapshot
        """
        self.registry = registry if registry is not None else NODE_REGISTRY
        self.container = container
        self.on_snapshot = on_snapshot
        self._state = RunState.IDLE
        self._current_node: Optional[NodeID] = None
        self.last_result: Optional[GraphExecutionResult] = None

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state in _ACTIVE_STATES

    @property
    def current_node(self) -> Optional[NodeID]:
        """Node whose effect is in flight, if any"""
        return self._current_node

    def start(
        self,
        graph: Union[Graph, Mapping[str, Any]],
        global_config: Optional[GlobalConfig] = None,
        on_snapshot: Optional[SnapshotObserver] = None,
    ) -> Awaitable[GraphExecutionResult]:
        """
        Claim the engine for a run and return the run to await

        The "already running" guard is checked and set before this returns,
        and the working copy is taken from the graph as it is now, so a run
        started here cannot be overtaken by one requested later. A call made
        while another run is in flight comes back (once awaited) with status
        "rejected"; it is neither queued nor does it restart the run.

        Args:
            graph: Graph (or its dict form) to execute
            global_config: Run-wide configuration (defaults from Config)
            on_snapshot: Extra observer for this run only

        Returns:
            Awaitable resolving to the GraphExecutionResult
        """
        graph_id = self._graph_id(graph)

        if self.is_running:
            logger.warning(f"Run of {graph_id} rejected: {ALREADY_RUNNING}")
            return self._settled(self._result(graph_id, RunStatus.REJECTED, error=ALREADY_RUNNING))

        start_time = time.time()
        self._state = RunState.RESETTING
        logger.info(f"Executing graph: {graph_id}")

        # Working copy, validated against this engine's registry
        try:
            if isinstance(graph, Graph):
                working = graph.for_execution(self.registry)
            else:
                working = Graph.from_user_edit(graph, self.registry)
        except GraphValidationError as e:
            logger.error(f"Graph validation failed for {graph_id}: {e}")
            self._state = RunState.IDLE
            self.last_result = self._result(
                graph_id, RunStatus.ABORTED,
                error=f"Graph validation failed: {e}",
                start_time=start_time,
            )
            return self._settled(self.last_result)

        return self._execute(working, graph_id, global_config, on_snapshot, start_time)

    async def execute(
        self,
        graph: Union[Graph, Mapping[str, Any]],
        global_config: Optional[GlobalConfig] = None,
        on_snapshot: Optional[SnapshotObserver] = None,
    ) -> GraphExecutionResult:
        """
        Run a graph once (see start())

        Returns:
            GraphExecutionResult with the final state of every node
        """
        return await self.start(graph, global_config, on_snapshot)

    async def _execute(
        self,
        working: Graph,
        graph_id: str,
        global_config: Optional[GlobalConfig],
        on_snapshot: Optional[SnapshotObserver],
        start_time: float,
    ) -> GraphExecutionResult:
        try:
            result = await self._run(working, graph_id, global_config, on_snapshot, start_time)
        finally:
            self._current_node = None
            self._state = RunState.IDLE
        self.last_result = result
        return result

    async def _run(
        self,
        working: Graph,
        graph_id: str,
        global_config: Optional[GlobalConfig],
        on_snapshot: Optional[SnapshotObserver],
        start_time: float,
    ) -> GraphExecutionResult:
        observers = [obs for obs in (self.on_snapshot, on_snapshot) if obs is not None]

        # 1. Reset
        for node in working.nodes:
            node.state = self.registry.reset_state(node)
        self._publish(working, observers)

        # 2. Order
        try:
            execution_order = resolve_execution_order(working)
        except CycleError as e:
            logger.error(str(e))
            self._state = RunState.ABORTED
            return self._result(
                graph_id, RunStatus.ABORTED,
                states=working.states(),
                error=str(e),
                start_time=start_time,
            )

        self._state = RunState.READY
        context = ExecutionContext(
            config=global_config if global_config is not None else GlobalConfig.from_config(),
            container=self.container,
            run_id=uuid4().hex,
        )

        # 3. Per-node steps
        self._state = RunState.RUNNING
        node_results: List[NodeExecutionResult] = []
        for node_id in execution_order:
            node_results.append(await self._step(working, node_id, context, observers))

        # 4. Completion
        self._state = RunState.COMPLETED
        failed = [r for r in node_results if not r['success']]
        total_time = time.time() - start_time
        logger.info(
            f"Graph {graph_id} completed in {total_time:.3f}s "
            f"({len(node_results) - len(failed)}/{len(node_results)} nodes succeeded)"
        )

        return self._result(
            graph_id, RunStatus.COMPLETED,
            node_results=node_results,
            states=working.states(),
            execution_order=execution_order,
            error="; ".join(f"{r['node_id']}: {r['error']}" for r in failed) or None,
            start_time=start_time,
        )

    async def _step(
        self,
        working: Graph,
        node_id: NodeID,
        context: ExecutionContext,
        observers: List[SnapshotObserver],
    ) -> NodeExecutionResult:
        """Run one node and commit its outcome to the working copy"""
        node = working.get_node(node_id)
        node_class = self.registry.lookup(node.type)
        self._current_node = node_id

        inputs = self.resolve_inputs(working, node_id)

        node.state['error'] = None
        if node_class.has_loading_flag():
            node.state['isLoading'] = True
            self._publish(working, observers)

        node_start_time = time.time()
        try:
            delta = await self.registry.invoke(node, inputs, context)
        except Exception as e:
            execution_time = time.time() - node_start_time
            message = str(e) or e.__class__.__name__
            node.state['error'] = message
            logger.error(f"Node {node_id} ({node.type}) failed: {message}", exc_info=True)
            result: NodeExecutionResult = {
                'node_id': node_id,
                'success': False,
                'outputs': {},
                'error': message,
                'execution_time': execution_time,
            }
        else:
            execution_time = time.time() - node_start_time
            node.state.update(delta)
            node.state['error'] = None
            logger.debug(f"Node {node_id} ({node.type}) executed successfully in {execution_time:.3f}s")
            result = {
                'node_id': node_id,
                'success': True,
                'outputs': copy.deepcopy(delta),
                'error': None,
                'execution_time': execution_time,
            }

        if node_class.has_loading_flag():
            node.state['isLoading'] = False
        self._publish(working, observers)
        self._current_node = None
        return result

    def resolve_inputs(self, graph: Graph, node_id: NodeID) -> Dict[PortID, Any]:
        """
        Resolve a node's inputs from its incoming connections

        Reads the source node's current state, so sources must already have
        run. Ports with no incoming connection, or whose source holds no value
        for the connected output, are left out of the mapping.

        Args:
            graph: Graph holding the current node states
            node_id: Node to resolve inputs for

        Returns:
            Dictionary of resolved input values keyed by input port
        """
        incoming = {edge.target_port: edge for edge in graph.edges_into(node_id)}
        resolved: Dict[PortID, Any] = {}

        for port in graph.inputs_of(node_id):
            edge = incoming.get(port)
            if edge is None:
                continue
            source = graph.get_node(edge.source_node)
            field_name = self.registry.lookup(source.type).output_field(edge.source_port)
            value = source.state.get(field_name)
            if value is None:
                continue
            resolved[port] = copy.deepcopy(value)

        return resolved

    def _publish(self, graph: Graph, observers: List[SnapshotObserver]) -> None:
        """Hand every observer its own full copy of the current node states"""
        for observer in observers:
            try:
                observer(graph.states())
            except Exception:
                logger.exception("Snapshot observer raised; continuing run")

    @staticmethod
    async def _settled(result: GraphExecutionResult) -> GraphExecutionResult:
        return result

    @staticmethod
    def _graph_id(graph: Union[Graph, Mapping[str, Any]]) -> str:
        if isinstance(graph, Graph):
            return graph.id
        return str(graph.get('id', graph.get('name', 'graph')))

    @staticmethod
    def _result(
        graph_id: str,
        status: RunStatus,
        *,
        node_results: Optional[List[NodeExecutionResult]] = None,
        states: Optional[StateSnapshot] = None,
        execution_order: Optional[List[NodeID]] = None,
        error: Optional[str] = None,
        start_time: Optional[float] = None,
    ) -> GraphExecutionResult:
        node_results = node_results or []
        return {
            'graph_id': graph_id,
            'status': status.value,
            'success': status == RunStatus.COMPLETED and all(r['success'] for r in node_results),
            'node_results': node_results,
            'states': states or {},
            'execution_order': execution_order or [],
            'error': error,
            'total_execution_time': time.time() - start_time if start_time else 0.0,
        }
