"""
Recurring Trigger Manager for Orchestration Core
Re-runs the whole graph on a timer per running scheduler node
"""
import asyncio
import math
from typing import Dict, Any, Optional, Callable, Awaitable, Set, List

from ..config import Config
from ..types import NodeID
from ...utils.logger import get_logger

logger = get_logger(__name__)

RunTrigger = Callable[[], Awaitable[Any]]


class InvalidIntervalError(ValueError):
    """Raised when a scheduler interval cannot be used"""
    pass


def parse_interval(value: Any, minimum: Optional[float] = None) -> float:
    """
    Validate a scheduler interval

    Args:
        value: Interval in seconds (number or numeric string)
        minimum: Smallest allowed interval (default: Config.MIN_SCHEDULER_INTERVAL)

    Returns:
        Interval as a float

    Raises:
        InvalidIntervalError: If the value is not a finite number >= minimum
    """
    minimum = Config.MIN_SCHEDULER_INTERVAL if minimum is None else minimum
    if isinstance(value, bool):
        raise InvalidIntervalError(f"Invalid scheduler interval: {value!r}")
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise InvalidIntervalError(f"Invalid scheduler interval: {value!r}") from None
    if not math.isfinite(seconds) or seconds <= 0:
        raise InvalidIntervalError(f"Scheduler interval must be a positive number, got {value!r}")
    if seconds < minimum:
        raise InvalidIntervalError(f"Scheduler interval must be at least {minimum}s, got {seconds}s")
    return seconds


class TriggerManager:
    """
    Owns the live timers of running scheduler nodes

    At most one timer exists per node id. Every tick starts a run of the whole
    graph without waiting for it, so a slow run never delays the next tick and
    ticks never queue up: a tick that lands while a run is in flight is
    rejected by the engine's "already running" guard.
    """

    def __init__(self, trigger: RunTrigger, min_interval: Optional[float] = None):
        """
        Args:
            trigger: Callable that starts a run of the whole graph and returns
                the run to await. It is called synchronously on every tick, so a
                trigger that claims the engine before returning (Workspace.start_run)
                has claimed it by the time start() returns.
            min_interval: Smallest allowed interval (default: Config.MIN_SCHEDULER_INTERVAL)
        """
        self._trigger = trigger
        self._min_interval = min_interval
        self._timers: Dict[NodeID, asyncio.Task] = {}
        self._intervals: Dict[NodeID, float] = {}
        self._runs: Set[asyncio.Task] = set()

    def start(self, node_id: NodeID, interval_seconds: Any) -> float:
        """
        Start (or restart) the timer for a scheduler node

        Triggers one run before returning, then one every interval.
        Must be called from within a running event loop.

        Args:
            node_id: Scheduler node id
            interval_seconds: Interval between runs

        Returns:
            The validated interval

        Raises:
            InvalidIntervalError: If the interval is invalid (nothing is changed)
        """
        interval = parse_interval(interval_seconds, self._min_interval)
        loop = asyncio.get_running_loop()

        self._cancel(node_id)

        self._fire(node_id)
        self._timers[node_id] = loop.create_task(
            self._tick_loop(node_id, interval),
            name=f"scheduler-{node_id}",
        )
        self._intervals[node_id] = interval
        logger.info(f"[Scheduler {node_id}] Started: every {interval}s")
        return interval

    def stop(self, node_id: NodeID) -> bool:
        """
        Stop the timer for a scheduler node (idempotent)

        Returns:
            True if a timer was removed, False if none was running
        """
        stopped = self._cancel(node_id)
        if stopped:
            logger.info(f"[Scheduler {node_id}] Stopped")
        return stopped

    def stop_all(self) -> None:
        """Stop every timer (graph replaced or cleared)"""
        node_ids = list(self._timers.keys())
        for node_id in node_ids:
            self._cancel(node_id)
        if node_ids:
            logger.info(f"Stopped {len(node_ids)} scheduler(s): {node_ids}")

    def is_active(self, node_id: NodeID) -> bool:
        return node_id in self._timers

    def active_node_ids(self) -> List[NodeID]:
        return list(self._timers.keys())

    def interval_of(self, node_id: NodeID) -> Optional[float]:
        return self._intervals.get(node_id)

    async def drain(self) -> None:
        """Wait for runs already started by ticks to finish"""
        if self._runs:
            await asyncio.gather(*list(self._runs), return_exceptions=True)

    def _cancel(self, node_id: NodeID) -> bool:
        task = self._timers.pop(node_id, None)
        self._intervals.pop(node_id, None)
        if task is None:
            return False
        task.cancel()
        return True

    async def _tick_loop(self, node_id: NodeID, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            logger.debug(f"[Scheduler {node_id}] Tick")
            self._fire(node_id)

    def _fire(self, node_id: NodeID) -> None:
        """Start a run now without awaiting it; keep a reference until it finishes"""
        try:
            pending = self._trigger()
        except Exception:
            logger.exception(f"[Scheduler {node_id}] Triggered run failed")
            return
        task = asyncio.get_running_loop().create_task(self._await_run(node_id, pending))
        self._runs.add(task)
        task.add_done_callback(self._runs.discard)

    async def _await_run(self, node_id: NodeID, pending: Awaitable[Any]) -> None:
        try:
            result = await pending
        except Exception:
            logger.exception(f"[Scheduler {node_id}] Triggered run failed")
            return
        if isinstance(result, dict) and result.get('status') == 'rejected':
            logger.debug(f"[Scheduler {node_id}] Tick dropped: run already in flight")

    def __len__(self) -> int:
        return len(self._timers)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._timers
