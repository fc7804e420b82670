"""
Scheduler Node
Re-triggers the whole graph on a fixed interval
"""
from datetime import datetime, timezone
from typing import Dict, Any

from ..node_base import BaseNode, ExecutionContext
from ....utils.logger import get_logger

logger = get_logger(__name__)


class SchedulerNode(BaseNode):
    """
    Scheduler node for recurring graph runs

    The timer itself lives in the TriggerManager; this node only carries the
    trigger configuration and records each run it takes part in.

    State:
        intervalSeconds: Interval between runs (default: 60)
        isRunning: Whether the timer is active (toggled via the workspace)
        runCount: Number of runs this node has executed in

    Outputs:
        out: ISO timestamp of the current run (state field 'result')
    """

    type_id = "SCHEDULER"
    name = "Scheduler"
    category = "Triggers"
    description = "Runs the whole orchestration every N seconds while enabled."

    output_ports = ('out',)
    output_fields = {'out': 'result'}
    default_state = {'intervalSeconds': 60, 'isRunning': False, 'runCount': 0}
    sticky_fields = ('intervalSeconds', 'isRunning')

    def execute(self, inputs: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        run_count = int(self.state.get('runCount') or 0) + 1
        timestamp = datetime.now(timezone.utc).isoformat()
        logger.debug(f"[Scheduler {self.node_id}] run #{run_count} at {timestamp}")
        return {'result': timestamp, 'runCount': run_count}
