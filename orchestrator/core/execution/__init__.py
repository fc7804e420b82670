"""
Execution Engine for Orchestration Core
Provides node-graph execution with per-run state reset and recurring triggers
"""
from .errors import (
    GraphValidationError,
    UnknownNodeTypeError,
    DanglingEdgeError,
    PortArityError,
    CycleError,
)
from .node_base import BaseNode, ExecutionContext, GlobalConfig
from .node_registry import NodeRegistry, NODE_REGISTRY, register_node, get_node_class
from .graph import Graph, Node, Edge
from .ordering import resolve_execution_order
from .engine import ExecutionEngine, RunState, RunStatus, ALREADY_RUNNING
from .triggers import TriggerManager, InvalidIntervalError, parse_interval

__all__ = [
    'GraphValidationError',
    'UnknownNodeTypeError',
    'DanglingEdgeError',
    'PortArityError',
    'CycleError',
    'BaseNode',
    'ExecutionContext',
    'GlobalConfig',
    'NodeRegistry',
    'NODE_REGISTRY',
    'register_node',
    'get_node_class',
    'Graph',
    'Node',
    'Edge',
    'resolve_execution_order',
    'ExecutionEngine',
    'RunState',
    'RunStatus',
    'ALREADY_RUNNING',
    'TriggerManager',
    'InvalidIntervalError',
    'parse_interval',
]
