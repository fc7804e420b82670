"""
Shared fixtures and stub node types for the test suite
"""
import asyncio
from typing import Dict, Any

import pytest

from orchestrator.core.execution.node_base import BaseNode, ExecutionContext
from orchestrator.core.execution.node_registry import NODE_REGISTRY


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: calls live external services")


class SourceNode(BaseNode):
    """Emits state['value'] on 'out'"""
    type_id = "TEST_SOURCE"
    output_ports = ('out',)
    output_fields = {'out': 'value'}
    default_state = {'value': 'seed'}
    sticky_fields = ('value',)

    def execute(self, inputs: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        return {}


class EchoNode(BaseNode):
    """Copies 'in' to 'out' and records every input it saw"""
    type_id = "TEST_ECHO"
    input_ports = ('in', 'extra')
    output_ports = ('out',)
    output_fields = {'out': 'result'}
    default_state = {'label': ''}
    sticky_fields = ('label',)

    def execute(self, inputs: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        return {'result': inputs.get('in'), 'seen': sorted(inputs.keys())}


class FailNode(BaseNode):
    type_id = "TEST_FAIL"
    input_ports = ('in',)
    output_ports = ('out',)
    output_fields = {'out': 'result'}
    default_state = {'isLoading': False}

    def execute(self, inputs: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        raise RuntimeError("boom")


class SlowNode(BaseNode):
    """Async node that waits state['delay'] seconds"""
    type_id = "TEST_SLOW"
    input_ports = ('in',)
    output_ports = ('out',)
    output_fields = {'out': 'result'}
    default_state = {'delay': 0.05, 'isLoading': False}
    sticky_fields = ('delay',)

    async def execute(self, inputs: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        await asyncio.sleep(float(self.state.get('delay', 0.05)))
        return {'result': 'done'}


STUB_NODES = (SourceNode, EchoNode, FailNode, SlowNode)


@pytest.fixture
def registry():
    """Built-in registry plus the stub node types"""
    reg = NODE_REGISTRY.copy()
    for node_class in STUB_NODES:
        reg.register(node_class.type_id, node_class)
    return reg


def node(node_id: str, type_id: str, **state) -> Dict[str, Any]:
    return {'id': node_id, 'type': type_id, 'state': state}


def conn(source: str, target: str, target_input: str = 'in', source_output: str = 'out') -> Dict[str, Any]:
    return {
        'id': f"{source}->{target}.{target_input}",
        'source_node': source,
        'source_output': source_output,
        'target_node': target,
        'target_input': target_input,
    }
