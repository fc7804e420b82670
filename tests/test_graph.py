"""
Tests for the graph model and execution ordering
"""
import pytest

from orchestrator.core.execution.errors import (
    CycleError,
    DanglingEdgeError,
    GraphValidationError,
    PortArityError,
    UnknownNodeTypeError,
)
from orchestrator.core.execution.graph import Graph, Edge, Node
from orchestrator.core.execution.ordering import resolve_execution_order

from conftest import node, conn


def _graph(registry, nodes, connections):
    return Graph.from_user_edit({'nodes': nodes, 'connections': connections}, registry)


class TestValidation:

    def test_unknown_type_rejected(self, registry):
        with pytest.raises(UnknownNodeTypeError) as exc_info:
            _graph(registry, [node('a', 'NOPE')], [])
        assert exc_info.value.node_id == 'a'

    def test_missing_type_rejected(self, registry):
        with pytest.raises(GraphValidationError):
            _graph(registry, [{'id': 'a'}], [])

    def test_duplicate_node_id_rejected(self, registry):
        with pytest.raises(GraphValidationError):
            _graph(registry, [node('a', 'TEST_SOURCE'), node('a', 'TEST_ECHO')], [])

    def test_edge_to_missing_node_rejected(self, registry):
        with pytest.raises(DanglingEdgeError):
            _graph(registry, [node('a', 'TEST_SOURCE')], [conn('a', 'ghost')])

    def test_edge_to_undeclared_port_rejected(self, registry):
        with pytest.raises(DanglingEdgeError):
            _graph(
                registry,
                [node('a', 'TEST_SOURCE'), node('b', 'TEST_ECHO')],
                [conn('a', 'b', target_input='nope')],
            )

    def test_edge_from_undeclared_output_rejected(self, registry):
        with pytest.raises(DanglingEdgeError):
            _graph(
                registry,
                [node('a', 'TEST_SOURCE'), node('b', 'TEST_ECHO')],
                [conn('a', 'b', source_output='nope')],
            )

    def test_two_edges_into_one_input_rejected(self, registry):
        with pytest.raises(PortArityError):
            _graph(
                registry,
                [node('a', 'TEST_SOURCE'), node('b', 'TEST_SOURCE'), node('c', 'TEST_ECHO')],
                [conn('a', 'c'), conn('b', 'c')],
            )

    def test_cycle_allowed_while_editing(self, registry):
        graph = _graph(
            registry,
            [node('a', 'TEST_ECHO'), node('b', 'TEST_ECHO')],
            [conn('a', 'b'), conn('b', 'a')],
        )
        assert len(graph) == 2


class TestWireFormat:

    def test_ui_connection_keys_accepted(self):
        edge = Edge.from_dict({
            'id': 'c1', 'startNodeId': 'a', 'startPortId': 'out', 'endNodeId': 'b', 'endPortId': 'prompt',
        })
        assert (edge.source_node, edge.source_port, edge.target_node, edge.target_port) == ('a', 'out', 'b', 'prompt')

    def test_template_node_keys_accepted(self):
        n = Node.from_dict({'id': 'n', 'type': 'OUTPUT', 'x': 10, 'y': 20, 'data': {'text': 'hi'}})
        assert n.state == {'text': 'hi'}
        assert n.position == {'x': 10, 'y': 20}

    def test_to_dict_round_trips(self, registry):
        graph = _graph(
            registry,
            [node('a', 'TEST_SOURCE', value='x'), node('b', 'TEST_ECHO')],
            [conn('a', 'b')],
        )
        again = Graph.from_user_edit(graph.to_dict(), registry)
        assert again.to_dict() == graph.to_dict()

    def test_states_are_copies(self, registry):
        graph = _graph(registry, [node('a', 'TEST_SOURCE', value={'k': 1})], [])
        states = graph.states()
        states['a']['value']['k'] = 2
        assert graph.get_node('a').state['value'] == {'k': 1}

    def test_for_execution_is_independent(self, registry):
        graph = _graph(registry, [node('a', 'TEST_SOURCE', value='x')], [])
        working = graph.for_execution()
        working.get_node('a').state['value'] = 'changed'
        assert graph.get_node('a').state['value'] == 'x'


class TestAccessors:

    def test_ports_and_edges(self, registry):
        graph = _graph(
            registry,
            [node('a', 'TEST_SOURCE'), node('b', 'TEST_ECHO')],
            [conn('a', 'b')],
        )
        assert graph.inputs_of('b') == ['in', 'extra']
        assert graph.outputs_of('a') == ['out']
        assert [e.source_node for e in graph.edges_into('b')] == ['a']
        assert [e.target_node for e in graph.edges_out_of('a')] == ['b']

    def test_get_missing_node_raises(self, registry):
        graph = _graph(registry, [], [])
        with pytest.raises(KeyError):
            graph.get_node('missing')


class TestExecutionOrder:

    def test_order_respects_edges(self, registry):
        graph = _graph(
            registry,
            [node('out', 'TEST_ECHO'), node('mid', 'TEST_ECHO'), node('src', 'TEST_SOURCE')],
            [conn('src', 'mid'), conn('mid', 'out')],
        )
        assert resolve_execution_order(graph) == ['src', 'mid', 'out']

    def test_ties_broken_by_insertion_order(self, registry):
        graph = _graph(
            registry,
            [
                node('c', 'TEST_SOURCE'),
                node('a', 'TEST_SOURCE'),
                node('sink', 'TEST_ECHO'),
                node('b', 'TEST_SOURCE'),
            ],
            [conn('b', 'sink', 'in'), conn('a', 'sink', 'extra')],
        )
        assert resolve_execution_order(graph) == ['c', 'a', 'b', 'sink']

    def test_order_is_deterministic(self, registry):
        nodes = [node(f"n{i}", 'TEST_ECHO') for i in range(8)]
        connections = [conn('n0', 'n3'), conn('n1', 'n3', 'extra'), conn('n3', 'n7'), conn('n2', 'n5')]
        graph = _graph(registry, nodes, connections)
        first = resolve_execution_order(graph)
        assert all(resolve_execution_order(graph) == first for _ in range(5))
        position = {node_id: i for i, node_id in enumerate(first)}
        for edge in graph.edges:
            assert position[edge.source_node] < position[edge.target_node]

    def test_cycle_detected(self, registry):
        graph = _graph(
            registry,
            [node('src', 'TEST_SOURCE'), node('a', 'TEST_ECHO'), node('b', 'TEST_ECHO')],
            [conn('a', 'b'), conn('b', 'a')],
        )
        with pytest.raises(CycleError) as exc_info:
            resolve_execution_order(graph)
        assert exc_info.value.node_ids == ['a', 'b']

    def test_empty_graph(self, registry):
        assert resolve_execution_order(_graph(registry, [], [])) == []
