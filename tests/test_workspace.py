"""
Tests for the workspace: graph edits, templates, scheduler control and snapshots
"""
import asyncio

import pytest

from orchestrator.core.config import Config
from orchestrator.core.execution.errors import GraphValidationError, PortArityError
from orchestrator.core.execution.node_base import GlobalConfig
from orchestrator.core.execution.triggers import InvalidIntervalError
from orchestrator.core.templates import TEMPLATES
from orchestrator.core.workspace import Workspace
from orchestrator.storage import LocalJSONTemplateStore, TemplateNotFoundError

from conftest import node, conn


def scheduled_graph():
    return {
        'id': 'sched',
        'nodes': [
            node('s', 'SCHEDULER', intervalSeconds=0.05, isRunning=True, runCount=0),
            node('slow', 'TEST_SLOW', delay=0.01),
            node('out', 'OUTPUT'),
        ],
        'connections': [conn('s', 'slow'), conn('slow', 'out')],
    }


@pytest.fixture
def store(tmp_path):
    return LocalJSONTemplateStore(str(tmp_path))


@pytest.fixture
def workspace(registry, store, monkeypatch):
    monkeypatch.setattr(Config, 'MIN_SCHEDULER_INTERVAL', 0.01)
    return Workspace(registry=registry, store=store, global_config=GlobalConfig())


class TestGraphEdits:

    def test_starts_with_first_template(self, workspace):
        assert [n.id for n in workspace.graph.nodes] == [n['id'] for n in TEMPLATES[0]['nodes']]

    def test_load_graph_forces_schedulers_off(self, workspace):
        workspace.load_graph(scheduled_graph())
        assert workspace.graph.get_node('s').state['isRunning'] is False
        assert workspace.snapshot()['s']['isRunning'] is False

    def test_invalid_graph_leaves_current_graph(self, workspace):
        before = workspace.to_dict()
        with pytest.raises(GraphValidationError):
            workspace.load_graph({'nodes': [node('x', 'NOPE')], 'connections': []})
        assert workspace.to_dict() == before

    def test_update_node_state(self, workspace):
        state = workspace.update_node_state('node-1', {'text': 'changed'})
        assert state['text'] == 'changed'
        assert workspace.snapshot()['node-1']['text'] == 'changed'

    def test_update_missing_node(self, workspace):
        with pytest.raises(KeyError):
            workspace.update_node_state('ghost', {'text': 'x'})

    def test_running_flag_not_editable(self, workspace):
        workspace.load_graph(scheduled_graph())
        with pytest.raises(ValueError):
            workspace.update_node_state('s', {'isRunning': True})

    def test_add_connect_disconnect_remove(self, workspace):
        workspace.load_graph({'nodes': [node('p', 'USER_PROMPT', text='x')], 'connections': []})
        added = workspace.add_node('FORMATTER', {'suffix': '?'}, node_id='f')
        assert added.state == {'suffix': '?'}

        edge = workspace.connect('p', 'out', 'f', 'in')
        assert [e.id for e in workspace.graph.edges] == [edge.id]
        with pytest.raises(PortArityError):
            workspace.connect('p', 'out', 'f', 'in')
        with pytest.raises(GraphValidationError):
            workspace.connect('f', 'out', 'f', 'in')

        assert workspace.disconnect(edge.id) is True
        assert workspace.disconnect(edge.id) is False

        workspace.connect('p', 'out', 'f', 'in')
        workspace.remove_node('p')
        assert workspace.graph.node_ids() == ['f']
        assert workspace.graph.edges == []

    def test_add_unknown_type(self, workspace):
        with pytest.raises(GraphValidationError):
            workspace.add_node('NOPE')


class TestRuns:

    def test_run_applies_final_states(self, workspace):
        workspace.load_graph({
            'nodes': [node('p', 'USER_PROMPT', text='hi'), node('f', 'FORMATTER', suffix='!'), node('o', 'OUTPUT')],
            'connections': [conn('p', 'f'), conn('f', 'o')],
        })
        result = asyncio.run(workspace.run())
        assert result['status'] == 'completed'
        assert workspace.graph.get_node('o').state['text'] == 'hi!'
        assert workspace.last_result is result

    def test_subscribers_see_every_snapshot(self, workspace):
        workspace.load_graph({
            'nodes': [node('p', 'USER_PROMPT', text='hi'), node('o', 'OUTPUT')],
            'connections': [conn('p', 'o')],
        })
        seen = []
        unsubscribe = workspace.subscribe(seen.append)
        asyncio.run(workspace.run())
        # reset, p, o
        assert len(seen) == 3
        assert seen[-1]['o']['text'] == 'hi'

        unsubscribe()
        asyncio.run(workspace.run())
        assert len(seen) == 3

    def test_replaced_graph_ignores_old_run(self, workspace):
        workspace.load_graph({
            'nodes': [node('x', 'TEST_SLOW', delay=0.05), node('y', 'TEST_ECHO')],
            'connections': [conn('x', 'y')],
        })

        async def main():
            pending = asyncio.create_task(workspace.run())
            await asyncio.sleep(0.02)
            workspace.load_graph({'nodes': [node('y', 'TEST_ECHO', label='NEW')], 'connections': []})
            return await pending

        result = asyncio.run(main())

        assert result['status'] == 'completed'
        assert result['states']['y']['result'] == 'done'
        state = workspace.graph.get_node('y').state
        assert state['label'] == 'NEW'
        assert 'result' not in state
        assert workspace.snapshot()['y']['label'] == 'NEW'
        assert workspace.last_result is None

    def test_edit_during_run_survives_its_snapshots(self, workspace):
        workspace.load_graph({
            'nodes': [node('x', 'TEST_SLOW', delay=0.05), node('y', 'TEST_ECHO', label='old')],
            'connections': [conn('x', 'y')],
        })

        async def main():
            pending = asyncio.create_task(workspace.run())
            await asyncio.sleep(0.02)
            workspace.update_node_state('y', {'label': 'edited'})
            return await pending

        result = asyncio.run(main())

        assert result['states']['y']['label'] == 'old'
        state = workspace.graph.get_node('y').state
        assert state['label'] == 'edited'
        assert state['result'] == 'done'
        assert workspace.last_result is result


class TestScheduler:

    def test_toggle_starts_and_stops(self, workspace):
        workspace.load_graph(scheduled_graph())

        async def main():
            started = workspace.toggle_scheduler('s')
            await asyncio.sleep(0.18)
            active = workspace.triggers.is_active('s')
            running_flag = workspace.graph.get_node('s').state['isRunning']
            stopped = workspace.toggle_scheduler('s')
            await workspace.shutdown()
            return started, active, running_flag, stopped

        started, active, running_flag, stopped = asyncio.run(main())

        assert started is True
        assert active is True
        # Snapshots from runs keep the live timer state
        assert running_flag is True
        assert stopped is False
        assert workspace.graph.get_node('s').state['isRunning'] is False
        assert workspace.graph.get_node('s').state['runCount'] >= 2
        assert workspace.graph.get_node('out').state['text'] == 'done'

    def test_first_scheduled_run_claims_engine_at_toggle(self, workspace):
        workspace.load_graph(scheduled_graph())

        async def main():
            workspace.toggle_scheduler('s')
            claimed = workspace.is_running
            manual = await workspace.run()
            workspace.toggle_scheduler('s')
            await workspace.shutdown()
            return claimed, manual['status']

        assert asyncio.run(main()) == (True, 'rejected')
        assert workspace.last_result['status'] == 'completed'

    def test_toggle_rejects_invalid_interval(self, workspace):
        graph = scheduled_graph()
        graph['nodes'][0]['state']['intervalSeconds'] = 0

        async def main():
            workspace.load_graph(graph)
            with pytest.raises(InvalidIntervalError):
                workspace.toggle_scheduler('s')
            return workspace.triggers.is_active('s'), workspace.graph.get_node('s').state['isRunning']

        assert asyncio.run(main()) == (False, False)

    def test_toggle_non_scheduler(self, workspace):
        with pytest.raises(ValueError):
            asyncio.run(self._toggle(workspace, 'node-1'))

    def test_toggle_missing_node(self, workspace):
        with pytest.raises(KeyError):
            asyncio.run(self._toggle(workspace, 'ghost'))

    def test_reload_stops_timers(self, workspace):
        workspace.load_graph(scheduled_graph())

        async def main():
            workspace.toggle_scheduler('s')
            workspace.load_graph(scheduled_graph())
            active = len(workspace.triggers)
            await workspace.shutdown()
            return active

        assert asyncio.run(main()) == 0
        assert workspace.graph.get_node('s').state['isRunning'] is False

    def test_removing_scheduler_stops_its_timer(self, workspace):
        workspace.load_graph(scheduled_graph())

        async def main():
            workspace.toggle_scheduler('s')
            workspace.remove_node('s')
            active = workspace.triggers.is_active('s')
            await workspace.shutdown()
            return active

        assert asyncio.run(main()) is False

    @staticmethod
    async def _toggle(workspace, node_id):
        return workspace.toggle_scheduler(node_id)


class TestTemplates:

    def test_builtins_listed(self, workspace):
        names = [t['name'] for t in workspace.list_templates()]
        assert names == [t['name'] for t in TEMPLATES]

    def test_load_builtin(self, workspace):
        workspace.load_template('Text Summarizer')
        assert workspace.graph.node_ids() == ['sum-1', 'sum-2', 'sum-3']

    def test_save_and_load_roundtrip(self, workspace):
        workspace.load_template('Scheduled Digest')
        workspace.update_node_state('sched-2', {'suffix': ' - custom'})
        workspace.save_as_template('My Digest', 'mine')

        workspace.clear()
        workspace.load_template('My Digest')

        assert workspace.graph.get_node('sched-2').state['suffix'] == ' - custom'
        assert 'My Digest' in [t['name'] for t in workspace.list_templates()]

    def test_saved_template_shadows_builtin(self, workspace):
        workspace.load_graph({'nodes': [node('only', 'OUTPUT')], 'connections': []})
        workspace.save_as_template('Basic Chatbot')
        templates = [t for t in workspace.list_templates() if t['name'] == 'Basic Chatbot']
        assert len(templates) == 1
        assert [n['id'] for n in templates[0]['nodes']] == ['only']

    def test_delete(self, workspace):
        workspace.save_as_template('Temp')
        workspace.delete_template('Temp')
        with pytest.raises(TemplateNotFoundError):
            workspace.delete_template('Temp')

    def test_builtin_cannot_be_deleted(self, workspace):
        with pytest.raises(ValueError):
            workspace.delete_template('Basic Chatbot')

    def test_unknown_template(self, workspace):
        with pytest.raises(TemplateNotFoundError):
            workspace.load_template('Nope')

    def test_save_without_store(self, registry):
        bare = Workspace(registry=registry, global_config=GlobalConfig())
        with pytest.raises(RuntimeError):
            bare.save_as_template('x')
