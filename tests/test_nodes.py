"""
Tests for the built-in node effects
"""
import asyncio
import json
import sqlite3
from unittest.mock import MagicMock, patch

import pytest
import requests

from orchestrator.core.container import ServiceContainer
from orchestrator.core.execution.node_base import ExecutionContext, GlobalConfig
from orchestrator.core.execution.nodes import (
    AIPersonaNode,
    CodeExecutorNode,
    FormatterNode,
    GeminiNode,
    HttpRequestNode,
    ImageDisplayNode,
    ImageGeneratorNode,
    JsonExtractorNode,
    JsonObjectNode,
    OutputNode,
    SchedulerNode,
    SqlQueryNode,
    TextSummarizerNode,
    UserPromptNode,
)
from orchestrator.core.execution.nodes.gemini import PARAMS_ERROR
from orchestrator.core.execution.nodes.text_summarizer import SUMMARIZER_CONTEXT
from orchestrator.core.personas import AI_PERSONAS


def run_node(node_class, state=None, inputs=None, context=None):
    """Execute a node effect the way the registry does"""
    instance = node_class('n', state if state is not None else dict(node_class.default_state))
    delta = instance.execute(inputs or {}, context or ExecutionContext())
    if asyncio.iscoroutine(delta):
        delta = asyncio.run(delta)
    return delta


def gemini_context(client, config=None):
    return ExecutionContext(config=config or GlobalConfig(), container=ServiceContainer(gemini=client))


class TestSourceNodes:

    def test_user_prompt_has_nothing_to_compute(self):
        assert run_node(UserPromptNode, {'text': 'hi'}) == {}

    def test_persona_uses_authored_description(self):
        assert run_node(AIPersonaNode, {'personaName': 'Lyra', 'description': 'Custom'}) == {'result': 'Custom'}

    def test_persona_falls_back_to_catalog(self):
        persona = AI_PERSONAS[1]
        delta = run_node(AIPersonaNode, {'personaName': persona['name'].upper(), 'description': ''})
        assert delta == {'result': persona['description']}

    def test_unknown_persona_fails(self):
        with pytest.raises(ValueError):
            run_node(AIPersonaNode, {'personaName': 'Nobody', 'description': ''})

    def test_json_object_accepts_object(self):
        assert run_node(JsonObjectNode, {'params': '{"temperature": 0.2}'}) == {}

    @pytest.mark.parametrize('params', ['{not json', '[1, 2]'])
    def test_json_object_rejects_bad_text(self, params):
        with pytest.raises(ValueError, match='Invalid JSON'):
            run_node(JsonObjectNode, {'params': params})

    def test_scheduler_counts_runs(self):
        delta = run_node(SchedulerNode, {'intervalSeconds': 5, 'isRunning': True, 'runCount': 2})
        assert delta['runCount'] == 3
        assert 'T' in delta['result']


class TestUtilityNodes:

    def test_formatter_appends_suffix(self):
        assert run_node(FormatterNode, {'suffix': '!'}, {'in': 'hey'}) == {'result': 'hey!'}

    def test_formatter_without_input(self):
        assert run_node(FormatterNode, {'suffix': '!'}) == {'result': '!'}

    def test_json_extractor_dot_path(self):
        document = json.dumps({'a': {'items': [{'name': 'first'}, {'name': 'second'}]}})
        delta = run_node(JsonExtractorNode, {'path': 'a.items.1.name'}, {'json': document})
        assert delta == {'result': 'second'}

    def test_json_extractor_input_path_overrides_state(self):
        delta = run_node(JsonExtractorNode, {'path': 'x'}, {'json': {'x': 1, 'y': 2}, 'path': 'y'})
        assert delta == {'result': 2}

    def test_json_extractor_missing_path_gives_none(self):
        assert run_node(JsonExtractorNode, {'path': 'a.b'}, {'json': '{"a": {}}'}) == {'result': None}

    def test_json_extractor_without_json_input(self):
        assert run_node(JsonExtractorNode, {'path': 'a'}) == {}

    def test_json_extractor_invalid_json_fails(self):
        with pytest.raises(ValueError, match='Invalid JSON input'):
            run_node(JsonExtractorNode, {'path': 'a'}, {'json': '{oops'})

    def test_code_executor_mocks_output(self):
        delta = run_node(CodeExecutorNode, {'script': 'print(1)'})
        assert delta['result'].startswith('// Mock execution of:\nprint(1)')

    def test_output_renders_objects_as_json(self):
        assert run_node(OutputNode, {}, {'in': {'a': 1}}) == {'text': '{\n  "a": 1\n}'}
        assert run_node(OutputNode, {}, {'in': 3}) == {'text': '3'}
        assert run_node(OutputNode, {}) == {'text': ''}

    def test_image_display(self):
        assert run_node(ImageDisplayNode, {}, {'in': 'data:image/jpeg;base64,AA'}) == {
            'image': 'data:image/jpeg;base64,AA'
        }


class TestAINodes:

    def test_gemini_passes_params_and_instruction(self):
        client = MagicMock()
        client.generate_text.return_value = 'answer'
        context = gemini_context(client, GlobalConfig(system_orchestrator_instruction='Orchestrate.'))

        delta = run_node(
            GeminiNode,
            inputs={'prompt': 'q', 'context': 'ctx', 'params': '{"temperature": 0.1}'},
            context=context,
        )

        assert delta == {'result': 'answer'}
        client.generate_text.assert_called_once_with(
            'q',
            system_instruction='Orchestrate.\n\n---\n\nctx',
            generation_config={'temperature': 0.1},
        )

    def test_gemini_system_instruction_override(self):
        client = MagicMock()
        client.generate_text.return_value = 'ok'
        context = gemini_context(client, GlobalConfig(ai_supervisor_instruction='Supervise.'))

        run_node(GeminiNode, inputs={'prompt': 'q', 'params': {'systemInstruction': 'Only this.'}}, context=context)

        kwargs = client.generate_text.call_args.kwargs
        assert kwargs['system_instruction'] == 'Only this.'
        assert kwargs['generation_config'] is None

    @pytest.mark.parametrize('params', ['{broken', '[1]'])
    def test_gemini_bad_params_fail(self, params):
        client = MagicMock()
        with pytest.raises(ValueError, match=PARAMS_ERROR):
            run_node(GeminiNode, inputs={'prompt': 'q', 'params': params}, context=gemini_context(client))
        client.generate_text.assert_not_called()

    def test_summarizer_uses_its_own_context(self):
        client = MagicMock()
        client.generate_text.return_value = 'short'
        delta = run_node(TextSummarizerNode, inputs={'in': 'long text'}, context=gemini_context(client))
        assert delta == {'result': 'short'}
        assert client.generate_text.call_args.kwargs['system_instruction'] == SUMMARIZER_CONTEXT

    def test_image_generator(self):
        client = MagicMock()
        client.generate_image.return_value = 'data:image/jpeg;base64,XYZ'
        delta = run_node(ImageGeneratorNode, inputs={'prompt': 'a lion'}, context=gemini_context(client))
        assert delta == {'result': 'data:image/jpeg;base64,XYZ'}

    def test_image_generator_requires_prompt(self):
        client = MagicMock()
        with pytest.raises(ValueError):
            run_node(ImageGeneratorNode, inputs={'prompt': '  '}, context=gemini_context(client))
        client.generate_image.assert_not_called()


class TestHttpRequestNode:

    def _response(self, status=200, json_body=None, text=''):
        resp = MagicMock()
        resp.status_code = status
        if json_body is None:
            resp.json.side_effect = ValueError("not json")
        else:
            resp.json.return_value = json_body
        resp.text = text
        resp.raise_for_status.return_value = None
        return resp

    def test_json_response(self):
        with patch('orchestrator.core.execution.nodes.http_request.requests.request') as mock_request:
            mock_request.return_value = self._response(json_body={'ok': True})
            delta = run_node(HttpRequestNode, {'url': 'https://example.test', 'method': 'get', 'headers': '{"A": "1"}'})

        assert delta == {'result': {'ok': True}, 'statusCode': 200}
        args, kwargs = mock_request.call_args
        assert args == ('GET', 'https://example.test')
        assert kwargs['headers'] == {'A': '1'}

    def test_text_response_and_json_body(self):
        with patch('orchestrator.core.execution.nodes.http_request.requests.request') as mock_request:
            mock_request.return_value = self._response(status=201, text='created')
            delta = run_node(
                HttpRequestNode,
                {'url': 'https://example.test', 'method': 'POST', 'headers': {}},
                {'body': {'k': 'v'}},
            )

        assert delta == {'result': 'created', 'statusCode': 201}
        assert mock_request.call_args.kwargs['json'] == {'k': 'v'}

    def test_http_error_fails_node(self):
        with patch('orchestrator.core.execution.nodes.http_request.requests.request') as mock_request:
            resp = self._response(status=500)
            resp.raise_for_status.side_effect = requests.exceptions.HTTPError("500 Server Error")
            mock_request.return_value = resp
            with pytest.raises(requests.exceptions.HTTPError):
                run_node(HttpRequestNode, {'url': 'https://example.test', 'method': 'GET', 'headers': '{}'})

    def test_unsupported_method(self):
        with pytest.raises(ValueError, match='Unsupported HTTP method'):
            run_node(HttpRequestNode, {'url': 'https://example.test', 'method': 'BREW', 'headers': '{}'})

    def test_url_required(self):
        with pytest.raises(ValueError, match='URL is required'):
            run_node(HttpRequestNode, {'url': '', 'method': 'GET', 'headers': '{}'})


class TestSqlQueryNode:

    def test_select_rows(self, tmp_path):
        database = tmp_path / 'data.db'
        conn = sqlite3.connect(database)
        conn.execute("CREATE TABLE items (id INTEGER, name TEXT)")
        conn.executemany("INSERT INTO items VALUES (?, ?)", [(1, 'a'), (2, 'b')])
        conn.commit()
        conn.close()

        delta = run_node(
            SqlQueryNode,
            {'database': str(database), 'query': 'SELECT id, name FROM items WHERE id > ? ORDER BY id'},
            {'params': '[0]'},
        )

        assert delta == {'result': [{'id': 1, 'name': 'a'}, {'id': 2, 'name': 'b'}], 'rowCount': 2}

    def test_write_reports_rowcount(self, tmp_path):
        database = tmp_path / 'data.db'
        sqlite3.connect(database).execute("CREATE TABLE t (v INTEGER)").connection.close()

        delta = run_node(
            SqlQueryNode,
            {'database': str(database), 'query': 'INSERT INTO t VALUES (:v)'},
            {'params': {'v': 5}},
        )

        assert delta == {'result': [], 'rowCount': 1}
        rows = sqlite3.connect(database).execute("SELECT v FROM t").fetchall()
        assert rows == [(5,)]

    def test_query_input_overrides_state(self):
        delta = run_node(SqlQueryNode, {'database': ':memory:', 'query': 'SELECT 1 AS a'}, {'query': 'SELECT 2 AS b'})
        assert delta['result'] == [{'b': 2}]

    def test_sql_error_fails_node(self):
        with pytest.raises(ValueError, match='SQL error'):
            run_node(SqlQueryNode, {'database': ':memory:', 'query': 'SELEKT nothing'})
