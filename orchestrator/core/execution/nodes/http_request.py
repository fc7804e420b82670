"""
HTTP Request Node
Generic HTTP client step
"""
import asyncio
import json
from typing import Dict, Any

import requests

from ..node_base import BaseNode, ExecutionContext
from ...config import Config
from ....utils.json_path import parse_json_value
from ....utils.logger import get_logger

logger = get_logger(__name__)

ALLOWED_METHODS = ('GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'HEAD')


class HttpRequestNode(BaseNode):
    """
    Calls an HTTP endpoint

    Inputs:
        url: Overrides the authored state['url']
        body: Request body; dicts and lists are sent as JSON

    State:
        url, method (default GET), headers (JSON object text or dict)

    Outputs:
        out: Parsed JSON response, or response text (state field 'result')
        statusCode is recorded alongside
    """

    type_id = "HTTP_REQUEST"
    name = "HTTP Request"
    category = "Utilities"
    description = "Calls an HTTP endpoint and outputs the response body."

    input_ports = ('url', 'body')
    output_ports = ('out',)
    output_fields = {'out': 'result'}
    default_state = {'url': 'https://httpbin.org/get', 'method': 'GET', 'headers': '{}', 'isLoading': False}
    sticky_fields = ('url', 'method', 'headers')
    transient_fields = ('result', 'error', 'statusCode')

    async def execute(self, inputs: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        url = str(inputs.get('url') or self.state.get('url') or '').strip()
        if not url:
            raise ValueError("URL is required")
        method = str(self.state.get('method') or 'GET').upper()
        if method not in ALLOWED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        headers = parse_json_value(self.state.get('headers') or {}, "headers")
        if not isinstance(headers, dict):
            raise ValueError("Invalid headers: expected a JSON object")

        request_kwargs: Dict[str, Any] = {'headers': headers, 'timeout': Config.HTTP_TIMEOUT}
        body = inputs.get('body')
        if isinstance(body, (dict, list)):
            request_kwargs['json'] = body
        elif body is not None:
            request_kwargs['data'] = str(body)

        logger.debug(f"HttpRequestNode {self.node_id}: {method} {url}")
        resp = await asyncio.to_thread(requests.request, method, url, **request_kwargs)
        resp.raise_for_status()

        try:
            result: Any = resp.json()
        except ValueError:
            result = resp.text
        return {'result': result, 'statusCode': resp.status_code}
