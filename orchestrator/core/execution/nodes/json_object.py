"""
JSON Object Node
Structured data for model configuration and other consumers
"""
import json
from typing import Dict, Any
from ..node_base import BaseNode, ExecutionContext


class JsonObjectNode(BaseNode):
    """
    Source node holding a JSON object as text

    The text is passed downstream unchanged; execute() only checks that it
    parses to an object so a typo is flagged on this node rather than on
    every consumer.

    Outputs:
        out: JSON text (state field 'params')
    """

    type_id = "JSON_OBJECT"
    name = "JSON Object"
    category = "Inputs"
    description = "Defines a JSON object for model configuration or other structured data."

    output_ports = ('out',)
    output_fields = {'out': 'params'}
    default_state = {'params': '{\n  "temperature": 0.7\n}'}
    sticky_fields = ('params',)

    def execute(self, inputs: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        params = self.state.get('params', '')
        if isinstance(params, dict):
            return {}
        try:
            parsed = json.loads(params or '{}')
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})") from None
        if not isinstance(parsed, dict):
            raise ValueError("Invalid JSON: expected an object")
        return {}
