"""
JSON Extractor Node
Pulls one value out of a JSON document by dot path
"""
from typing import Dict, Any
from ..node_base import BaseNode, ExecutionContext
from ....utils.json_path import get_path_value, parse_json_value


class JsonExtractorNode(BaseNode):
    """
    Extracts a value from JSON using a dot-notation path

    Inputs:
        json: JSON string or already-parsed value
        path: Optional path; overrides the authored state['path']

    Outputs:
        out: Extracted value (state field 'result'); missing paths give no value
    """

    type_id = "JSON_EXTRACTOR"
    name = "JSON Extractor"
    category = "Utilities"
    description = "Extracts a value from a JSON string using dot notation path."

    input_ports = ('json', 'path')
    output_ports = ('out',)
    output_fields = {'out': 'result'}
    default_state = {'path': 'key.nestedKey'}
    sticky_fields = ('path',)

    def execute(self, inputs: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        path = inputs.get('path', self.state.get('path'))
        if 'json' not in inputs or not path:
            return {}
        document = parse_json_value(inputs['json'], "JSON input")
        return {'result': get_path_value(document, str(path))}
