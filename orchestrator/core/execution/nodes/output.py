"""
Output Node
Final text result of a graph
"""
import json
from typing import Dict, Any
from ..node_base import BaseNode, ExecutionContext


class OutputNode(BaseNode):
    """
    Displays the final text result

    Inputs:
        in: Any value; objects are pretty-printed as JSON

    State:
        text: Rendered text
    """

    type_id = "OUTPUT"
    name = "Final Output"
    category = "Output"
    description = "Displays the final text result of the orchestration."

    input_ports = ('in',)
    default_state = {'text': ''}

    def execute(self, inputs: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        value = inputs.get('in')
        if isinstance(value, (dict, list)):
            text = json.dumps(value, indent=2)
        elif value is None:
            text = ''
        else:
            text = str(value)
        return {'text': text}
