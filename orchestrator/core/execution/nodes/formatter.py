"""
Formatter Node
Appends a fixed suffix to text
"""
from typing import Dict, Any
from ..node_base import BaseNode, ExecutionContext


class FormatterNode(BaseNode):
    """
    Appends state['suffix'] to the input text

    Inputs:
        in: Text (absent input is treated as empty)

    Outputs:
        out: Formatted text (state field 'result')
    """

    type_id = "FORMATTER"
    name = "Simple Formatter"
    category = "Utilities"
    description = "Appends a fixed string to the input text."

    input_ports = ('in',)
    output_ports = ('out',)
    output_fields = {'out': 'result'}
    default_state = {'suffix': ' - (Formatted)'}
    sticky_fields = ('suffix',)

    def execute(self, inputs: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        text = inputs.get('in', '')
        suffix = self.state.get('suffix') or ''
        return {'result': f"{text}{suffix}"}
