"""
System Context Node
Custom instructions or background context for AI nodes
"""
from typing import Dict, Any
from ..node_base import BaseNode, ExecutionContext


class SystemContextNode(BaseNode):
    """
    Source node with free-form system context

    Outputs:
        out: Context text (state field 'text')
    """

    type_id = "SYSTEM_CONTEXT"
    name = "System Context"
    category = "Inputs"
    description = "Provides custom instructions or background context to the AI."

    output_ports = ('out',)
    output_fields = {'out': 'text'}
    default_state = {
        'text': 'You are a helpful and creative assistant. Always respond in a concise and witty manner.',
    }
    sticky_fields = ('text',)

    def execute(self, inputs: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        return {}
