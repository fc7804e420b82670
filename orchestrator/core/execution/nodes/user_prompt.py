"""
User Prompt Node
Entry point for the user's question
"""
from typing import Dict, Any
from ..node_base import BaseNode, ExecutionContext


class UserPromptNode(BaseNode):
    """
    Source node holding the primary input from the end-user

    Outputs:
        out: The prompt text (state field 'text')
    """

    type_id = "USER_PROMPT"
    name = "User Prompt"
    category = "Inputs"
    description = "Represents the primary input or question from the end-user."

    output_ports = ('out',)
    output_fields = {'out': 'text'}
    default_state = {
        'text': 'A curious cat is exploring a futuristic city full of neon lights and flying cars.',
    }
    sticky_fields = ('text',)

    def execute(self, inputs: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        # Authored text is already in state; nothing to compute
        return {}
