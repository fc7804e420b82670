"""
AI Persona Node
Pre-defined personality used as system context
"""
from typing import Dict, Any
from ..node_base import BaseNode, ExecutionContext
from ...personas import AI_PERSONAS, get_persona


class AIPersonaNode(BaseNode):
    """
    Source node emitting a persona description

    The authored description wins; when it is empty the catalog entry for
    personaName is used.

    Outputs:
        out: Persona description (state field 'result')
    """

    type_id = "AI_PERSONA"
    name = "AI Persona"
    category = "Inputs"
    description = "Select a pre-defined AI personality to act as the system context."

    output_ports = ('out',)
    output_fields = {'out': 'result'}
    default_state = {
        'personaName': AI_PERSONAS[0]['name'],
        'description': AI_PERSONAS[0]['description'],
    }
    sticky_fields = ('personaName', 'description')

    def execute(self, inputs: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        description = self.state.get('description')
        if not description:
            persona = get_persona(self.state.get('personaName'))
            if persona is None:
                raise ValueError(f"Unknown persona: {self.state.get('personaName')!r}")
            description = persona['description']
        return {'result': description}
