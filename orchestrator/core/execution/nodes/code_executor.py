"""
Code Executor Node
Mock execution of a script; nothing is actually run
"""
from typing import Dict, Any
from ..node_base import BaseNode, ExecutionContext


class CodeExecutorNode(BaseNode):
    """
    Mocks running a code snippet

    The script comes from the 'in' input when connected, otherwise from the
    authored state['script'].

    Outputs:
        out: Mock console output (state field 'result')
    """

    type_id = "CODE_EXECUTOR"
    name = "Code Executor"
    category = "Development"
    description = "Mocks the execution of a code snippet (e.g., Node.js)."

    input_ports = ('in',)
    output_ports = ('out',)
    output_fields = {'out': 'result'}
    default_state = {'script': 'console.log("Hello from Node.js!");'}
    sticky_fields = ('script',)

    def execute(self, inputs: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        script = inputs.get('in', self.state.get('script', ''))
        return {
            'result': f"// Mock execution of:\n{script}\n// --> Console: Hello from Node.js!"
        }
