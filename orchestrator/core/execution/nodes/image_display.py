"""
Image Display Node
"""
from typing import Dict, Any
from ..node_base import BaseNode, ExecutionContext


class ImageDisplayNode(BaseNode):
    """Displays a generated image (data URL or link) received on 'in'"""

    type_id = "IMAGE_DISPLAY"
    name = "Image Display"
    category = "Output"
    description = "Displays a generated image."

    input_ports = ('in',)
    default_state = {'image': ''}

    def execute(self, inputs: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        return {'image': inputs.get('in', '')}
