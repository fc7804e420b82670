"""
Image Generator Node
Text-to-image with Imagen
"""
import asyncio
from typing import Dict, Any

from ..node_base import BaseNode, ExecutionContext
from .gemini import get_gemini_client


class ImageGeneratorNode(BaseNode):
    """
    Generates an image from a text prompt

    Inputs:
        prompt: Image description

    Outputs:
        out: JPEG data URL (state field 'result')
    """

    type_id = "IMAGE_GENERATOR"
    name = "Image Generator"
    category = "AI / Logic"
    description = "Generates an image from a text prompt using Imagen."

    input_ports = ('prompt',)
    output_ports = ('out',)
    output_fields = {'out': 'result'}
    default_state = {'isLoading': False}

    async def execute(self, inputs: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        prompt = str(inputs.get('prompt', '')).strip()
        if not prompt:
            raise ValueError("Image prompt is empty")
        client = get_gemini_client(context)
        image = await asyncio.to_thread(client.generate_image, prompt)
        return {'result': image}
