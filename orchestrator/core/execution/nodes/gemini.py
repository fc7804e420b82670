"""
Gemini Node
General-purpose text generation with the Gemini model
"""
import asyncio
from typing import Dict, Any, Optional

from ..node_base import BaseNode, ExecutionContext
from ....services.gemini_client import GeminiClient
from ....utils.json_path import parse_json_value
from ....utils.logger import get_logger

logger = get_logger(__name__)

PARAMS_ERROR = "Invalid format in Parameters node. Must be a valid JSON object."


def get_gemini_client(context: ExecutionContext) -> GeminiClient:
    """Gemini client from the service container, or a default one"""
    container = context.container
    client = getattr(container, 'gemini', None) if container is not None else None
    return client if client is not None else GeminiClient()


def build_system_instruction(context: ExecutionContext, node_context: Optional[str]) -> str:
    """
    Combine run-wide instructions with a node's own context

    Global instructions come first, separated from the node context by a rule.
    """
    global_instruction = context.config.system_instruction()
    if global_instruction and node_context:
        return f"{global_instruction}\n\n---\n\n{node_context}"
    return global_instruction or node_context or ''


def parse_model_params(params: Any) -> Dict[str, Any]:
    """Parse the 'params' input (JSON text or dict) into a config dict"""
    if params is None or params == '':
        return {}
    try:
        parsed = parse_json_value(params, "parameters")
    except ValueError:
        raise ValueError(PARAMS_ERROR) from None
    if not isinstance(parsed, dict):
        raise ValueError(PARAMS_ERROR)
    return dict(parsed)


class GeminiNode(BaseNode):
    """
    Processes inputs using the Gemini model

    Inputs:
        prompt: User prompt (absent input is treated as empty)
        context: Node-specific system context
        params: JSON object of generation parameters; a 'systemInstruction'
            key replaces the combined system instruction entirely

    Outputs:
        out: Generated text (state field 'result')
    """

    type_id = "GEMINI"
    name = "Gemini Model"
    category = "AI / Logic"
    description = "Processes inputs using the Gemini model for general tasks."

    input_ports = ('prompt', 'context', 'params')
    output_ports = ('out',)
    output_fields = {'out': 'result'}
    default_state = {'isLoading': False}

    async def execute(self, inputs: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        generation_config = parse_model_params(inputs.get('params'))
        system_instruction = generation_config.pop('systemInstruction', None)
        if not system_instruction:
            system_instruction = build_system_instruction(context, inputs.get('context'))

        prompt = str(inputs.get('prompt', ''))
        client = get_gemini_client(context)
        logger.debug(f"GeminiNode {self.node_id}: prompt length={len(prompt)}")

        text = await asyncio.to_thread(
            client.generate_text,
            prompt,
            system_instruction=system_instruction or None,
            generation_config=generation_config or None,
        )
        return {'result': text}
