"""
Text Summarizer Node
"""
import asyncio
from typing import Dict, Any

from ..node_base import BaseNode, ExecutionContext
from .gemini import get_gemini_client, build_system_instruction

SUMMARIZER_CONTEXT = "You are an expert summarizer. Provide a concise summary of the following text:"


class TextSummarizerNode(BaseNode):
    """
    Summarizes text with the Gemini model

    Inputs:
        in: Text to summarize

    Outputs:
        out: Summary (state field 'result')
    """

    type_id = "TEXT_SUMMARIZER"
    name = "Text Summarizer"
    category = "AI / Logic"
    description = "Summarizes a long piece of text using an AI model."

    input_ports = ('in',)
    output_ports = ('out',)
    output_fields = {'out': 'result'}
    default_state = {'isLoading': False}

    async def execute(self, inputs: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        client = get_gemini_client(context)
        summary = await asyncio.to_thread(
            client.generate_text,
            str(inputs.get('in', '')),
            system_instruction=build_system_instruction(context, SUMMARIZER_CONTEXT),
        )
        return {'result': summary}
