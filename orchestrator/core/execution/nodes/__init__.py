"""
Node implementations for execution engine
"""
from .user_prompt import UserPromptNode
from .ai_persona import AIPersonaNode
from .system_context import SystemContextNode
from .json_object import JsonObjectNode
from .scheduler import SchedulerNode
from .gemini import GeminiNode
from .image_generator import ImageGeneratorNode
from .text_summarizer import TextSummarizerNode
from .formatter import FormatterNode
from .json_extractor import JsonExtractorNode
from .code_executor import CodeExecutorNode
from .http_request import HttpRequestNode
from .sql_query import SqlQueryNode
from .output import OutputNode
from .image_display import ImageDisplayNode

# Registration order is the order node types are listed in the catalog
BUILTIN_NODES = (
    UserPromptNode,
    AIPersonaNode,
    SystemContextNode,
    JsonObjectNode,
    SchedulerNode,
    GeminiNode,
    ImageGeneratorNode,
    TextSummarizerNode,
    FormatterNode,
    JsonExtractorNode,
    CodeExecutorNode,
    HttpRequestNode,
    SqlQueryNode,
    OutputNode,
    ImageDisplayNode,
)

__all__ = [node_class.__name__ for node_class in BUILTIN_NODES] + ['BUILTIN_NODES']
