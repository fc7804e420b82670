"""
Built-in templates
Ready-made graphs the workspace can be loaded from
"""
import copy
from typing import Dict, Any, List, Optional, Type

from .execution.node_base import BaseNode
from .execution.nodes import (
    UserPromptNode,
    AIPersonaNode,
    GeminiNode,
    OutputNode,
    ImageGeneratorNode,
    ImageDisplayNode,
    TextSummarizerNode,
    SchedulerNode,
    FormatterNode,
)
from .types import NodeData, ConnectionData, TemplateData

SUMMARY_SAMPLE_TEXT = (
    "The industrial revolution was the transition to new manufacturing processes in Great Britain, "
    "continental Europe, and the United States, in the period from about 1760 to some time between "
    "1820 and 1840. This transition included going from hand production methods to machines, new "
    "chemical manufacturing and iron production processes, the increasing use of steam power and "
    "water power, the development of machine tools and the rise of the mechanized factory system."
)


def _node(node_id: str, node_class: Type[BaseNode], x: float, y: float, **state: Any) -> NodeData:
    node_state = copy.deepcopy(node_class.default_state)
    node_state.update(state)
    return {'id': node_id, 'type': node_class.type_id, 'state': node_state, 'position': {'x': x, 'y': y}}


def _connect(source: str, source_output: str, target: str, target_input: str) -> ConnectionData:
    return {
        'id': f"conn-{source}-{target}-{target_input}",
        'source_node': source,
        'source_output': source_output,
        'target_node': target,
        'target_input': target_input,
    }


TEMPLATES: List[TemplateData] = [
    {
        'name': 'Basic Chatbot',
        'description': 'A simple conversational AI using a persona.',
        'nodes': [
            _node('node-1', UserPromptNode, 50, 50),
            _node('node-2', OutputNode, 1050, 150),
            _node('node-3', AIPersonaNode, 50, 250),
            _node('node-4', GeminiNode, 550, 150),
        ],
        'connections': [
            _connect('node-1', 'out', 'node-4', 'prompt'),
            _connect('node-3', 'out', 'node-4', 'context'),
            _connect('node-4', 'out', 'node-2', 'in'),
        ],
    },
    {
        'name': 'Image Generation Workflow',
        'description': 'Generate an image from a prompt and display it.',
        'nodes': [
            _node('img-1', UserPromptNode, 50, 150, text='A majestic lion wearing a crown, cinematic lighting'),
            _node('img-2', ImageGeneratorNode, 450, 150),
            _node('img-3', ImageDisplayNode, 850, 150),
        ],
        'connections': [
            _connect('img-1', 'out', 'img-2', 'prompt'),
            _connect('img-2', 'out', 'img-3', 'in'),
        ],
    },
    {
        'name': 'Text Summarizer',
        'description': 'Provide text to an AI to receive a concise summary.',
        'nodes': [
            _node('sum-1', UserPromptNode, 50, 150, text=SUMMARY_SAMPLE_TEXT),
            _node('sum-2', TextSummarizerNode, 450, 150),
            _node('sum-3', OutputNode, 850, 150),
        ],
        'connections': [
            _connect('sum-1', 'out', 'sum-2', 'in'),
            _connect('sum-2', 'out', 'sum-3', 'in'),
        ],
    },
    {
        'name': 'Scheduled Digest',
        'description': 'Stamps a digest line every minute while the scheduler is running.',
        'nodes': [
            _node('sched-1', SchedulerNode, 50, 150, intervalSeconds=60),
            _node('sched-2', FormatterNode, 450, 150, suffix=' - digest tick'),
            _node('sched-3', OutputNode, 850, 150),
        ],
        'connections': [
            _connect('sched-1', 'out', 'sched-2', 'in'),
            _connect('sched-2', 'out', 'sched-3', 'in'),
        ],
    },
]


def list_builtin_templates() -> List[TemplateData]:
    """Independent copies of the built-in templates"""
    return copy.deepcopy(TEMPLATES)


def get_builtin_template(name: str) -> Optional[TemplateData]:
    for template in TEMPLATES:
        if template['name'] == name:
            return copy.deepcopy(template)
    return None


def template_to_graph(template: TemplateData) -> Dict[str, Any]:
    """Graph dict form of a template (what Graph.from_user_edit accepts)"""
    return {
        'id': template['name'],
        'name': template['name'],
        'nodes': copy.deepcopy(template['nodes']),
        'connections': copy.deepcopy(template['connections']),
    }
