"""
Abstract template store for Orchestration Core
Supports both solo mode (local JSON) and prod mode (Supabase)
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Mapping, Any

from ..core.types import TemplateData


class TemplateNotFoundError(KeyError):
    """Raised when a named template does not exist"""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Template not found: {self.name}"


def normalize_template(data: Mapping[str, Any]) -> TemplateData:
    """
    Coerce stored or submitted data into a TemplateData dict

    Raises:
        ValueError: If the name is missing or nodes/connections are not lists
    """
    name = str(data.get('name') or '').strip()
    if not name:
        raise ValueError("Template name is required")
    nodes = data.get('nodes', [])
    connections = data.get('connections', [])
    if not isinstance(nodes, list) or not isinstance(connections, list):
        raise ValueError(f"Template {name!r} must have 'nodes' and 'connections' lists")
    return {
        'name': name,
        'description': str(data.get('description') or ''),
        'nodes': nodes,
        'connections': connections,
    }


class TemplateStore(ABC):
    """Abstract interface for template backends; templates are keyed by name"""

    @abstractmethod
    def list_templates(self) -> List[TemplateData]:
        """Get every saved template, ordered by name"""
        pass

    @abstractmethod
    def get_template(self, name: str) -> Optional[TemplateData]:
        """Get a template by name, or None"""
        pass

    @abstractmethod
    def save_template(self, template: Mapping[str, Any]) -> TemplateData:
        """Add a template or replace the one with the same name"""
        pass

    @abstractmethod
    def delete_template(self, name: str) -> None:
        """
        Delete a template

        Raises:
            TemplateNotFoundError: If no template has that name
        """
        pass

    def has_template(self, name: str) -> bool:
        return self.get_template(name) is not None
