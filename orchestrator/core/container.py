"""
Service Container
Holds the external services node effects and surfaces depend on
"""
import time
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..storage.base import TemplateStore
    from ..services.gemini_client import GeminiClient


@dataclass
class ServiceContainer:
    """
    Container holding all core services for Orchestration Core

    Node effects reach external clients through ExecutionContext.container, so
    tests can hand the engine a container with fakes in it.
    """
    gemini: Optional['GeminiClient'] = None
    template_store: Optional['TemplateStore'] = None

    # Metadata
    mode: str = "solo"
    initialized_at: Optional[float] = None

    def __post_init__(self):
        """Set initialization timestamp if not provided"""
        if self.initialized_at is None:
            self.initialized_at = time.time()
