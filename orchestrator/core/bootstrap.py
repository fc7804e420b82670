"""
Bootstrap module for Orchestration Core
Single entry point that builds the services shared by the API and the CLI
"""
from typing import Optional
import threading

from .container import ServiceContainer
from .config import Config
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Cache containers by mode to avoid rebuilding clients
_container_cache: dict[str, ServiceContainer] = {}
_container_lock = threading.Lock()


def get_container(mode: Optional[str] = None, *, force: bool = False) -> ServiceContainer:
    """
    Build or retrieve cached ServiceContainer

    Args:
        mode: 'solo' or 'prod' (defaults to Config.MODE)
        force: Force rebuild even if cached (default: False)

    Returns:
        ServiceContainer with the template store and Gemini client
    """
    resolved_mode = mode or Config.MODE

    with _container_lock:
        if not force and resolved_mode in _container_cache:
            logger.debug(f"Returning cached container for mode={resolved_mode}")
            return _container_cache[resolved_mode]

        logger.info(f"Building ServiceContainer for mode={resolved_mode}")

        # get_storage() reads Config.MODE, so point it at the resolved mode while building
        original_mode = Config.MODE
        Config.MODE = resolved_mode
        try:
            template_store = Config.get_storage()
            logger.debug(f"Template store initialized: {type(template_store).__name__}")

            from ..services.gemini_client import GeminiClient
            gemini = GeminiClient()
            if not gemini.configured:
                logger.warning("GEMINI_API_KEY is not set; AI nodes will fail when run")

            container = ServiceContainer(
                gemini=gemini,
                template_store=template_store,
                mode=resolved_mode,
            )
            _container_cache[resolved_mode] = container
            logger.info(f"ServiceContainer built and cached for mode={resolved_mode}")
            return container
        finally:
            Config.MODE = original_mode


def clear_cache():
    """Clear the container cache (useful for testing or forced rebuilds)"""
    with _container_lock:
        _container_cache.clear()
    logger.debug("Container cache cleared")
