"""
Clients for the external services node effects call
"""
from .gemini_client import GeminiClient, GeminiAPIError

__all__ = ['GeminiClient', 'GeminiAPIError']
