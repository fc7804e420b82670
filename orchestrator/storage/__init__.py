"""
Template storage for Orchestration Core
"""
from .base import TemplateStore, TemplateNotFoundError
from .local_json import LocalJSONTemplateStore
from .supabase import SupabaseTemplateStore

__all__ = ['TemplateStore', 'TemplateNotFoundError', 'LocalJSONTemplateStore', 'SupabaseTemplateStore']
