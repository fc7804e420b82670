"""
Supabase template store for prod mode
Templates live in the 'templates' table with the name as unique key
"""
from typing import List, Optional, Mapping, Any

from supabase import create_client, Client

from .base import TemplateStore, TemplateNotFoundError, normalize_template
from ..core.types import TemplateData
from ..utils.logger import get_logger

logger = get_logger(__name__)

TABLE = 'templates'
COLUMNS = 'name,description,nodes,connections'


class SupabaseTemplateStore(TemplateStore):
    """Supabase template store for prod mode"""

    def __init__(self, supabase_url: str, supabase_key: str, client: Optional[Client] = None):
        """
        Initialize Supabase template store

        Args:
            supabase_url: Supabase project URL
            supabase_key: Supabase service role key
            client: Pre-built client (skips create_client)
        """
        self.client: Client = client if client is not None else create_client(supabase_url, supabase_key)

    def list_templates(self) -> List[TemplateData]:
        result = self.client.table(TABLE).select(COLUMNS).order('name').execute()
        return [normalize_template(row) for row in (result.data or [])]

    def get_template(self, name: str) -> Optional[TemplateData]:
        result = self.client.table(TABLE).select(COLUMNS).eq('name', name).limit(1).execute()
        if not result.data:
            return None
        return normalize_template(result.data[0])

    def save_template(self, template: Mapping[str, Any]) -> TemplateData:
        data = normalize_template(template)
        self.client.table(TABLE).upsert(dict(data), on_conflict='name').execute()
        logger.info(f"Saved template {data['name']!r} to Supabase")
        return data

    def delete_template(self, name: str) -> None:
        result = self.client.table(TABLE).delete().eq('name', name).execute()
        if not result.data:
            raise TemplateNotFoundError(name)
        logger.info(f"Deleted template {name!r} from Supabase")
