"""
Local JSON template store for solo mode
Stores one JSON file per template under <storage>/templates/
Only accessible to the local user
"""
import os
import re
import json
import hashlib
from pathlib import Path
from typing import List, Optional, Mapping, Any

from .base import TemplateStore, TemplateNotFoundError, normalize_template
from ..core.types import TemplateData
from ..utils.logger import get_logger

logger = get_logger(__name__)


class LocalJSONTemplateStore(TemplateStore):
    """Local JSON file template store for solo mode"""

    def __init__(self, storage_path: Optional[str] = None):
        """
        Initialize local JSON template store

        Args:
            storage_path: Base path for storage (default: ~/.orchestrator/data/)
        """
        if storage_path is None:
            self.base_path = Path.home() / ".orchestrator" / "data"
        else:
            self.base_path = Path(storage_path)

        self.templates_path = self.base_path / "templates"
        self.templates_path.mkdir(parents=True, exist_ok=True)

        # Set file permissions (user only)
        os.chmod(self.base_path, 0o700)
        os.chmod(self.templates_path, 0o700)

    def _get_template_file(self, name: str) -> Path:
        """File for a template; the hash keeps names that slug alike apart"""
        slug = re.sub(r'[^A-Za-z0-9_-]+', '-', name).strip('-').lower() or 'template'
        digest = hashlib.sha256(name.encode('utf-8')).hexdigest()[:8]
        return self.templates_path / f"{slug}-{digest}.json"

    def list_templates(self) -> List[TemplateData]:
        templates: List[TemplateData] = []
        for template_file in self.templates_path.glob("*.json"):
            try:
                with open(template_file, 'r') as f:
                    templates.append(normalize_template(json.load(f)))
            except (OSError, ValueError) as e:
                logger.error(f"Skipping unreadable template file {template_file.name}: {e}")
        return sorted(templates, key=lambda t: t['name'])

    def get_template(self, name: str) -> Optional[TemplateData]:
        template_file = self._get_template_file(name)
        if not template_file.exists():
            return None
        with open(template_file, 'r') as f:
            return normalize_template(json.load(f))

    def save_template(self, template: Mapping[str, Any]) -> TemplateData:
        data = normalize_template(template)
        template_file = self._get_template_file(data['name'])
        tmp_file = template_file.with_suffix('.json.tmp')
        with open(tmp_file, 'w') as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_file, template_file)
        os.chmod(template_file, 0o600)  # User read/write only
        logger.info(f"Saved template {data['name']!r} to {template_file}")
        return data

    def delete_template(self, name: str) -> None:
        template_file = self._get_template_file(name)
        if not template_file.exists():
            raise TemplateNotFoundError(name)
        template_file.unlink()
        logger.info(f"Deleted template {name!r}")
