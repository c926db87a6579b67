"""DiagramService — orchestrator for namespace class-diagram generation.

Loads the catalog for ``<namespace><sub_scope>`` through a catalog
provider, assembles the Mermaid document, and optionally writes it to a
Markdown file named after the scope.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from ..catalog.base import BaseCatalogProvider
from ..constants import ENTITIES_MARKER, MARKDOWN_EXTENSION, TITLE_SUFFIX
from .class_diagram import assemble

logger = logging.getLogger(__name__)


def normalize_sub_scope(sub_scope: Optional[str]) -> str:
    """Ensure a non-empty sub-scope starts with a dot (``Database.Entities`` -> ``.Database.Entities``)."""
    sub_scope = (sub_scope or "").strip()
    if sub_scope and not sub_scope.startswith("."):
        sub_scope = "." + sub_scope
    return sub_scope


class DiagramService:
    """Generates Mermaid class diagrams for a namespace scope."""

    def __init__(self, provider: BaseCatalogProvider, settings=None):
        """Initialize DiagramService.

        Args:
            provider: Catalog provider the types are read from
            settings: DiagramSettings; defaults when None
        """
        if settings is None:
            from ...setting import DiagramSettings
            settings = DiagramSettings()
        self._provider = provider
        self._settings = settings

    def generate(self, namespace: str, sub_scope: Optional[str] = None) -> str:
        """Generate the diagram text for ``namespace`` + ``sub_scope``.

        Args:
            namespace: Root namespace; must exist in the catalog source
            sub_scope: Namespace suffix; defaults to the configured one

        Returns:
            The complete fenced Mermaid document

        Raises:
            CatalogLoadError: If the catalog cannot be loaded
        """
        sub_scope = normalize_sub_scope(self._settings.sub_scope if sub_scope is None else sub_scope)
        scope = f"{namespace}{sub_scope}"

        catalog = self._provider.list_types(scope, root_namespace=namespace)
        direction = self._settings.direction if ENTITIES_MARKER in sub_scope else None

        diagram = assemble(
            catalog,
            title=f"{scope} {TITLE_SUFFIX}",
            direction=direction,
            collection_types=self._settings.collection_types,
        )
        logger.info(f"Generated class diagram for {scope} ({len(catalog)} types)")
        return diagram

    def write_markdown(
        self,
        namespace: str,
        sub_scope: Optional[str] = None,
        output_dir: Optional[str] = None,
    ) -> Path:
        """Generate the diagram and write it to ``<namespace><sub_scope>.md``.

        The file goes to ``output_dir`` (relative paths resolve against the
        working directory), falling back to the configured output directory
        and then the working directory itself.

        Returns:
            Path of the written file
        """
        sub_scope = normalize_sub_scope(self._settings.sub_scope if sub_scope is None else sub_scope)
        diagram = self.generate(namespace, sub_scope)

        target_dir = Path(os.getcwd())
        chosen = output_dir if output_dir is not None else self._settings.output_dir
        if chosen:
            target_dir = target_dir / chosen
        target_dir.mkdir(parents=True, exist_ok=True)

        path = target_dir / f"{namespace}{sub_scope}{MARKDOWN_EXTENSION}"
        path.write_text(diagram + "\n", encoding="utf-8")
        logger.info(f"Wrote {path}")
        return path
