"""netmermaid — Mermaid class diagrams from .NET type catalogs.

Public API:
    generate(namespace, sub_scope, source) → str
    generate_md_file(output_dir, namespace, sub_scope, source) → Path
"""

from pathlib import Path
from typing import Optional

__all__ = ["generate", "generate_md_file"]


def _service(source: str, settings=None):
    from .core.catalog import get_provider
    from .core.diagrams import DiagramService
    from .setting import DiagramSettings

    settings = settings or DiagramSettings()
    provider = get_provider(
        source,
        include_interfaces=settings.include_interfaces,
        include_fields=settings.include_fields,
    )
    return DiagramService(provider, settings)


def generate(namespace: str, sub_scope: Optional[str] = None, source: str = ".", settings=None) -> str:
    """Generate the Mermaid diagram for the types under ``namespace`` + ``sub_scope``.

    Args:
        namespace: Root namespace (e.g. "Shop")
        sub_scope: Namespace suffix; defaults to ".Database.Entities"
        source: C# source directory/file or YAML/JSON schema file
        settings: Optional DiagramSettings

    Returns:
        Fenced Mermaid document text
    """
    return _service(source, settings).generate(namespace, sub_scope)


def generate_md_file(
    output_dir: Optional[str],
    namespace: str,
    sub_scope: Optional[str] = None,
    source: str = ".",
    settings=None,
) -> Path:
    """Generate the diagram and write it to ``<output_dir>/<namespace><sub_scope>.md``."""
    return _service(source, settings).write_markdown(namespace, sub_scope, output_dir)
