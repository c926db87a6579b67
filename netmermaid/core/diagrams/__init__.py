"""Mermaid class diagram generation for a namespace's types.

Renders a type catalog as a fenced Mermaid ``classDiagram``:
  Blocks: classes (members + methods), enumerations, interfaces
  Edges: inherits, implements, has, has many

Public API:
  DiagramService — loads a catalog and generates / writes the diagram
  assemble, render_class, render_enum, derive_relationships, friendly_name
"""

from .class_diagram import assemble, derive_relationships, render_class, render_enum
from .naming import friendly_name
from .service import DiagramService

__all__ = [
    "DiagramService",
    "assemble",
    "derive_relationships",
    "render_class",
    "render_enum",
    "friendly_name",
]
