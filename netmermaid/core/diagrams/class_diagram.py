"""Deterministic Mermaid generator for class diagrams.

Takes a type catalog and produces Mermaid ``classDiagram`` syntax.
Purely data-driven: output depends only on the catalog and its ordering.
"""

import logging
from typing import Iterable, List, Optional, Set, Tuple

from ..catalog.models import (
    MethodDescriptor,
    TypeCatalog,
    TypeDescriptor,
    TypeReference,
)
from .naming import friendly_name

logger = logging.getLogger(__name__)

FENCE_OPEN = "```mermaid"
FENCE_CLOSE = "```"

# Single-argument generic containers whose element type yields "has many"
DEFAULT_COLLECTION_TYPES = (
    "ICollection",
    "IList",
    "List",
    "IEnumerable",
    "ISet",
    "HashSet",
    "IReadOnlyCollection",
    "IReadOnlyList",
    "Collection",
)


def assemble(
    catalog: TypeCatalog,
    title: str,
    direction: Optional[str] = None,
    collection_types: Iterable[str] = DEFAULT_COLLECTION_TYPES,
) -> str:
    """Generate a complete Mermaid class diagram document.

    Args:
        catalog: Types to draw, in catalog order
        title: Text of the front-matter title line
        direction: Layout direction (``RL``, ``LR``, ...); no line when None
        collection_types: Generic container names treated as "has many"

    Returns:
        The fenced diagram text, lines joined by newline
    """
    lines = [FENCE_OPEN, "---", f"title : {title}", "---", "classDiagram"]
    if direction:
        lines.append(f"direction {direction}")

    rendered: Set[str] = set()
    for type_ in catalog:
        if type_.name in rendered:
            logger.warning("Skipping duplicate type name %s (%s)", type_.name, type_.qualified_name)
            continue
        rendered.add(type_.name)

        if type_.is_enum:
            lines.extend(render_enum(type_))
        else:
            lines.extend(render_class(type_, catalog))

    lines.extend(derive_relationships(catalog, collection_types))
    lines.append(FENCE_CLOSE)
    return "\n".join(lines)


def render_enum(type_: TypeDescriptor) -> List[str]:
    """Render an enumeration block; enums never produce edges."""
    lines = [f"class {type_.name} {{", "<<enumeration>>"]
    for value in type_.enum_values:
        if value.description:
            lines.append(f"  {value.name} : '{value.description}'")
        else:
            lines.append(f"  {value.name}")
    lines.append("}")
    return lines


def render_class(type_: TypeDescriptor, catalog: TypeCatalog) -> List[str]:
    """Render a class block followed by its inheritance and interface edges."""
    lines = [f"class {type_.name} {{"]
    if type_.is_interface:
        lines.append("<<interface>>")

    for member in type_.members:
        vis = _visibility_symbol(member.is_public)
        lines.append(f"  {vis}{friendly_name(member.type_ref)} {member.name}")

    for method in collect_methods(type_, catalog):
        vis = _visibility_symbol(method.is_public)
        params = ", ".join(f"{friendly_name(p.type_ref)} {p.name}" for p in method.parameters)
        lines.append(f"  {vis}{method.name}({params}) {friendly_name(method.return_type)}")

    lines.append("}")

    if not type_.has_root_base() and type_.base_type.name in catalog:
        lines.append(f"{type_.base_type.name} <|.. {type_.name} : inherits")

    # Implemented interfaces are drawn whether or not they have a block
    for iface in type_.implemented_interfaces:
        lines.append(f"{friendly_name(iface)} <|-- {type_.name} : implements")

    return lines


def collect_methods(type_: TypeDescriptor, catalog: TypeCatalog) -> List[MethodDescriptor]:
    """Methods of a type followed by those of each ancestor.

    Walks ``base_type`` upward until the root type or a type the catalog
    does not know. Special members are skipped and a signature already
    seen lower in the chain hides the ancestor's copy.
    """
    methods: List[MethodDescriptor] = []
    seen: Set[Tuple[str, Tuple[str, ...]]] = set()
    visited: Set[str] = set()

    current: Optional[TypeDescriptor] = type_
    while current is not None and current.name not in visited:
        visited.add(current.name)
        for method in current.methods:
            if method.is_special:
                continue
            signature = (method.name, tuple(friendly_name(p.type_ref) for p in method.parameters))
            if signature in seen:
                continue
            seen.add(signature)
            methods.append(method)

        if current.has_root_base():
            break
        current = catalog.resolve(current.base_type.name)

    return methods


def derive_relationships(
    catalog: TypeCatalog,
    collection_types: Iterable[str] = DEFAULT_COLLECTION_TYPES,
) -> List[str]:
    """Derive composition and aggregation edges from class members.

    One edge per qualifying member, in catalog order then member order.
    Repeated targets are kept.
    """
    collections = frozenset(collection_types)
    edges = []
    for type_ in catalog:
        if not type_.is_class:
            continue
        for member in type_.members:
            ref = member.type_ref
            if ref.name in catalog:
                edges.append(f"{type_.name} --> {ref.name} : has")
                continue
            element = _collection_element(ref, collections)
            if element is not None and element.name in catalog:
                edges.append(f'{type_.name} --> "*" {element.name} : has many')
    return edges


def _collection_element(ref: TypeReference, collections: frozenset) -> Optional[TypeReference]:
    if len(ref.generic_arguments) == 1 and ref.base_name in collections:
        return ref.generic_arguments[0]
    return None


def _visibility_symbol(is_public: bool) -> str:
    return "+" if is_public else "-"
