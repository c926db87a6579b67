"""Type catalog — descriptors of the types a diagram is drawn from.

Public API:
    get_provider(path, ...) → BaseCatalogProvider
    load_catalog(path, namespace_scope, ...) → TypeCatalog
    parse_type_reference(text) → TypeReference
"""

from typing import Optional

from .base import BaseCatalogProvider, CatalogLoadError, in_namespace
from .models import (
    EnumValue,
    MemberDescriptor,
    MethodDescriptor,
    ParameterDescriptor,
    TypeCatalog,
    TypeDescriptor,
    TypeKind,
    TypeReference,
)
from .type_names import parse_type_reference
from .utils import detect_provider_kind

__all__ = [
    "get_provider",
    "load_catalog",
    "parse_type_reference",
    "in_namespace",
    "BaseCatalogProvider",
    "CatalogLoadError",
    "EnumValue",
    "MemberDescriptor",
    "MethodDescriptor",
    "ParameterDescriptor",
    "TypeCatalog",
    "TypeDescriptor",
    "TypeKind",
    "TypeReference",
]


def get_provider(
    path: str,
    include_interfaces: bool = False,
    include_fields: bool = False,
) -> BaseCatalogProvider:
    """Create the provider that reads ``path``.

    Directories and ``.cs`` files use the tree-sitter C# provider;
    ``.yaml``/``.yml``/``.json`` files use the schema provider.

    Raises:
        CatalogLoadError: If the path is of no recognised kind
    """
    kind = detect_provider_kind(path)
    if kind == "csharp":
        from .csharp_provider import CSharpCatalogProvider
        return CSharpCatalogProvider(
            path, include_interfaces=include_interfaces, include_fields=include_fields
        )
    if kind == "schema":
        from .schema_provider import SchemaCatalogProvider
        return SchemaCatalogProvider(path, include_interfaces=include_interfaces)
    raise CatalogLoadError(f"Unsupported or missing catalog source: {path}")


def load_catalog(
    path: str,
    namespace_scope: str,
    root_namespace: Optional[str] = None,
    **provider_options,
) -> TypeCatalog:
    """Load the catalog for ``namespace_scope`` from a source tree or schema file."""
    provider = get_provider(path, **provider_options)
    return provider.list_types(namespace_scope, root_namespace=root_namespace)
