"""Base interface for type catalog providers.

Defines the Strategy pattern base class that all providers implement.
Namespace scoping lives here; how descriptors are obtained is delegated.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .models import TypeCatalog, TypeDescriptor

logger = logging.getLogger(__name__)


class CatalogLoadError(RuntimeError):
    """The catalog for a namespace could not be produced."""


def in_namespace(namespace: str, scope: str) -> bool:
    """True when ``namespace`` is ``scope`` or nested below it."""
    if not scope:
        return True
    return namespace == scope or namespace.startswith(scope + ".")


class BaseCatalogProvider(ABC):
    """Abstract base for catalog providers.

    Subclasses implement:
    - load_types(): every descriptor the provider can see, in a stable order
    """

    def __init__(self, include_interfaces: bool = False):
        self.include_interfaces = include_interfaces

    @abstractmethod
    def load_types(self) -> List[TypeDescriptor]:
        """Return all descriptors available to this provider.

        Raises:
            CatalogLoadError: If the underlying source cannot be read
        """
        ...

    def list_types(self, namespace_scope: str, root_namespace: Optional[str] = None) -> TypeCatalog:
        """Build the catalog for a namespace scope.

        Args:
            namespace_scope: Namespace whose types (and nested namespaces' types) are in scope
            root_namespace: Namespace that must exist for the request to be valid.
                Defaults to ``namespace_scope``. An existing root with an empty
                scope yields an empty catalog.

        Returns:
            TypeCatalog with in-scope types in provider order

        Raises:
            CatalogLoadError: If no type lives under ``root_namespace``
        """
        all_types = self.load_types()
        root = namespace_scope if root_namespace is None else root_namespace

        if not any(in_namespace(t.namespace, root) for t in all_types):
            raise CatalogLoadError(f"Namespace not found: {root}")

        known: Dict[str, TypeDescriptor] = {}
        for t in all_types:
            known.setdefault(t.name, t)

        scoped = [
            t for t in all_types
            if in_namespace(t.namespace, namespace_scope)
            and (self.include_interfaces or not t.is_interface)
        ]
        logger.info(
            "Catalog for %s: %d types in scope, %d known",
            namespace_scope, len(scoped), len(known),
        )
        return TypeCatalog(types=scoped, known=known, namespace=namespace_scope)
