"""Type catalog data models.

Defines the descriptors a catalog provider produces and the diagram
renderers consume. These are pure data containers — no parsing logic.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Set

# Base names that mean "no base type"
ROOT_TYPE_NAMES = frozenset({"object", "Object", "System.Object"})


class TypeKind(Enum):
    """Kind of a catalog type."""
    CLASS = "class"
    ENUM = "enum"
    INTERFACE = "interface"


@dataclass
class TypeReference:
    """A pointer to a type by name, possibly parameterized.

    Recursive structure: generic arguments are references themselves.
    """

    name: str  # "ICollection`1" or "ICollection"
    generic_arguments: List["TypeReference"] = field(default_factory=list)
    # Written with a trailing `?` that was not resolved to Nullable<T>
    nullable_annotation: bool = field(default=False, compare=False, repr=False)

    @property
    def is_generic(self) -> bool:
        return bool(self.generic_arguments)

    @property
    def base_name(self) -> str:
        """Name without the arity suffix (``List`1`` -> ``List``)."""
        return self.name.split("`")[0]


@dataclass
class MemberDescriptor:
    """A field or property exposed by a type."""

    name: str
    type_ref: TypeReference
    is_public: bool = True


@dataclass
class ParameterDescriptor:
    type_ref: TypeReference
    name: str


@dataclass
class MethodDescriptor:
    """A method declared on a type.

    ``is_special`` marks compiler-synthesized members (accessors,
    operators) that never appear in a diagram.
    """

    name: str
    return_type: TypeReference
    parameters: List[ParameterDescriptor] = field(default_factory=list)
    is_public: bool = True
    is_special: bool = False


@dataclass
class EnumValue:
    name: str
    description: Optional[str] = None


@dataclass
class TypeDescriptor:
    """One catalog type: class, enum, or interface."""

    name: str
    kind: TypeKind
    namespace: str = ""
    base_type: Optional[TypeReference] = None
    implemented_interfaces: List[TypeReference] = field(default_factory=list)
    members: List[MemberDescriptor] = field(default_factory=list)
    methods: List[MethodDescriptor] = field(default_factory=list)
    enum_values: List[EnumValue] = field(default_factory=list)
    generic_arguments: List[TypeReference] = field(default_factory=list)

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}.{self.name}" if self.namespace else self.name

    @property
    def is_enum(self) -> bool:
        return self.kind is TypeKind.ENUM

    @property
    def is_class(self) -> bool:
        return self.kind is TypeKind.CLASS

    @property
    def is_interface(self) -> bool:
        return self.kind is TypeKind.INTERFACE

    def has_root_base(self) -> bool:
        """True when the type has no base other than the universal root."""
        return self.base_type is None or self.base_type.name in ROOT_TYPE_NAMES

    def reference(self) -> TypeReference:
        return TypeReference(name=self.name, generic_arguments=list(self.generic_arguments))


@dataclass
class TypeCatalog:
    """The fixed set of types considered for one diagram.

    ``types`` holds the in-scope descriptors in catalog order. ``known``
    additionally holds every descriptor the provider saw, so inheritance
    chains can be walked through types outside the namespace scope.
    """

    types: List[TypeDescriptor]
    known: Dict[str, TypeDescriptor] = field(default_factory=dict)
    namespace: str = ""

    def __post_init__(self):
        self._by_name: Dict[str, TypeDescriptor] = {}
        for t in self.types:
            self._by_name.setdefault(t.name, t)

    def __iter__(self) -> Iterator[TypeDescriptor]:
        return iter(self.types)

    def __len__(self) -> int:
        return len(self.types)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def names(self) -> Set[str]:
        return set(self._by_name)

    def get(self, name: str) -> Optional[TypeDescriptor]:
        return self._by_name.get(name)

    def resolve(self, name: str) -> Optional[TypeDescriptor]:
        """Look a type up in scope first, then among all known types."""
        return self._by_name.get(name) or self.known.get(name)
