"""C# source catalog provider using tree-sitter.

Walks the tree-sitter AST of every ``.cs`` file under a source root and
builds type descriptors for classes, records, structs, interfaces and
enums, together with their properties, methods and enum values.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

import tree_sitter
import tree_sitter_c_sharp

from .base import BaseCatalogProvider, CatalogLoadError
from .models import (
    EnumValue,
    MemberDescriptor,
    MethodDescriptor,
    ParameterDescriptor,
    TypeDescriptor,
    TypeKind,
    TypeReference,
)
from .type_names import parse_type_reference
from .utils import find_source_files

logger = logging.getLogger(__name__)

_CSHARP_LANGUAGE = tree_sitter.Language(tree_sitter_c_sharp.language())

_TYPE_DECLARATIONS = {
    "class_declaration": TypeKind.CLASS,
    "record_declaration": TypeKind.CLASS,
    "record_struct_declaration": TypeKind.CLASS,
    "struct_declaration": TypeKind.CLASS,
    "interface_declaration": TypeKind.INTERFACE,
}

_NON_PUBLIC_MODIFIERS = frozenset({"private", "protected", "internal"})

# [Description("...")] and [Display(Name = "...")] on enum members
_DESCRIPTION_PATTERNS = [
    re.compile(r'\bDescription(?:Attribute)?\s*\(\s*@?"((?:[^"\\]|\\.)*)"'),
    re.compile(r'\bDisplay(?:Attribute)?\s*\([^)]*?\bName\s*=\s*@?"((?:[^"\\]|\\.)*)"'),
]


@dataclass
class DeclaredType:
    """A type as declared in source, before base-list resolution."""

    descriptor: TypeDescriptor
    base_list: List[str] = field(default_factory=list)
    is_struct: bool = False
    file_path: str = ""
    declaring_type: str = ""  # "Outer" or "Outer.Middle" for nested types

    @property
    def key(self) -> str:
        """Identity used to merge partial declarations."""
        d = self.descriptor
        scope = _join_namespace(d.namespace, self.declaring_type)
        return f"{scope}.{d.name}" if scope else d.name


class CSharpCatalogProvider(BaseCatalogProvider):
    """tree-sitter based C# catalog provider.

    Extracts:
    - Class, record and struct declarations -> TypeKind.CLASS
    - Interface declarations -> TypeKind.INTERFACE
    - Enum declarations -> TypeKind.ENUM (with [Description] text)
    - Instance property declarations -> members
    - Instance field declarations -> members (when include_fields is set)
    - Instance method declarations -> methods
    """

    def __init__(
        self,
        source_root: str,
        include_interfaces: bool = False,
        include_fields: bool = False,
    ):
        super().__init__(include_interfaces=include_interfaces)
        self.source_root = source_root
        self.include_fields = include_fields

    def load_types(self) -> List[TypeDescriptor]:
        if not os.path.exists(self.source_root):
            raise CatalogLoadError(f"Source path does not exist: {self.source_root}")

        files = find_source_files(self.source_root)
        logger.info("Parsing %d C# files under %s", len(files), self.source_root)

        declared: Dict[str, DeclaredType] = {}
        for file_path in files:
            try:
                with open(file_path, "r", encoding="utf-8-sig", errors="replace") as f:
                    source_text = f.read()
            except OSError as e:
                raise CatalogLoadError(f"Cannot read {file_path}: {e}") from e

            for decl in self.parse_source(source_text, file_path):
                if decl.key in declared:
                    _merge_partial(declared[decl.key], decl)
                else:
                    declared[decl.key] = decl

        resolve_base_lists(list(declared.values()))
        wrap_nullable_value_types(list(declared.values()))
        return [d.descriptor for d in declared.values()]

    def parse_source(self, source_text: str, file_path: str = "<source>") -> List[DeclaredType]:
        """Parse one C# compilation unit into declared types, in source order."""
        source = source_text.encode("utf-8")
        parser = tree_sitter.Parser(_CSHARP_LANGUAGE)
        tree = parser.parse(source)

        if tree.root_node.has_error:
            logger.warning(f"Tree-sitter reported parse errors in {file_path}")

        declared: List[DeclaredType] = []
        self._walk(tree.root_node, source, file_path, "", declared)
        return declared

    # =========================================================================
    # Recursive declaration walker
    # =========================================================================

    def _walk(
        self,
        node: tree_sitter.Node,
        source: bytes,
        file_path: str,
        namespace: str,
        declared: List[DeclaredType],
    ) -> None:
        for child in node.children:
            if child.type == "namespace_declaration":
                ns = _join_namespace(namespace, self._namespace_name(child, source))
                self._walk(child, source, file_path, ns, declared)

            elif child.type == "file_scoped_namespace_declaration":
                # Applies to every following sibling; newer grammars also nest them
                namespace = _join_namespace(namespace, self._namespace_name(child, source))
                self._walk(child, source, file_path, namespace, declared)

            elif child.type == "declaration_list":
                self._walk(child, source, file_path, namespace, declared)

            elif child.type in _TYPE_DECLARATIONS:
                self._extract_type(child, source, file_path, namespace, declared)

            elif child.type == "enum_declaration":
                self._extract_enum(child, source, file_path, namespace, declared)

    # =========================================================================
    # Type-level extractors
    # =========================================================================

    def _extract_type(
        self,
        node: tree_sitter.Node,
        source: bytes,
        file_path: str,
        namespace: str,
        declared: List[DeclaredType],
        outer: str = "",
    ) -> None:
        name = _get_child_text(node, "name", source)
        if not name:
            return

        kind = _TYPE_DECLARATIONS[node.type]
        descriptor = TypeDescriptor(
            name=name,
            kind=kind,
            namespace=namespace,
            generic_arguments=self._extract_generic_params(node, source),
        )
        decl = DeclaredType(
            descriptor=descriptor,
            base_list=self._extract_base_list(node, source),
            is_struct=_is_struct(node),
            file_path=file_path,
            declaring_type=outer,
        )
        declared.append(decl)
        nested_outer = _join_namespace(outer, name)

        in_interface = kind is TypeKind.INTERFACE

        # Positional records: record Person(string Name, int Age)
        if node.type.startswith("record"):
            params = node.child_by_field_name("parameters") or _get_child_by_type(node, "parameter_list")
            if params:
                for param in self._extract_parameters(params, source):
                    descriptor.members.append(
                        MemberDescriptor(name=param.name, type_ref=param.type_ref, is_public=True)
                    )

        body = node.child_by_field_name("body") or _get_child_by_type(node, "declaration_list")
        if not body:
            return

        for child in body.children:
            if child.type == "property_declaration":
                member = self._extract_property(child, source, in_interface)
                if member:
                    descriptor.members.append(member)

            elif child.type == "field_declaration" and self.include_fields:
                descriptor.members.extend(self._extract_fields(child, source))

            elif child.type == "method_declaration":
                method = self._extract_method(child, source, in_interface)
                if method:
                    descriptor.methods.append(method)

            elif child.type in _TYPE_DECLARATIONS:
                self._extract_type(child, source, file_path, namespace, declared, nested_outer)

            elif child.type == "enum_declaration":
                self._extract_enum(child, source, file_path, namespace, declared, nested_outer)

    def _extract_enum(
        self,
        node: tree_sitter.Node,
        source: bytes,
        file_path: str,
        namespace: str,
        declared: List[DeclaredType],
        outer: str = "",
    ) -> None:
        name = _get_child_text(node, "name", source)
        if not name:
            return

        descriptor = TypeDescriptor(name=name, kind=TypeKind.ENUM, namespace=namespace)
        body = node.child_by_field_name("body") or _get_child_by_type(node, "enum_member_declaration_list")
        if body:
            for child in body.children:
                if child.type != "enum_member_declaration":
                    continue
                value_name = _get_child_text(child, "name", source)
                if value_name is None:
                    ident = _get_child_by_type(child, "identifier")
                    value_name = _node_text(ident, source) if ident else None
                if not value_name:
                    continue
                descriptor.enum_values.append(
                    EnumValue(name=value_name, description=self._extract_description(child, source))
                )

        declared.append(DeclaredType(descriptor=descriptor, file_path=file_path, declaring_type=outer))

    # =========================================================================
    # Member extractors
    # =========================================================================

    def _extract_property(
        self, node: tree_sitter.Node, source: bytes, in_interface: bool
    ) -> Optional[MemberDescriptor]:
        name = _get_child_text(node, "name", source)
        type_node = node.child_by_field_name("type")
        if not name or type_node is None:
            return None

        modifiers = _extract_modifiers(node, source)
        if "static" in modifiers:
            return None

        is_public = _is_public(modifiers, in_interface) and self._getter_is_public(node, source)
        return MemberDescriptor(
            name=name,
            type_ref=parse_type_reference(_node_text(type_node, source)),
            is_public=is_public,
        )

    @staticmethod
    def _getter_is_public(node: tree_sitter.Node, source: bytes) -> bool:
        """Visibility of a property follows its getter; set-only properties are not public."""
        accessors = node.child_by_field_name("accessors") or _get_child_by_type(node, "accessor_list")
        if accessors is None:
            # Expression-bodied: int Total => ...;
            return True

        for accessor in accessors.children:
            if accessor.type != "accessor_declaration":
                continue
            keywords = {_node_text(c, source) for c in accessor.children}
            if "get" in keywords:
                return not (_NON_PUBLIC_MODIFIERS & set(_extract_modifiers(accessor, source)))
        return False

    def _extract_fields(self, node: tree_sitter.Node, source: bytes) -> List[MemberDescriptor]:
        modifiers = _extract_modifiers(node, source)
        if "static" in modifiers or "const" in modifiers:
            return []

        declaration = _get_child_by_type(node, "variable_declaration")
        if declaration is None:
            return []
        type_node = declaration.child_by_field_name("type")
        if type_node is None:
            return []
        type_ref = parse_type_reference(_node_text(type_node, source))

        members = []
        for child in declaration.children:
            if child.type != "variable_declarator":
                continue
            name = _get_child_text(child, "name", source)
            if name is None:
                ident = _get_child_by_type(child, "identifier")
                name = _node_text(ident, source) if ident else None
            if name:
                members.append(MemberDescriptor(
                    name=name, type_ref=type_ref, is_public="public" in modifiers,
                ))
        return members

    def _extract_method(
        self, node: tree_sitter.Node, source: bytes, in_interface: bool
    ) -> Optional[MethodDescriptor]:
        name = _get_child_text(node, "name", source)
        if not name:
            return None

        modifiers = _extract_modifiers(node, source)
        if "static" in modifiers:
            return None

        returns = node.child_by_field_name("returns") or node.child_by_field_name("type")
        return_type = parse_type_reference(_node_text(returns, source)) if returns else TypeReference(name="void")

        params = node.child_by_field_name("parameters") or _get_child_by_type(node, "parameter_list")
        return MethodDescriptor(
            name=name,
            return_type=return_type,
            parameters=self._extract_parameters(params, source) if params else [],
            is_public=_is_public(modifiers, in_interface),
        )

    @staticmethod
    def _extract_parameters(node: tree_sitter.Node, source: bytes) -> List[ParameterDescriptor]:
        params = []
        for child in node.children:
            if child.type != "parameter":
                continue
            name = _get_child_text(child, "name", source)
            type_node = child.child_by_field_name("type")
            if not name:
                continue
            type_text = _node_text(type_node, source) if type_node else "object"
            params.append(ParameterDescriptor(type_ref=parse_type_reference(type_text), name=name))
        return params

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _namespace_name(node: tree_sitter.Node, source: bytes) -> str:
        return _get_child_text(node, "name", source) or ""

    @staticmethod
    def _extract_base_list(node: tree_sitter.Node, source: bytes) -> List[str]:
        """Extract base type texts from ``class Foo : Bar, IDisposable``."""
        base_list = _get_child_by_type(node, "base_list")
        if base_list is None:
            return []

        bases = []
        for child in base_list.children:
            if not child.is_named:
                continue
            text = _node_text(child, source).strip()
            # record Student(string Name) : Person(Name)
            if "(" in text:
                text = text.split("(", 1)[0].strip()
            if text:
                bases.append(text)
        return bases

    @staticmethod
    def _extract_generic_params(node: tree_sitter.Node, source: bytes) -> List[TypeReference]:
        params = []
        plist = _get_child_by_type(node, "type_parameter_list")
        if plist is None:
            return params
        for child in plist.children:
            if child.type == "type_parameter":
                # Drop variance: out T -> T
                text = _node_text(child, source).split()[-1]
                params.append(TypeReference(name=text))
        return params

    @staticmethod
    def _extract_description(node: tree_sitter.Node, source: bytes) -> Optional[str]:
        """Read [Description]/[Display(Name=...)] text; anything else means no description."""
        for child in node.children:
            if child.type != "attribute_list":
                continue
            text = _node_text(child, source)
            for pattern in _DESCRIPTION_PATTERNS:
                match = pattern.search(text)
                if match:
                    return match.group(1).replace('\\"', '"')
        return None


# =============================================================================
# Base-list resolution
# =============================================================================


def resolve_base_lists(declared: List[DeclaredType]) -> None:
    """Split each declared base list into base type and interfaces.

    A base naming a known interface is an interface and a known class is
    the base type. Unknown names fall back to the ``I`` + uppercase
    naming convention.
    """
    kinds: Dict[str, TypeKind] = {}
    for decl in declared:
        kinds.setdefault(decl.descriptor.name, decl.descriptor.kind)

    for decl in declared:
        descriptor = decl.descriptor
        if descriptor.is_enum:
            continue

        for text in decl.base_list:
            ref = parse_type_reference(text)
            kind = kinds.get(ref.base_name)
            if descriptor.is_interface or decl.is_struct:
                is_interface = True
            elif kind is not None:
                is_interface = kind is TypeKind.INTERFACE
            else:
                is_interface = _looks_like_interface(ref.base_name)

            if is_interface or descriptor.base_type is not None:
                descriptor.implemented_interfaces.append(ref)
            else:
                descriptor.base_type = ref


def wrap_nullable_value_types(declared: List[DeclaredType]) -> None:
    """Turn ``T?`` into ``Nullable<T>`` where ``T`` is a declared enum or struct.

    Only built-in value types are recognised while parsing a single file;
    this pass runs once every declaration is known.
    """
    value_types = {
        d.descriptor.name for d in declared if d.is_struct or d.descriptor.is_enum
    }
    if not value_types:
        return

    for decl in declared:
        descriptor = decl.descriptor
        for member in descriptor.members:
            member.type_ref = _wrap_nullable(member.type_ref, value_types)
        for method in descriptor.methods:
            method.return_type = _wrap_nullable(method.return_type, value_types)
            for param in method.parameters:
                param.type_ref = _wrap_nullable(param.type_ref, value_types)


def _wrap_nullable(ref: TypeReference, value_types: Set[str]) -> TypeReference:
    ref.generic_arguments = [_wrap_nullable(a, value_types) for a in ref.generic_arguments]
    if ref.nullable_annotation and ref.base_name in value_types:
        inner = TypeReference(name=ref.name, generic_arguments=ref.generic_arguments)
        return TypeReference(name="Nullable", generic_arguments=[inner])
    return ref


def _looks_like_interface(name: str) -> bool:
    return len(name) >= 2 and name[0] == "I" and name[1].isupper()


def _merge_partial(target: DeclaredType, other: DeclaredType) -> None:
    """Fold another ``partial`` declaration of the same type into ``target``."""
    seen = set(target.base_list)
    for text in other.base_list:
        if text not in seen:
            target.base_list.append(text)
            seen.add(text)
    target.descriptor.members.extend(other.descriptor.members)
    target.descriptor.methods.extend(other.descriptor.methods)
    target.descriptor.enum_values.extend(other.descriptor.enum_values)
    logger.debug(
        "Merged partial declaration of %s from %s",
        target.descriptor.qualified_name, other.file_path,
    )


def _join_namespace(outer: str, inner: str) -> str:
    if not inner:
        return outer
    return f"{outer}.{inner}" if outer else inner


def _is_public(modifiers: List[str], in_interface: bool) -> bool:
    if in_interface:
        return not (_NON_PUBLIC_MODIFIERS & set(modifiers))
    return "public" in modifiers


def _node_text(node: tree_sitter.Node, source: bytes) -> str:
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def _get_child_text(node: tree_sitter.Node, field_name: str, source: bytes) -> Optional[str]:
    child = node.child_by_field_name(field_name)
    if child:
        return _node_text(child, source)
    return None


def _get_child_by_type(node: tree_sitter.Node, type_name: str) -> Optional[tree_sitter.Node]:
    for child in node.children:
        if child.type == type_name:
            return child
    return None


def _extract_modifiers(node: tree_sitter.Node, source: bytes) -> List[str]:
    """Extract modifier keywords (public, static, override, virtual, etc.)."""
    return [_node_text(child, source).strip() for child in node.children if child.type == "modifier"]


def _is_struct(node: tree_sitter.Node) -> bool:
    if node.type in ("struct_declaration", "record_struct_declaration"):
        return True
    # Newer grammars parse `record struct` as a record_declaration
    return node.type == "record_declaration" and any(c.type == "struct" for c in node.children)
