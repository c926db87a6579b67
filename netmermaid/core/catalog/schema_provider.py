"""Schema-file catalog provider.

Reads a YAML (or JSON, which YAML accepts) document describing types
explicitly. Used when the types cannot be parsed from C# source, e.g.
catalogs exported by another tool.

Example::

    namespace: Shop.Database.Entities
    types:
      - name: Order
        base: EntityBase
        interfaces: [IAuditable]
        members:
          - {name: Lines, type: "ICollection<OrderLine>"}
          - {name: Status, type: OrderStatus, public: false}
        methods:
          - name: Close
            returns: void
            parameters: [{name: reason, type: string}]
      - name: OrderStatus
        kind: enum
        values:
          - Open
          - {name: Closed, description: Closed by customer}
"""

import logging
import re
from typing import Any, Dict, List, Optional

import yaml

from .base import BaseCatalogProvider, CatalogLoadError
from .models import (
    EnumValue,
    MemberDescriptor,
    MethodDescriptor,
    ParameterDescriptor,
    TypeDescriptor,
    TypeKind,
)
from .type_names import parse_type_reference

logger = logging.getLogger(__name__)

_BOOL_TAG = "tag:yaml.org,2002:bool"
_NULL_TAG = "tag:yaml.org,2002:null"


class SchemaLoader(yaml.SafeLoader):
    """SafeLoader with YAML 1.2 booleans and nulls.

    Only ``true``/``false`` are booleans and only ``~``, ``null`` or an empty
    value is null, so enum values such as ``Yes``, ``No``, ``On``, ``Off``
    and ``Null`` load as strings.
    """


SchemaLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in (_BOOL_TAG, _NULL_TAG)]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
SchemaLoader.add_implicit_resolver(
    _BOOL_TAG, re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"), list("tTfF"),
)
SchemaLoader.add_implicit_resolver(_NULL_TAG, re.compile(r"^(?:~|null|)$"), ["~", "n", ""])


class SchemaCatalogProvider(BaseCatalogProvider):
    """Catalog provider backed by a YAML/JSON schema document."""

    def __init__(
        self,
        schema_path: Optional[str] = None,
        document: Optional[Dict[str, Any]] = None,
        include_interfaces: bool = False,
    ):
        super().__init__(include_interfaces=include_interfaces)
        if schema_path is None and document is None:
            raise ValueError("Either schema_path or document is required")
        self.schema_path = schema_path
        self._document = document

    def load_types(self) -> List[TypeDescriptor]:
        document = self._document if self._document is not None else self._read_document()
        if not isinstance(document, dict) or not isinstance(document.get("types"), list):
            raise CatalogLoadError("Schema document must be a mapping with a 'types' list")

        default_ns = document.get("namespace", "") or ""
        types = []
        for index, entry in enumerate(document["types"]):
            if not isinstance(entry, dict) or not entry.get("name"):
                raise CatalogLoadError(f"Schema type #{index} has no name")
            types.append(self._build_type(entry, default_ns))

        logger.debug(f"Loaded {len(types)} types from schema")
        return types

    def _read_document(self) -> Any:
        try:
            with open(self.schema_path, "r", encoding="utf-8") as f:
                return yaml.load(f, Loader=SchemaLoader)
        except OSError as e:
            raise CatalogLoadError(f"Cannot read schema {self.schema_path}: {e}") from e
        except yaml.YAMLError as e:
            raise CatalogLoadError(f"Invalid schema {self.schema_path}: {e}") from e

    @staticmethod
    def _build_type(entry: Dict[str, Any], default_ns: str) -> TypeDescriptor:
        name = _text(entry["name"], "type name")
        try:
            kind = TypeKind(entry.get("kind") or "class")
        except ValueError:
            raise CatalogLoadError(f"Type {name} has unknown kind: {entry.get('kind')}") from None

        descriptor = TypeDescriptor(
            name=name,
            kind=kind,
            namespace=entry.get("namespace", default_ns) or "",
            generic_arguments=[
                parse_type_reference(_text(a, f"generic argument of {name}"))
                for a in _list_of(entry, "generic_arguments", name)
            ],
        )

        base = entry.get("base")
        if base:
            descriptor.base_type = parse_type_reference(_text(base, f"base of {name}"))
        descriptor.implemented_interfaces = [
            parse_type_reference(_text(i, f"interface of {name}"))
            for i in _list_of(entry, "interfaces", name)
        ]

        for member in _list_of(entry, "members", name):
            _require(member, ("name", "type"), f"member of {name}")
            descriptor.members.append(MemberDescriptor(
                name=_text(member["name"], f"member name of {name}"),
                type_ref=parse_type_reference(_text(member["type"], f"member type of {name}")),
                is_public=_flag(member, "public", True),
            ))

        for method in _list_of(entry, "methods", name):
            _require(method, ("name",), f"method of {name}")
            method_name = _text(method["name"], f"method name of {name}")
            parameters = []
            for param in _list_of(method, "parameters", f"{name}.{method_name}"):
                _require(param, ("name", "type"), f"parameter of {name}.{method_name}")
                parameters.append(ParameterDescriptor(
                    type_ref=parse_type_reference(_text(param["type"], f"parameter type of {method_name}")),
                    name=_text(param["name"], f"parameter name of {method_name}"),
                ))
            descriptor.methods.append(MethodDescriptor(
                name=method_name,
                return_type=parse_type_reference(_text(method.get("returns", "void"), f"return type of {method_name}")),
                parameters=parameters,
                is_public=_flag(method, "public", True),
                is_special=_flag(method, "special", False),
            ))

        for value in _list_of(entry, "values", name):
            if isinstance(value, dict):
                _require(value, ("name",), f"value of {name}")
                description = value.get("description")
                descriptor.enum_values.append(EnumValue(
                    name=_text(value["name"], f"value of {name}"),
                    description=str(description) if description is not None else None,
                ))
            else:
                descriptor.enum_values.append(EnumValue(name=_text(value, f"value of {name}")))

        return descriptor


def _require(entry: Any, keys: tuple, what: str) -> None:
    if not isinstance(entry, dict) or any(k not in entry for k in keys):
        raise CatalogLoadError(f"Invalid {what}: expected keys {', '.join(keys)}")


def _list_of(entry: Dict[str, Any], key: str, owner: str) -> list:
    """A list-valued key; a missing or empty value (``members:``) is an empty list."""
    value = entry.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise CatalogLoadError(f"Invalid '{key}' of {owner}: expected a list")
    return value


def _text(value: Any, what: str) -> str:
    if value is None or isinstance(value, bool):
        raise CatalogLoadError(f"Invalid {what}: expected a name, got {value!r}")
    return str(value)


def _flag(entry: Dict[str, Any], key: str, default: bool) -> bool:
    value = entry.get(key, default)
    if not isinstance(value, bool):
        raise CatalogLoadError(f"Invalid '{key}' of {entry.get('name')}: expected true or false")
    return value
