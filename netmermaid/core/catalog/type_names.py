"""C# type-name parsing.

Turns type text as written in source or schema files
(``ICollection<Order>``, ``Dictionary<string, List<int>>``, ``int?``,
``System.Guid``) into ``TypeReference`` trees. Names are shortened to
their last dotted segment, matching what reflection reports as a type's
simple name.
"""

import re

from .models import TypeReference

# Built-in value types whose ``T?`` form is ``Nullable<T>``. Any other ``T?``
# only sets ``nullable_annotation``; a source provider that knows the
# declared enums and structs can still wrap those.
VALUE_TYPE_NAMES = frozenset({
    "bool", "byte", "sbyte", "char", "decimal", "double", "float",
    "int", "uint", "nint", "nuint", "long", "ulong", "short", "ushort",
    "Boolean", "Byte", "SByte", "Char", "Decimal", "Double", "Single",
    "Int16", "Int32", "Int64", "UInt16", "UInt32", "UInt64",
    "DateTime", "DateTimeOffset", "DateOnly", "TimeOnly", "TimeSpan", "Guid",
})

_NAME_CHARS = re.compile(r"[A-Za-z0-9_.`@:]")


class _MalformedTypeName(ValueError):
    pass


def parse_type_reference(text: str) -> TypeReference:
    """Parse C# type text into a TypeReference.

    Malformed text never raises: it comes back as a non-generic reference
    carrying the text itself, so it still renders and never matches a
    catalog type.
    """
    text = (text or "").strip()
    if not text:
        return TypeReference(name="")

    reader = _TypeNameReader(text)
    try:
        ref = reader.read_type()
        reader.skip_ws()
        if not reader.at_end():
            raise _MalformedTypeName(text)
    except _MalformedTypeName:
        return TypeReference(name=re.sub(r"\s+", "", text))
    return ref


def to_source_text(ref: TypeReference) -> str:
    """Render a reference back to C# generic syntax (``List<int>``)."""
    if not ref.is_generic:
        return ref.name
    args = ", ".join(to_source_text(a) for a in ref.generic_arguments)
    return f"{ref.base_name}<{args}>"


def short_name(qualified: str) -> str:
    """``global::System.Collections.Generic.List`` -> ``List``."""
    name = qualified.split("::")[-1]
    return name.split(".")[-1].lstrip("@")


class _TypeNameReader:
    """Recursive-descent reader over a single type expression."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self) -> str:
        return "" if self.at_end() else self.text[self.pos]

    def skip_ws(self) -> None:
        while not self.at_end() and self.text[self.pos].isspace():
            self.pos += 1

    def read_type(self) -> TypeReference:
        self.skip_ws()
        if self.peek() == "(":
            ref = TypeReference(name=self._read_tuple())
        else:
            ref = self._read_named()
        return self._read_suffixes(ref)

    def _read_named(self) -> TypeReference:
        start = self.pos
        while not self.at_end() and _NAME_CHARS.match(self.text[self.pos]):
            self.pos += 1
        raw = self.text[start:self.pos]
        name = short_name(raw)
        if not name:
            raise _MalformedTypeName(self.text)

        args = []
        self.skip_ws()
        if self.peek() == "<":
            self.pos += 1
            while True:
                args.append(self.read_type())
                self.skip_ws()
                char = self.peek()
                self.pos += 1
                if char == ",":
                    continue
                if char == ">":
                    break
                raise _MalformedTypeName(self.text)
        return TypeReference(name=name, generic_arguments=args)

    def _read_tuple(self) -> str:
        depth = 0
        start = self.pos
        while not self.at_end():
            char = self.text[self.pos]
            self.pos += 1
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
                if depth == 0:
                    return re.sub(r"\s+", " ", self.text[start:self.pos])
        raise _MalformedTypeName(self.text)

    def _read_suffixes(self, ref: TypeReference) -> TypeReference:
        while True:
            self.skip_ws()
            char = self.peek()
            if char == "?":
                self.pos += 1
                if not ref.is_generic and ref.name in VALUE_TYPE_NAMES:
                    ref = TypeReference(name="Nullable", generic_arguments=[ref])
                else:
                    ref.nullable_annotation = True
            elif char == "[":
                end = self.text.find("]", self.pos)
                if end < 0:
                    raise _MalformedTypeName(self.text)
                rank = re.sub(r"\s+", "", self.text[self.pos:end + 1])
                ref = TypeReference(name=to_source_text(ref) + rank)
                self.pos = end + 1
            elif char == "*":
                self.pos += 1
                ref = TypeReference(name=to_source_text(ref) + "*")
            else:
                return ref
