"""Short, human-readable labels for type references."""

from ..catalog.models import TypeReference


def friendly_name(ref: TypeReference) -> str:
    """Render a type reference as a Mermaid label.

    ``Dictionary`2[String, List`1[Int32]]`` becomes
    ``Dictionary~String, List~Int32~~``. Mermaid uses ``~`` for generics.
    """
    if ref.is_generic:
        args = ", ".join(friendly_name(arg) for arg in ref.generic_arguments)
        return f"{ref.base_name}~{args}~"
    return ref.name
