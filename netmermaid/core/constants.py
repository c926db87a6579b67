"""Shared constants for netmermaid.

Constants used across the catalog, diagram and CLI modules.
"""

# =============================================================================
# Namespace scoping
# =============================================================================

# Entity classes live below <root>.Database.Entities by convention
DEFAULT_SUB_SCOPE = ".Database.Entities"

# Sub-scopes containing this marker get a layout direction line
ENTITIES_MARKER = "Entities"

# =============================================================================
# Diagram layout
# =============================================================================

DEFAULT_DIRECTION = "RL"

TITLE_SUFFIX = "UML Diagrams"

MARKDOWN_EXTENSION = ".md"
