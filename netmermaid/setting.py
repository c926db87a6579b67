"""Settings for diagram generation.

Values come from, in increasing priority: built-in defaults, a
``netmermaid.yaml`` file, and ``NETMERMAID_*`` environment variables
(a ``.env`` file in the working directory is loaded first).
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from .core.constants import DEFAULT_DIRECTION, DEFAULT_SUB_SCOPE
from .core.diagrams.class_diagram import DEFAULT_COLLECTION_TYPES

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config") / "netmermaid.yaml"
ENV_PREFIX = "NETMERMAID_"

_VALID_DIRECTIONS = {"TB", "TD", "BT", "RL", "LR"}


class DiagramSettings(BaseModel):
    """Diagram generation settings."""
    sub_scope: str = Field(DEFAULT_SUB_SCOPE, description="Namespace suffix below the root namespace")
    direction: str = Field(DEFAULT_DIRECTION, description="Layout direction for entity diagrams")
    collection_types: List[str] = Field(
        default_factory=lambda: list(DEFAULT_COLLECTION_TYPES),
        description="Generic containers whose element type yields a 'has many' edge",
    )
    include_interfaces: bool = Field(False, description="Draw interface types as blocks")
    include_fields: bool = Field(False, description="List fields alongside properties")
    output_dir: Optional[str] = Field(None, description="Directory for generated .md files")
    log_level: str = Field("INFO", description="Logging level")

    @field_validator("direction")
    @classmethod
    def direction_is_known(cls, v):
        v = v.strip().upper()
        if v not in _VALID_DIRECTIONS:
            raise ValueError(f"direction must be one of {sorted(_VALID_DIRECTIONS)}")
        return v

    @field_validator("collection_types", mode="before")
    @classmethod
    def split_collection_types(cls, v):
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v


def get_settings(config_path: Optional[str] = None) -> DiagramSettings:
    """Load settings from YAML and the environment.

    Args:
        config_path: Explicit YAML path. Falls back to ``NETMERMAID_CONFIG``,
            then ``config/netmermaid.yaml``. A missing file means defaults.

    Raises:
        pydantic.ValidationError: If a value is invalid
    """
    load_dotenv()

    path = Path(config_path or os.environ.get(f"{ENV_PREFIX}CONFIG") or DEFAULT_CONFIG_PATH)
    values = {}
    if path.is_file():
        with open(path, "r", encoding="utf-8") as f:
            values = yaml.safe_load(f) or {}
        logger.debug(f"Loaded settings from {path}")
    elif config_path:
        logger.warning(f"Config file not found: {path}, using defaults")

    for name in DiagramSettings.model_fields:
        env_value = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
        if env_value is not None:
            values[name] = env_value

    return DiagramSettings(**values)
