"""Catalog provider utilities.

Source file discovery, provider selection, and helper functions.
"""

import os
from typing import List, Optional

# Extension → provider mapping
SOURCE_EXTENSIONS = frozenset({".cs"})
SCHEMA_EXTENSIONS = frozenset({".yaml", ".yml", ".json"})

# Directories to skip during file walking
SKIP_DIRECTORIES = frozenset({
    ".git",
    ".vs",
    ".idea",
    "node_modules",
    "dist",
    "build",
    # C# / .NET
    "bin",
    "obj",
    "packages",
    "TestResults",
})


def detect_provider_kind(path: str) -> Optional[str]:
    """Detect which provider reads a path.

    Args:
        path: Source directory, ``.cs`` file, or schema file

    Returns:
        "csharp", "schema", or None if the path is not recognised
    """
    if os.path.isdir(path):
        return "csharp"
    _, ext = os.path.splitext(path)
    ext = ext.lower()
    if ext in SOURCE_EXTENSIONS:
        return "csharp"
    if ext in SCHEMA_EXTENSIONS:
        return "schema"
    return None


def should_skip_directory(dir_name: str) -> bool:
    """Check if a directory should be skipped during file walking.

    Args:
        dir_name: Directory name (not full path)

    Returns:
        True if directory should be skipped
    """
    return dir_name in SKIP_DIRECTORIES or dir_name.startswith(".")


def is_source_file(file_path: str) -> bool:
    _, ext = os.path.splitext(file_path)
    return ext.lower() in SOURCE_EXTENSIONS


def find_source_files(root: str) -> List[str]:
    """Collect C# source files under ``root`` in sorted, stable order."""
    if os.path.isfile(root):
        return [root] if is_source_file(root) else []

    found: List[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not should_skip_directory(d))
        for filename in sorted(filenames):
            if is_source_file(filename):
                found.append(os.path.join(dirpath, filename))
    return sorted(found)
