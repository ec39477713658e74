"""Runtime configuration for spinlio.

Settings are read once from the environment and passed by reference to
the components that need them.

Environment Variables:
    SPINLIO_TEMPLATE_DATA: Colon-separated (or semicolon on Windows) paths
                           to directories containing YAML template
                           catalogs. These extend the built-in templates.
    SPINLIO_LOG_LEVEL:     Logging level name used by the command line
                           front end (default ``WARNING``).

Example:
    export SPINLIO_TEMPLATE_DATA="/path/to/templates:/another/path"
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple

__all__ = [
    "SPINLIO_TEMPLATE_DATA",
    "SPINLIO_LOG_LEVEL",
    "DEFAULT_OUTPUT_NAME",
    "DEFAULT_NODE_SPACING",
    "Settings",
    "split_path_list",
]

SPINLIO_TEMPLATE_DATA = "SPINLIO_TEMPLATE_DATA"
SPINLIO_LOG_LEVEL = "SPINLIO_LOG_LEVEL"

# Name of the script output that the bake node consumes; the solver
# reports the baked geometry under this parameter name.
DEFAULT_OUTPUT_NAME = "OutputBake"

# Horizontal distance between nodes in the synthesized canvas layout.
DEFAULT_NODE_SPACING = 150.0


def split_path_list(value: Optional[str]) -> Tuple[Path, ...]:
    """Split a path-list environment value into expanded paths."""

    if not value:
        return ()
    sep = ";" if sys.platform == "win32" else ":"
    paths = []
    for part in value.split(sep):
        part = part.strip()
        if part:
            paths.append(Path(part).expanduser())
    return tuple(paths)


@dataclass(frozen=True)
class Settings:
    """Process-wide settings."""

    output_name: str = DEFAULT_OUTPUT_NAME
    node_spacing: float = DEFAULT_NODE_SPACING
    template_paths: Tuple[Path, ...] = field(default_factory=tuple)
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        level = env.get(SPINLIO_LOG_LEVEL, "WARNING").strip().upper() or "WARNING"
        return cls(
            template_paths=split_path_list(env.get(SPINLIO_TEMPLATE_DATA)),
            log_level=level,
        )
