"""Template catalog loading with built-in templates and YAML extensions.

The registry returned by :func:`default_registry` is built once per
process from:

1. Built-in templates (:mod:`spinlio.ghx.builtin`)
2. User config directory (``~/.config/spinlio/templates/``)
3. Directories from the ``SPINLIO_TEMPLATE_DATA`` environment variable

Later sources override earlier ones by template id.

Catalog file format::

    templates:
      - id: stem
        name: Bicycle Stem
        description: Parametric stem
        parameters:
          - name: length
            display_name: Length
            description: Stem length in mm
            default: 100
            min: 60
            max: 140
            step: 5
            kind: real        # optional: integer | real
        script: |
          a = make_stem(length)
"""

from __future__ import annotations

import logging
import os
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import yaml

from spinlio.config import SPINLIO_TEMPLATE_DATA, Settings
from .builtin import builtin_templates
from .templates import ComponentTemplate, ParameterDefinition, TemplateRegistry, ValueKind

logger = logging.getLogger(__name__)

__all__ = [
    "load_templates",
    "build_registry",
    "default_registry",
    "clear_cache",
]

PathLike = Union[str, Path]


def clear_cache() -> None:
    """Forget the cached default registry.

    Call this after changing ``SPINLIO_TEMPLATE_DATA`` or catalog files.
    """
    _get_data_dirs.cache_clear()
    default_registry.cache_clear()


@lru_cache(maxsize=None)
def _get_data_dirs() -> Tuple[Path, ...]:
    """Return catalog directories in priority order (lowest first)."""
    dirs: List[Path] = []

    if sys.platform == "win32":
        config_base = Path(os.environ.get("APPDATA", "~")).expanduser()
    else:
        config_base = Path.home() / ".config"
    user_config = config_base / "spinlio" / "templates"
    if user_config.is_dir():
        dirs.append(user_config)

    for path in Settings.from_env().template_paths:
        path = path.resolve()
        if path.is_dir():
            dirs.append(path)
        else:
            logger.warning("ignoring %s entry %s: not a directory", SPINLIO_TEMPLATE_DATA, path)

    return tuple(dirs)


def _parse_kind(value: Any, where: str) -> Optional[ValueKind]:
    if value is None:
        return None
    try:
        return ValueKind(str(value).lower())
    except ValueError:
        raise ValueError(f"{where}: invalid kind {value!r} (expected 'integer' or 'real')") from None


def _optional_float(entry: Dict[str, Any], key: str) -> Optional[float]:
    value = entry.get(key)
    return None if value is None else float(value)


def _parameter_from_dict(entry: Dict[str, Any], where: str) -> ParameterDefinition:
    if not isinstance(entry, dict):
        raise ValueError(f"{where}: parameter entry must be a mapping")
    try:
        name = entry["name"]
        default = entry["default"]
    except KeyError as exc:
        raise ValueError(f"{where}: parameter missing required field {exc.args[0]!r}") from None
    return ParameterDefinition(
        name=str(name),
        display_name=str(entry.get("display_name", name)),
        description=str(entry.get("description", "")),
        default_value=float(default),
        min=_optional_float(entry, "min"),
        max=_optional_float(entry, "max"),
        step=_optional_float(entry, "step"),
        kind=_parse_kind(entry.get("kind"), f"{where}.{name}"),
    )


def _template_from_dict(entry: Dict[str, Any], where: str) -> ComponentTemplate:
    if not isinstance(entry, dict):
        raise ValueError(f"{where}: template entry must be a mapping")
    for key in ("id", "name", "script"):
        if key not in entry:
            raise ValueError(f"{where}: template missing required field {key!r}")
    params = entry.get("parameters") or []
    return ComponentTemplate(
        id=str(entry["id"]),
        name=str(entry["name"]),
        description=str(entry.get("description", "")),
        parameter_definitions=tuple(
            _parameter_from_dict(p, f"{where}[{entry['id']}]") for p in params
        ),
        script_body=str(entry["script"]),
    )


def load_templates(path: PathLike) -> List[ComponentTemplate]:
    """Load the templates defined in one YAML catalog file."""

    path = Path(path)
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict) or not isinstance(data.get("templates", []), list):
        raise ValueError(f"{path}: expected a mapping with a 'templates' list")
    templates = [
        _template_from_dict(entry, f"{path}:templates[{i}]")
        for i, entry in enumerate(data.get("templates", []))
    ]
    logger.debug("loaded %d template(s) from %s", len(templates), path)
    return templates


def _catalog_files(paths: Iterable[PathLike]) -> List[Path]:
    files: List[Path] = []
    for p in paths:
        p = Path(p)
        if p.is_dir():
            files.extend(sorted(p.glob("*.yaml")) + sorted(p.glob("*.yml")))
        elif p.exists():
            files.append(p)
        else:
            raise FileNotFoundError(f"template catalog not found: {p}")
    return files


def build_registry(
    paths: Optional[Sequence[PathLike]] = None,
    *,
    extra_paths: Sequence[PathLike] = (),
) -> TemplateRegistry:
    """Build a registry of built-in templates extended by catalog files.

    ``paths`` may name YAML files or directories of them. When ``None``,
    the user config directory and ``SPINLIO_TEMPLATE_DATA`` are searched.
    ``extra_paths`` are loaded after that search and take precedence.
    """

    registry = TemplateRegistry(builtin_templates())
    search = list(_get_data_dirs()) if paths is None else list(paths)
    search.extend(extra_paths)
    for catalog in _catalog_files(search):
        registry = registry.merged(load_templates(catalog))
    return registry


@lru_cache(maxsize=1)
def default_registry() -> TemplateRegistry:
    """Process-wide registry, built on first use."""
    return build_registry()
