# -*- coding: utf-8 -*-
"""Parametric GHX definitions and compute-response mesh decoding."""

from importlib.metadata import PackageNotFoundError, version


try:
    __version__ = version("spinlio")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"
