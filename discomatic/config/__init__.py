"""
Configuration helpers for *discomatic*.

The public entry-point is :func:`load_options`, which resolves and validates
``options.yaml`` following the precedence documented in
:mod:`discomatic.config.loader`.
"""

from __future__ import annotations

from .loader import load_options, resolve_options_path
from .schema import Options

__all__: list[str] = ["load_options", "resolve_options_path", "Options"]
