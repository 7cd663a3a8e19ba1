"""
YAML options loader.

This helper locates, reads and validates ``options.yaml`` before returning a
:class:`discomatic.config.schema.Options` instance.

Search precedence (first match wins)
1. An explicit path argument (``--config`` on the CLI).
2. ``$DISCOMATIC_CONFIG``.
3. ``~/.discomatic/options.yaml`` – per-user override.
4. The packaged default shipped inside the wheel.

Catalog credentials are then overridden from ``DISCOMATIC_CATALOG_USERNAME``
and ``DISCOMATIC_CATALOG_PASSWORD`` so they never have to be written to disk.

All resolution logic is concentrated here so the rest of *discomatic* treats
configuration as an already-validated object.
"""

from __future__ import annotations

import os
from importlib.resources import as_file, files
from pathlib import Path
from typing import Optional

import structlog
import yaml
from pydantic import ValidationError

from discomatic.utils.errors import ConfigurationError

from .schema import Options

log = structlog.get_logger()

_DEFAULT_OPTIONS = files("discomatic.resources") / "default_options.yaml"

_ENV_OVERRIDES = {
    "DISCOMATIC_CATALOG_USERNAME": "catalog_username",
    "DISCOMATIC_CATALOG_PASSWORD": "catalog_password",
}


# --------------------------------------------------------------------------- #
# Helper functions                                                            #
# --------------------------------------------------------------------------- #
def _user_options() -> Path:
    return Path.home() / ".discomatic" / "options.yaml"


def _first_existing(*candidates: Optional[Path]) -> Optional[Path]:
    """Return the first path in *candidates* that exists on disk."""
    for p in candidates:
        if p is not None and p.exists():
            return p
    return None


def _load_yaml(path: Path) -> dict:
    """Read a YAML mapping; an empty file yields an empty dict."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Could not parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping at the top level")
    return data


def resolve_options_path(explicit: Optional[str | Path] = None) -> Optional[Path]:
    """Return the options file that :func:`load_options` would read.

    ``None`` means the packaged default is used.
    """
    env_path = os.environ.get("DISCOMATIC_CONFIG")
    return _first_existing(
        Path(explicit).expanduser().resolve() if explicit else None,
        Path(env_path).expanduser() if env_path else None,
        _user_options(),
    )


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #
def load_options(path: Optional[str | Path] = None) -> Options:
    """Return fully validated :class:`Options`.

    Args:
        path: Explicit options file.  ``None`` triggers the search sequence
            described in the module doc-string.

    Returns:
        An :class:`Options` object ready for downstream use.

    Raises:
        ConfigurationError: When an explicit *path* does not exist or the
            YAML fails validation.
    """
    if path is not None and not Path(path).expanduser().exists():
        raise ConfigurationError(f"Options file not found: {path}")

    resolved = resolve_options_path(path)
    if resolved is None:
        with as_file(_DEFAULT_OPTIONS) as default:
            data = _load_yaml(default)
        source = "<packaged default>"
    else:
        data = _load_yaml(resolved)
        source = str(resolved)

    for env_name, key in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            data[key] = value

    try:
        options = Options(**data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid options in {source} – {exc}") from exc

    log.debug("config.loaded", source=source, backend=options.backend.value)
    return options
