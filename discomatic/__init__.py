"""
discomatic package initialisation.

The module performs two small tasks:

1. **Expose the version string**
   ``discomatic.__version__`` is resolved at import-time from the installed
   distribution metadata so that all runtime contexts (install, editable,
   frozen app) surface the same canonical value.

2. **Re-export the options loader**
   :func:`discomatic.config.load_options` is re-exported at the top level so
   call-sites can simply do::

       from discomatic import load_options
"""

from importlib.metadata import PackageNotFoundError, version

# --------------------------------------------------------------------------- #
# Version resolution
# --------------------------------------------------------------------------- #
try:
    __version__: str = version("discomatic")
except PackageNotFoundError:
    # Source tree without an installed wheel.
    __version__ = "0.0.0"

# --------------------------------------------------------------------------- #
# Public re-exports
# --------------------------------------------------------------------------- #
from .config import load_options  # noqa: E402 – deliberate late import

__all__: list[str] = ["load_options", "__version__"]
