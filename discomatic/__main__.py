"""
Module entry-point that makes the package runnable with

    python -m discomatic
    python -m discomatic.cli

The behaviour is identical to the *discomatic-cli* console script because the
Click **group** object imported below performs all CLI dispatching.
"""

from discomatic.cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
