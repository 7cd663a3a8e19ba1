"""Module wrapper so running ``python -m discomatic.cli`` matches the console script."""

from discomatic.cli import main


if __name__ == "__main__":  # pragma: no cover
    main()
