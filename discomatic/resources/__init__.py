"""Packaged data files (default options)."""
