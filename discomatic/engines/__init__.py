"""Execution back-ends for running external dump tools."""

from .base import ExecutionEngine
from .local import LocalEngine

__all__ = ["ExecutionEngine", "LocalEngine"]
