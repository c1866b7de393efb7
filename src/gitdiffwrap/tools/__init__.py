"""Comparison tools: profiles, registry, and launcher."""

from gitdiffwrap.tools.models import ToolProfile
from gitdiffwrap.tools.registry import ToolRegistry, build_registry

__all__ = ["ToolProfile", "ToolRegistry", "build_registry"]
