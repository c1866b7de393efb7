"""Comparison-tool profile model."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ToolProfile:
    """How to launch one comparison tool.

    ``args`` is a template: ``$1`` and ``$2`` are the left and right staging
    directories, ``$F`` is the list file, ``$$`` is a literal ``$``.
    """

    id: str
    program: str
    args: str
    description: str = ""

    def with_args(self, args: str) -> "ToolProfile":
        return ToolProfile(id=self.id, program=self.program, args=args, description=self.description)
