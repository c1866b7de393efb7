"""Tool registry: built-in profiles plus YAML profiles from the repository."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from gitdiffwrap.errors import ToolError
from gitdiffwrap.tools.models import ToolProfile

logger = logging.getLogger(__name__)

DEFAULT_ARGS = "-i $F"


class ToolRegistry:
    """Central store for comparison-tool profiles."""

    def __init__(self) -> None:
        self._profiles: Dict[str, ToolProfile] = {}

    # ---- registration ----

    def register(self, profile: ToolProfile) -> None:
        self._profiles[profile.id.lower()] = profile

    def register_many(self, profiles: List[ToolProfile]) -> None:
        for p in profiles:
            self.register(p)

    # ---- queries ----

    @property
    def all_profiles(self) -> List[ToolProfile]:
        return list(self._profiles.values())

    def get(self, tool_id: str) -> Optional[ToolProfile]:
        return self._profiles.get(tool_id.lower())

    def resolve(self, name: str, args_override: Optional[str] = None) -> ToolProfile:
        """Return the profile called *name*, or treat *name* as an executable."""
        profile = self.get(name)
        if profile is None:
            stem = os.path.splitext(os.path.basename(name))[0]
            known = self.get(stem)
            # A full path to a known tool keeps that tool's arguments.
            args = known.args if known else DEFAULT_ARGS
            profile = ToolProfile(id=stem or name, program=name, args=args)
        if args_override is not None:
            profile = profile.with_args(args_override)
        return profile

    # ---- YAML profiles ----

    def load_profiles(self, directory: Path) -> int:
        """Load YAML profile files from *directory*. Returns count loaded."""
        count = 0
        if not directory.is_dir():
            return 0
        for path in sorted(directory.iterdir()):
            if path.suffix in (".yaml", ".yml"):
                count += self._load_yaml_profiles(path)
        return count

    def _load_yaml_profiles(self, path: Path) -> int:
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            raise ToolError(f"Failed to read tool profiles from {path}: {exc}") from exc
        if data is None:
            return 0
        if not isinstance(data, list):
            data = [data]
        count = 0
        for entry in data:
            if not isinstance(entry, dict) or "id" not in entry or "program" not in entry:
                raise ToolError(f"Tool profile in {path} needs 'id' and 'program'")
            self.register(
                ToolProfile(
                    id=str(entry["id"]),
                    program=str(entry["program"]),
                    args=str(entry.get("args", DEFAULT_ARGS)),
                    description=str(entry.get("description", "")),
                )
            )
            count += 1
        logger.debug("Loaded %d tool profile(s) from %s", count, path)
        return count


def build_registry(profiles_dir: Optional[Path] = None) -> ToolRegistry:
    """Create a registry with the built-ins and any repository profiles."""
    from gitdiffwrap.tools.builtin import ALL_BUILTIN_TOOLS

    registry = ToolRegistry()
    registry.register_many(ALL_BUILTIN_TOOLS)
    if profiles_dir is not None:
        registry.load_profiles(profiles_dir)
    return registry
