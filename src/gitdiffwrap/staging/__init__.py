"""Staging workspace, materialization, and deferred cleanup."""

from gitdiffwrap.staging.materialize import MaterializeResult, Materializer
from gitdiffwrap.staging.workspace import Workspace, create_workspace, delete_workspace

__all__ = [
    "MaterializeResult",
    "Materializer",
    "Workspace",
    "create_workspace",
    "delete_workspace",
]
