"""Folder hierarchy builder: folder nodes derived lazily from file paths."""

from __future__ import annotations

import posixpath
from typing import Optional

from .context import AnalysisContext
from .models import Node


def folder_id(rel_dir: str) -> str:
    return f"folder:{rel_dir}"


def parent_dir(rel_path: str) -> Optional[str]:
    """Directory containing *rel_path*, or None at the project root."""
    directory = posixpath.dirname(rel_path)
    if directory in ("", ".", "/"):
        return None
    return directory


def add_folder_nodes(ctx: AnalysisContext, rel_path: str) -> None:
    """Create folder nodes for every unseen ancestor directory of *rel_path*.

    Each new folder gets a ``contains`` edge from its parent folder. The walk
    stops at the project root, which has no node of its own.
    """
    current = parent_dir(rel_path)
    while current is not None:
        if current not in ctx.folder_paths:
            ctx.folder_paths.add(current)
            parent = parent_dir(current)
            ctx.add_node(Node(
                id=folder_id(current),
                name=posixpath.basename(current),
                kind="folder",
                path=current,
                parent=folder_id(parent) if parent else None,
            ))
            if parent is not None:
                ctx.add_edge(folder_id(parent), folder_id(current), "contains")
        current = parent_dir(current)
