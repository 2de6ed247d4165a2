"""Per-invocation analysis state shared by both passes.

Every registry lives on an :class:`AnalysisContext` created by a single
``AnalyzerEngine.analyze()`` call, so concurrent analyses of different
projects never share state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from .config_manager import AnalyzerSettings
from .models import AnalysisWarning, Edge, Node, Relation
from .parser import ParsedFile


class EdgeAccumulator:
    """Deduplicating edge map keyed by ``(source, target, relation)``.

    A repeated ``calls`` observation increments ``call_count`` instead of
    adding a second edge.
    """

    def __init__(self) -> None:
        self._edges: Dict[Tuple[str, str, str], Edge] = {}

    def add(self, source: str, target: str, relation: Relation) -> Edge:
        key = (source, target, relation)
        edge = self._edges.get(key)
        if edge is None:
            edge = Edge(
                source=source,
                target=target,
                relation=relation,
                call_count=1 if relation == "calls" else None,
            )
            self._edges[key] = edge
        elif relation == "calls":
            edge.call_count = (edge.call_count or 1) + 1
        return edge

    def __len__(self) -> int:
        return len(self._edges)

    def __iter__(self):
        return iter(self._edges.values())


@dataclass
class FileBindings:
    """Names visible at the top level of one file, for tier-2 resolution."""
    declared: Set[str] = field(default_factory=set)
    # local name -> (target rel path, exported name); default imports use "default"
    imported: Dict[str, Tuple[str, str]] = field(default_factory=dict)
    # local namespace alias -> target rel path
    namespaces: Dict[str, str] = field(default_factory=dict)
    default_export: Optional[str] = None


@dataclass
class AnalysisContext:
    root: Path
    settings: AnalyzerSettings
    source_paths: Set[str] = field(default_factory=set)
    nodes: Dict[str, Node] = field(default_factory=dict)
    registry: Dict[str, str] = field(default_factory=dict)
    edges: EdgeAccumulator = field(default_factory=EdgeAccumulator)
    folder_paths: Set[str] = field(default_factory=set)
    files: List[ParsedFile] = field(default_factory=list)
    bindings: Dict[str, FileBindings] = field(default_factory=dict)
    # (rel path, class start byte) -> class node id
    class_ids: Dict[Tuple[str, int], str] = field(default_factory=dict)
    warnings: List[AnalysisWarning] = field(default_factory=list)

    # -- nodes (first writer wins) ------------------------------------

    def add_node(self, node: Node) -> bool:
        """Insert *node* unless its id is taken. Returns True if inserted."""
        if node.id in self.nodes:
            return False
        self.nodes[node.id] = node
        return True

    def has_node(self, node_id: str) -> bool:
        return node_id in self.nodes

    # -- callable-name registry (last writer wins) ---------------------

    def register(self, name: str, node_id: str) -> None:
        self.registry[name] = node_id

    def lookup(self, name: str) -> Optional[str]:
        return self.registry.get(name)

    # -- edges / diagnostics --------------------------------------------

    def add_edge(self, source: str, target: str, relation: Relation) -> Edge:
        return self.edges.add(source, target, relation)

    def warn(self, path: str, message: str) -> None:
        self.warnings.append(AnalysisWarning(path=path, message=message))

    def bindings_for(self, rel_path: str) -> FileBindings:
        return self.bindings.setdefault(rel_path, FileBindings())
