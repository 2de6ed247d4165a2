"""Core data models produced by the extraction engine and read by exporters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

NodeKind = Literal["folder", "file", "function", "class", "component"]
Relation = Literal["contains", "imports", "calls", "extends", "renders"]


@dataclass
class Node:
    id: str
    name: str
    kind: NodeKind
    path: str
    line: Optional[int] = None
    parent: Optional[str] = None
    content: str = ""
    signature: Optional[str] = None
    doc_comment: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "kind": self.kind,
            "path": self.path,
        }
        if self.line is not None:
            payload["line"] = self.line
        if self.parent is not None:
            payload["parent"] = self.parent
        if self.content:
            payload["content"] = self.content
        if self.signature is not None:
            payload["signature"] = self.signature
        if self.doc_comment is not None:
            payload["docComment"] = self.doc_comment
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Node":
        return cls(
            id=payload["id"],
            name=payload["name"],
            kind=payload["kind"],
            path=payload["path"],
            line=payload.get("line"),
            parent=payload.get("parent"),
            content=payload.get("content", ""),
            signature=payload.get("signature"),
            doc_comment=payload.get("docComment"),
        )


@dataclass
class Edge:
    source: str
    target: str
    relation: Relation
    call_count: Optional[int] = None

    @property
    def key(self) -> tuple:
        return (self.source, self.target, self.relation)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "from": self.source,
            "to": self.target,
            "relation": self.relation,
        }
        if self.call_count is not None:
            payload["callCount"] = self.call_count
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Edge":
        return cls(
            source=payload["from"],
            target=payload["to"],
            relation=payload["relation"],
            call_count=payload.get("callCount"),
        )


@dataclass
class AnalysisWarning:
    """A recoverable per-file problem reported alongside the graph."""
    path: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "message": self.message}


@dataclass
class ProgressEvent:
    """Advisory progress notification; never affects the computed graph."""
    stage: str
    processed: int
    total: int
    current_file: str = ""


@dataclass
class ProjectGraph:
    nodes: List[Node]
    edges: List[Edge]
    root_path: str
    warnings: List[AnalysisWarning] = field(default_factory=list)

    def node_ids(self) -> set:
        return {n.id for n in self.nodes}

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def edges_of(self, relation: Relation) -> List[Edge]:
        return [e for e in self.edges if e.relation == relation]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "rootPath": self.root_path,
            "warnings": [w.to_dict() for w in self.warnings],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ProjectGraph":
        return cls(
            nodes=[Node.from_dict(n) for n in payload.get("nodes", [])],
            edges=[Edge.from_dict(e) for e in payload.get("edges", [])],
            root_path=payload.get("rootPath", ""),
            warnings=[
                AnalysisWarning(path=w["path"], message=w["message"])
                for w in payload.get("warnings", [])
            ],
        )
