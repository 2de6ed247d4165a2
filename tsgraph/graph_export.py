"""Graph export helpers for JSON and DOT outputs, plus graph consumers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from .models import Edge, ProjectGraph

EMBEDDABLE_KINDS = ("function", "class")
EMBEDDING_CONTENT_CHARS = 500


def export_json(graph: ProjectGraph, output_file: Path) -> None:
    output_file.write_text(json.dumps(graph.to_dict(), indent=2), encoding="utf-8")


def load_graph(input_file: Path) -> ProjectGraph:
    """Read a graph previously written by :func:`export_json`."""
    payload = json.loads(Path(input_file).read_text(encoding="utf-8"))
    return ProjectGraph.from_dict(payload)


def export_dot(graph: ProjectGraph, output_file: Path, focus: str = "") -> None:
    nodes = {node.id: node for node in graph.nodes}
    selected = _focused_subgraph(nodes, graph.edges, focus)

    lines = ["digraph CodeGraph {"]
    lines.append("  rankdir=LR;")

    for node_id in selected["nodes"]:
        if node_id not in nodes:
            continue
        node = nodes[node_id]
        label = f"{_esc(node.kind)}\\n{_esc(node.name)}"
        lines.append(f'  "{_esc(node_id)}" [label="{label}"];')

    for edge in selected["edges"]:
        if edge.source not in nodes or edge.target not in nodes:
            continue
        label = edge.relation
        if edge.call_count and edge.call_count > 1:
            label = f"{label} x{edge.call_count}"
        lines.append(
            f'  "{_esc(edge.source)}" -> "{_esc(edge.target)}" [label="{_esc(label)}"];'
        )

    lines.append("}")
    output_file.write_text("\n".join(lines), encoding="utf-8")


def dependencies(graph: ProjectGraph, node_id: str) -> Dict[str, List[Any]]:
    """Edges into and out of *node_id* and the nodes on their other ends."""
    incoming = [e for e in graph.edges if e.target == node_id]
    outgoing = [e for e in graph.edges if e.source == node_id]

    related_ids: List[str] = []
    for other in [e.source for e in incoming] + [e.target for e in outgoing]:
        if other not in related_ids:
            related_ids.append(other)
    by_id = {node.id: node for node in graph.nodes}
    related = [by_id[i] for i in related_ids if i in by_id]

    return {"incoming": incoming, "outgoing": outgoing, "related": related}


def embedding_text(node) -> str:
    parts: List[str] = []
    if node.path:
        parts.append(f"// File: {node.path}")
    parts.append(node.signature if node.signature else f"{node.kind} {node.name}")
    if node.doc_comment:
        parts.append(f"/** {node.doc_comment} */")
    if node.content:
        parts.append(node.content[:EMBEDDING_CONTENT_CHARS])
    return "\n".join(parts)


def embedding_items(graph: ProjectGraph) -> List[Dict[str, str]]:
    """``{id, text}`` records for the function and class nodes of *graph*."""
    return [
        {"id": node.id, "text": embedding_text(node)}
        for node in graph.nodes
        if node.kind in EMBEDDABLE_KINDS
    ]


def _focused_subgraph(nodes: Dict[str, Any], edges: List[Edge], focus: str) -> Dict[str, List]:
    if not focus:
        return {"nodes": list(nodes.keys()), "edges": edges}

    focus_ids = {
        node_id
        for node_id, node in nodes.items()
        if focus in node_id or focus in node.name
    }

    if not focus_ids:
        return {"nodes": list(nodes.keys()), "edges": edges}

    edge_subset = [e for e in edges if e.source in focus_ids or e.target in focus_ids]
    node_subset = set(focus_ids)
    for e in edge_subset:
        if e.source in nodes:
            node_subset.add(e.source)
        if e.target in nodes:
            node_subset.add(e.target)
    return {"nodes": sorted(node_subset), "edges": edge_subset}


def _esc(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')
