"""Tests for graph export and consumer helpers."""

import json
from pathlib import Path

import pytest

from tsgraph.engine import analyze_project
from tsgraph.graph_export import (
    dependencies,
    embedding_items,
    embedding_text,
    export_dot,
    export_json,
    load_graph,
)
from tsgraph.models import Edge, Node, ProjectGraph


@pytest.fixture
def small_graph() -> ProjectGraph:
    return ProjectGraph(
        nodes=[
            Node(id="file:a.ts", name="a.ts", kind="file", path="a.ts", content="export function helper() {}"),
            Node(
                id="file:a.ts:fn:helper",
                name="helper",
                kind="function",
                path="a.ts",
                line=1,
                parent="file:a.ts",
                content="export function helper() {}",
                signature="export function helper()",
                doc_comment="Helps.",
            ),
            Node(id="file:b.ts", name="b.ts", kind="file", path="b.ts"),
            Node(id="file:b.ts:fn:main", name="main", kind="function", path="b.ts", line=2, parent="file:b.ts"),
            Node(id="file:b.ts:cls:Box", name="Box", kind="class", path="b.ts", line=3, parent="file:b.ts"),
        ],
        edges=[
            Edge("file:a.ts", "file:a.ts:fn:helper", "contains"),
            Edge("file:b.ts", "file:b.ts:fn:main", "contains"),
            Edge("file:b.ts", "file:a.ts", "imports"),
            Edge("file:b.ts:fn:main", "file:a.ts:fn:helper", "calls", call_count=2),
        ],
        root_path="/tmp/project",
    )


def test_json_keys(small_graph: ProjectGraph, temp_dir: Path):
    """Test the camelCase keys of the JSON document."""
    out = temp_dir / "graph.json"
    export_json(small_graph, out)
    payload = json.loads(out.read_text(encoding="utf-8"))

    assert set(payload) == {"nodes", "edges", "rootPath", "warnings"}
    helper = payload["nodes"][1]
    assert helper["docComment"] == "Helps."
    assert "doc_comment" not in helper
    assert "line" not in payload["nodes"][0]
    calls = payload["edges"][3]
    assert calls == {
        "from": "file:b.ts:fn:main",
        "to": "file:a.ts:fn:helper",
        "relation": "calls",
        "callCount": 2,
    }
    assert "callCount" not in payload["edges"][0]


def test_json_reload(sample_project_path: Path, temp_dir: Path):
    """Test loading an exported graph back."""
    graph = analyze_project(sample_project_path)
    out = temp_dir / "graph.json"

    export_json(graph, out)
    loaded = load_graph(out)

    assert loaded.to_dict() == graph.to_dict()


def test_export_dot(small_graph: ProjectGraph, temp_dir: Path):
    """Test DOT output."""
    out = temp_dir / "graph.dot"
    export_dot(small_graph, out)
    text = out.read_text(encoding="utf-8")

    assert text.startswith("digraph CodeGraph {")
    assert '"file:a.ts:fn:helper" [label="function\\nhelper"];' in text
    assert '"file:b.ts:fn:main" -> "file:a.ts:fn:helper" [label="calls x2"];' in text
    assert text.rstrip().endswith("}")


def test_export_dot_focus(small_graph: ProjectGraph, temp_dir: Path):
    """Test restricting DOT output to matching nodes."""
    out = temp_dir / "focus.dot"
    export_dot(small_graph, out, focus="main")
    text = out.read_text(encoding="utf-8")

    assert '"file:b.ts:fn:main"' in text
    assert '"file:a.ts:fn:helper"' in text
    assert '"file:b.ts:cls:Box"' not in text
    assert "imports" not in text


def test_export_dot_unknown_focus_keeps_everything(small_graph: ProjectGraph, temp_dir: Path):
    """Test a focus that matches nothing."""
    out = temp_dir / "all.dot"
    export_dot(small_graph, out, focus="zzz")

    assert '"file:b.ts:cls:Box"' in out.read_text(encoding="utf-8")


def test_dependencies(small_graph: ProjectGraph):
    """Test incoming and outgoing edge lookup."""
    result = dependencies(small_graph, "file:a.ts:fn:helper")

    assert [(e.source, e.relation) for e in result["incoming"]] == [
        ("file:a.ts", "contains"),
        ("file:b.ts:fn:main", "calls"),
    ]
    assert result["outgoing"] == []
    assert [n.id for n in result["related"]] == ["file:a.ts", "file:b.ts:fn:main"]


def test_dependencies_of_unknown_node(small_graph: ProjectGraph):
    """Test dependency lookup for an unknown node."""
    assert dependencies(small_graph, "file:zzz.ts") == {"incoming": [], "outgoing": [], "related": []}


def test_embedding_items(small_graph: ProjectGraph):
    """Test building embedding items for symbol nodes."""
    items = embedding_items(small_graph)

    assert [i["id"] for i in items] == [
        "file:a.ts:fn:helper",
        "file:b.ts:fn:main",
        "file:b.ts:cls:Box",
    ]
    assert items[0]["text"] == (
        "// File: a.ts\n"
        "export function helper()\n"
        "/** Helps. */\n"
        "export function helper() {}"
    )
    assert items[2]["text"] == "// File: b.ts\nclass Box"


def test_embedding_text_truncates_content():
    """Test truncating content in embedding text."""
    node = Node(id="file:x.ts:fn:x", name="x", kind="function", path="x.ts", content="a" * 900)

    text = embedding_text(node)

    assert text.endswith("a" * 500)
    assert "a" * 501 not in text
