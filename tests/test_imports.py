"""Tests for import extraction and module specifier resolution."""

import pytest

from tsgraph.imports import extract_imports, resolve_module_specifier
from tsgraph.symbols import register_file

SOURCES = {
    "src/app.ts",
    "src/utils/format.ts",
    "src/utils/index.ts",
    "src/components/Button.tsx",
    "src/legacy.js",
    "lib/esm.mts",
    "index.ts",
}


@pytest.mark.parametrize("importer, specifier, expected", [
    ("src/app.ts", "./utils/format", "src/utils/format.ts"),
    ("src/app.ts", "./utils/format.ts", "src/utils/format.ts"),
    ("src/app.ts", "./utils/format.js", "src/utils/format.ts"),
    ("src/app.ts", "./utils", "src/utils/index.ts"),
    ("src/app.ts", "./components/Button", "src/components/Button.tsx"),
    ("src/app.ts", "./components/Button.jsx", "src/components/Button.tsx"),
    ("src/app.ts", "./legacy", "src/legacy.js"),
    ("src/utils/format.ts", "../app", "src/app.ts"),
    ("src/utils/format.ts", "..", None),
    ("src/app.ts", "..", "index.ts"),
    ("lib/esm.mts", "../src/app", "src/app.ts"),
])
def test_resolve_relative_specifiers(importer, specifier, expected):
    """Test resolving relative import specifiers."""
    assert resolve_module_specifier(importer, specifier, SOURCES) == expected


@pytest.mark.parametrize("specifier", [
    "react",
    "@scope/pkg",
    "node:fs",
    "./missing",
    "../../outside",
    "@/utils/format",
])
def test_unresolvable_specifiers(specifier):
    """Test specifiers that do not resolve to a source file."""
    assert resolve_module_specifier("src/app.ts", specifier, SOURCES) is None


def test_extract_import_clauses(parse_source):
    """Test extracting imported names from import statements."""
    parsed = parse_source("src/app.ts", (
        'import React from "react";\n'
        'import { a, b as c } from "./lib";\n'
        "import * as ns from './ns';\n"
        'import Def, { named } from "./both";\n'
        'import "./side-effect";\n'
        'function f() { return 1; }\n'
    ))

    records = extract_imports(parsed)

    assert [r.specifier for r in records] == ["react", "./lib", "./ns", "./both", "./side-effect"]
    assert records[0].default == "React"
    assert records[1].named == [("a", "a"), ("c", "b")]
    assert records[2].namespace == "ns"
    assert records[3].default == "Def"
    assert records[3].named == [("named", "named")]
    assert records[4].default is None and records[4].named == []
    assert records[1].line == 2


def test_import_edges_and_bindings(make_context, parse_source):
    """Test import edges and local bindings."""
    ctx = make_context(["src/app.ts", "src/lib.ts", "src/ns.ts"])
    parsed = parse_source("src/app.ts", (
        'import express from "express";\n'
        'import { helper as h } from "./lib";\n'
        'import Lib from "./lib";\n'
        'import * as ns from "./ns";\n'
    ))

    register_file(ctx, parsed)

    imports = sorted(e.key for e in ctx.edges if e.relation == "imports")
    assert imports == [
        ("file:src/app.ts", "file:src/lib.ts", "imports"),
        ("file:src/app.ts", "file:src/ns.ts", "imports"),
    ]
    bindings = ctx.bindings["src/app.ts"]
    assert bindings.imported["h"] == ("src/lib.ts", "helper")
    assert bindings.imported["Lib"] == ("src/lib.ts", "default")
    assert bindings.namespaces["ns"] == "src/ns.ts"
    assert "express" not in bindings.imported


def test_import_edge_has_no_call_count(make_context, parse_source):
    """Test that import edges carry no call count."""
    ctx = make_context(["a.ts", "b.ts"])
    register_file(ctx, parse_source("b.ts", 'import { x } from "./a";\nimport { y } from "./a";\n'))

    edges = [e for e in ctx.edges if e.relation == "imports"]
    assert len(edges) == 1
    assert edges[0].call_count is None
