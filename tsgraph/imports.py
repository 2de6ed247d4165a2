"""Import edge resolver.

Relative module specifiers are resolved against the importing file using
the TypeScript lookup order (exact file, ``.js`` → ``.ts`` sibling, added
extension, directory ``index``). Only files inside the filtered source set
count; bare package specifiers never produce an edge.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass, field
from typing import Any, Collection, List, Optional, Tuple

from .context import AnalysisContext
from .parser import ParsedFile, node_text

logger = logging.getLogger(__name__)

RESOLVE_EXTENSIONS: Tuple[str, ...] = (
    ".ts", ".tsx", ".d.ts", ".js", ".jsx", ".mjs", ".cjs", ".mts", ".cts",
)

# ESM-style TypeScript imports name the emitted file: "./a.js" means "./a.ts".
_EMITTED_TO_SOURCE = {
    ".js": (".ts", ".tsx"),
    ".jsx": (".tsx",),
    ".mjs": (".mts",),
    ".cjs": (".cts",),
}


@dataclass
class ImportRecord:
    specifier: str
    line: int
    default: Optional[str] = None
    namespace: Optional[str] = None
    # (local name, exported name)
    named: List[Tuple[str, str]] = field(default_factory=list)


def resolve_module_specifier(
    importer: str,
    specifier: str,
    source_paths: Collection[str],
) -> Optional[str]:
    """Map *specifier* imported from *importer* to a path in *source_paths*."""
    if not (specifier.startswith(("./", "../")) or specifier in (".", "..")):
        return None

    joined = posixpath.normpath(posixpath.join(posixpath.dirname(importer), specifier))
    if joined == ".." or joined.startswith("../"):
        return None
    if joined == ".":
        joined = ""

    candidates: List[str] = []
    if joined:
        candidates.append(joined)
        stem, ext = posixpath.splitext(joined)
        candidates.extend(stem + alt for alt in _EMITTED_TO_SOURCE.get(ext, ()))
        candidates.extend(joined + ext_ for ext_ in RESOLVE_EXTENSIONS)
    index = f"{joined}/index" if joined else "index"
    candidates.extend(index + ext_ for ext_ in RESOLVE_EXTENSIONS)

    for candidate in candidates:
        if candidate in source_paths:
            return candidate
    return None


def _string_value(string_node: Any) -> str:
    return node_text(string_node).strip("'\"`")


def _parse_import_statement(stmt: Any) -> Optional[ImportRecord]:
    source = stmt.child_by_field_name("source")
    if source is None:
        source = next((c for c in stmt.children if c.type == "string"), None)
    if source is None:
        # TypeScript `import x = require("...")`
        return None

    record = ImportRecord(specifier=_string_value(source), line=stmt.start_point[0] + 1)
    clause = next((c for c in stmt.children if c.type == "import_clause"), None)
    if clause is None:
        return record

    for child in clause.named_children:
        if child.type == "identifier":
            record.default = node_text(child)
        elif child.type == "namespace_import":
            ident = next((c for c in child.named_children if c.type == "identifier"), None)
            if ident is not None:
                record.namespace = node_text(ident)
        elif child.type == "named_imports":
            for spec in child.named_children:
                if spec.type != "import_specifier":
                    continue
                name = spec.child_by_field_name("name")
                alias = spec.child_by_field_name("alias")
                if name is None:
                    continue
                exported = node_text(name).strip("'\"")
                local = node_text(alias) if alias is not None else exported
                record.named.append((local, exported))
    return record


def extract_imports(parsed: ParsedFile) -> List[ImportRecord]:
    """Return the top-level import declarations of *parsed*, in source order."""
    records: List[ImportRecord] = []
    for stmt in parsed.root.children:
        if stmt.type != "import_statement":
            continue
        record = _parse_import_statement(stmt)
        if record is not None:
            records.append(record)
    return records


def add_import_edges(ctx: AnalysisContext, parsed: ParsedFile, file_id: str) -> int:
    """Add ``imports`` edges for *parsed* and record its import bindings.

    Returns the number of specifiers that resolved inside the project.
    """
    bindings = ctx.bindings_for(parsed.rel_path)
    resolved_count = 0

    for record in extract_imports(parsed):
        target = resolve_module_specifier(parsed.rel_path, record.specifier, ctx.source_paths)
        if target is None:
            logger.debug("%s: import '%s' is external or unresolved", parsed.rel_path, record.specifier)
            continue
        resolved_count += 1
        ctx.add_edge(file_id, f"file:{target}", "imports")

        if record.default:
            bindings.imported[record.default] = (target, "default")
        if record.namespace:
            bindings.namespaces[record.namespace] = target
        for local, exported in record.named:
            bindings.imported[local] = (target, exported)

    return resolved_count
