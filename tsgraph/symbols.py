"""Pass 1: emit file / function / class / method nodes and the name registry.

Top-level statements are unwrapped from ``export`` and classified into a
closed set of declaration kinds, each with exactly one handler:

- FUNCTION: ``function`` declarations (including anonymous default exports)
- VARIABLE: ``const`` / ``let`` / ``var`` declarators holding a function value
- CLASS:    class declarations (including anonymous default exports)
- METHOD:   ordinary methods of a registered class

Node inserts are first-writer-wins; the callable-name registry is
last-writer-wins, so a name declared in two files points at the file
processed last.
"""

from __future__ import annotations

import enum
import logging
import posixpath
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from .context import AnalysisContext
from .folders import add_folder_nodes, folder_id, parent_dir
from .imports import add_import_edges
from .models import Node
from .parser import ParsedFile, node_text, start_line

logger = logging.getLogger(__name__)


class DeclarationKind(enum.Enum):
    FUNCTION = "function"
    VARIABLE = "variable"
    CLASS = "class"
    METHOD = "method"


_DECLARATION_TYPES: Dict[str, DeclarationKind] = {
    "function_declaration": DeclarationKind.FUNCTION,
    "generator_function_declaration": DeclarationKind.FUNCTION,
    # anonymous `export default function () {}`
    "function_expression": DeclarationKind.FUNCTION,
    "function": DeclarationKind.FUNCTION,
    "generator_function": DeclarationKind.FUNCTION,
    "lexical_declaration": DeclarationKind.VARIABLE,
    "variable_declaration": DeclarationKind.VARIABLE,
    "class_declaration": DeclarationKind.CLASS,
    "abstract_class_declaration": DeclarationKind.CLASS,
    # anonymous `export default class {}`
    "class": DeclarationKind.CLASS,
}

FUNCTION_VALUE_TYPES = frozenset({
    "arrow_function", "function_expression", "function", "generator_function",
})


# ---------------------------------------------------------------------------
# ID grammar
# ---------------------------------------------------------------------------

def file_node_id(rel_path: str) -> str:
    return f"file:{rel_path}"


def function_node_id(file_id: str, name: str) -> str:
    return f"{file_id}:fn:{name}"


def class_node_id(file_id: str, name: str) -> str:
    return f"{file_id}:cls:{name}"


def method_node_id(class_id: str, name: str) -> str:
    return f"{class_id}:method:{name}"


# ---------------------------------------------------------------------------
# Source snippets
# ---------------------------------------------------------------------------

def signature_of(text: str) -> str:
    """Declaration text before the opening brace."""
    return text.split("{")[0].strip()


def _clean_jsdoc(raw: str) -> str:
    body = raw[3:]
    if body.endswith("*/"):
        body = body[:-2]
    lines: List[str] = []
    for line in body.splitlines():
        line = line.strip()
        if line.startswith("*"):
            line = line[1:].strip()
        if line.startswith("@"):
            break
        lines.append(line)
    return "\n".join(lines).strip()


def doc_comment_of(ts_node: Any) -> Optional[str]:
    """JSDoc description text of the comments directly preceding *ts_node*."""
    docs: List[str] = []
    sibling = ts_node.prev_sibling
    while sibling is not None and sibling.type == "comment":
        text = node_text(sibling)
        if text.startswith("/**"):
            docs.append(_clean_jsdoc(text))
        sibling = sibling.prev_sibling
    joined = "\n".join(d for d in reversed(docs) if d)
    return joined or None


def _top_level_declarations(root: Any) -> Iterator[Tuple[Any, Any, bool]]:
    """Yield ``(outer, declaration, is_default_export)`` for top-level statements."""
    for child in root.children:
        if child.type == "export_statement":
            decl = child.child_by_field_name("declaration")
            if decl is None:
                decl = child.child_by_field_name("value")
            if decl is None:
                continue
            yield child, decl, any(c.type == "default" for c in child.children)
        else:
            yield child, child, False


def _is_accessor(method: Any, name: Any) -> bool:
    for child in method.children:
        if child.start_byte >= name.start_byte:
            return False
        if child.type in ("get", "set"):
            return True
    return False


# ---------------------------------------------------------------------------
# Per-file collector
# ---------------------------------------------------------------------------

class FileSymbolCollector:
    """Walks one file's top level and emits its declaration nodes."""

    def __init__(self, ctx: AnalysisContext, parsed: ParsedFile, file_id: str) -> None:
        self.ctx = ctx
        self.parsed = parsed
        self.file_id = file_id
        self.rel_path = parsed.rel_path
        self.bindings = ctx.bindings_for(parsed.rel_path)
        self._function_index = 0
        self._class_index = 0
        self._handlers: Dict[DeclarationKind, Callable[[Any, Any], Optional[str]]] = {
            DeclarationKind.FUNCTION: self._handle_function,
            DeclarationKind.VARIABLE: self._handle_variable,
            DeclarationKind.CLASS: self._handle_class,
            DeclarationKind.METHOD: self._handle_method,
        }

    @property
    def symbol_limit(self) -> int:
        return self.ctx.settings.symbol_content_limit

    def collect(self) -> None:
        for outer, decl, is_default in _top_level_declarations(self.parsed.root):
            kind = _DECLARATION_TYPES.get(decl.type)
            if kind is None:
                if is_default and decl.type == "identifier":
                    self.bindings.default_export = node_text(decl)
                continue
            name = self._handlers[kind](outer, decl)
            if is_default and name:
                self.bindings.default_export = name

    # -- handlers ------------------------------------------------------

    def _handle_function(self, outer: Any, decl: Any) -> Optional[str]:
        index = self._function_index
        self._function_index += 1
        name_node = decl.child_by_field_name("name")
        name = node_text(name_node) if name_node is not None else f"anonymous_{index}"
        fn_id = function_node_id(self.file_id, name)
        text = node_text(outer)

        self.ctx.register(name, fn_id)
        self.bindings.declared.add(name)
        self.ctx.add_node(Node(
            id=fn_id,
            name=name,
            kind="function",
            path=self.rel_path,
            line=start_line(outer),
            parent=self.file_id,
            content=text[: self.symbol_limit],
            signature=signature_of(text),
            doc_comment=doc_comment_of(outer),
        ))
        self.ctx.add_edge(self.file_id, fn_id, "contains")
        return name

    def _handle_variable(self, outer: Any, decl: Any) -> Optional[str]:
        keyword = decl.children[0].type if decl.children else "const"
        last_name: Optional[str] = None
        for declarator in decl.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            value = declarator.child_by_field_name("value")
            if name_node is None or value is None or name_node.type != "identifier":
                continue
            if value.type not in FUNCTION_VALUE_TYPES:
                continue

            name = node_text(name_node)
            fn_id = function_node_id(self.file_id, name)
            if self.ctx.has_node(fn_id):
                continue
            value_text = node_text(value)
            self.ctx.register(name, fn_id)
            self.bindings.declared.add(name)
            self.ctx.add_node(Node(
                id=fn_id,
                name=name,
                kind="function",
                path=self.rel_path,
                line=start_line(declarator),
                parent=self.file_id,
                content=value_text[: self.symbol_limit],
                signature=f"{keyword} {name} = {value_text.splitlines()[0] if value_text else ''}",
            ))
            self.ctx.add_edge(self.file_id, fn_id, "contains")
            last_name = name
        return last_name

    def _handle_class(self, outer: Any, decl: Any) -> Optional[str]:
        index = self._class_index
        self._class_index += 1
        name_node = decl.child_by_field_name("name")
        name = node_text(name_node) if name_node is not None else f"AnonymousClass_{index}"
        cls_id = class_node_id(self.file_id, name)

        self.ctx.register(name, cls_id)
        self.bindings.declared.add(name)
        self.ctx.class_ids[(self.rel_path, decl.start_byte)] = cls_id
        self.ctx.add_node(Node(
            id=cls_id,
            name=name,
            kind="class",
            path=self.rel_path,
            line=start_line(outer),
            parent=self.file_id,
            content=node_text(outer)[: self.symbol_limit],
            doc_comment=doc_comment_of(outer),
        ))
        self.ctx.add_edge(self.file_id, cls_id, "contains")

        body = decl.child_by_field_name("body")
        if body is not None:
            for member in body.named_children:
                if member.type == "method_definition":
                    self._handlers[DeclarationKind.METHOD](member, (name, cls_id))
        return name

    def _handle_method(self, method: Any, owner: Tuple[str, str]) -> Optional[str]:
        class_name, cls_id = owner
        name_node = method.child_by_field_name("name")
        if name_node is None or _is_accessor(method, name_node):
            return None
        name = node_text(name_node)
        if name == "constructor":
            return None

        method_id = method_node_id(cls_id, name)
        text = node_text(method)
        self.ctx.register(f"{class_name}.{name}", method_id)
        self.ctx.add_node(Node(
            id=method_id,
            name=name,
            kind="function",
            path=self.rel_path,
            line=start_line(method),
            parent=cls_id,
            content=text[: self.symbol_limit],
            signature=signature_of(text),
            doc_comment=doc_comment_of(method),
        ))
        self.ctx.add_edge(cls_id, method_id, "contains")
        return name


# ---------------------------------------------------------------------------
# Pass 1 entry point
# ---------------------------------------------------------------------------

def register_file(ctx: AnalysisContext, parsed: ParsedFile) -> str:
    """Emit the folder chain, file node, import edges and declarations of *parsed*."""
    rel_path = parsed.rel_path
    file_id = file_node_id(rel_path)
    directory = parent_dir(rel_path)
    # Folders are emitted only once the file node is built.
    file_node = Node(
        id=file_id,
        name=posixpath.basename(rel_path),
        kind="file",
        path=rel_path,
        parent=folder_id(directory) if directory else None,
        content=parsed.source[: ctx.settings.file_content_limit],
    )

    add_folder_nodes(ctx, rel_path)
    ctx.add_node(file_node)
    if directory:
        ctx.add_edge(folder_id(directory), file_id, "contains")

    add_import_edges(ctx, parsed, file_id)
    FileSymbolCollector(ctx, parsed, file_id).collect()
    return file_id
