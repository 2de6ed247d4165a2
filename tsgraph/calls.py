"""Pass 2: resolve call expressions into ``calls`` edges.

For each call the enclosing registered callable is the caller. The callee is
resolved first by name through the registry built in pass 1 (tier 1), then
through a pluggable :class:`SymbolResolver` (tier 2). Tier 2 is best effort:
a miss or a resolver failure simply produces no edge.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Protocol, Tuple

from .context import AnalysisContext
from .parser import ParsedFile, iter_descendants, node_text
from .symbols import class_node_id, file_node_id, function_node_id, method_node_id

logger = logging.getLogger(__name__)

_FUNCTION_DECLARATIONS = ("function_declaration", "generator_function_declaration")


class SymbolResolver(Protocol):
    """Maps a call target expression to the declarations it may refer to."""

    def resolve(self, call_target: Any, rel_path: str) -> Iterable[Tuple[str, str]]:
        """Return ``(declaring file rel path, declared name)`` pairs."""
        ...


class ImportBindingResolver:
    """Tier-2 resolver answering from the binding tables recorded in pass 1.

    Handles names declared at the top of the calling file, named and default
    imports (``import { a as b }``, ``import b from``) and namespace member
    calls (``import * as ns`` then ``ns.a()``).
    """

    def __init__(self, ctx: AnalysisContext) -> None:
        self.ctx = ctx

    def resolve(self, call_target: Any, rel_path: str) -> List[Tuple[str, str]]:
        bindings = self.ctx.bindings.get(rel_path)
        if bindings is None:
            return []

        if call_target.type == "identifier":
            name = node_text(call_target)
            if name in bindings.imported:
                target, exported = bindings.imported[name]
                if exported == "default":
                    target_bindings = self.ctx.bindings.get(target)
                    exported = target_bindings.default_export if target_bindings else None
                    if exported is None:
                        return []
                return [(target, exported)]
            if name in bindings.declared:
                return [(rel_path, name)]
            return []

        if call_target.type == "member_expression":
            obj = call_target.child_by_field_name("object")
            prop = call_target.child_by_field_name("property")
            if obj is not None and prop is not None and obj.type == "identifier":
                target = bindings.namespaces.get(node_text(obj))
                if target is not None:
                    return [(target, node_text(prop))]
        return []


class CallGraphResolver:
    """Walks every call expression of a file and adds ``calls`` edges."""

    def __init__(self, ctx: AnalysisContext, resolver: Optional[SymbolResolver] = None) -> None:
        self.ctx = ctx
        self.resolver: SymbolResolver = resolver or ImportBindingResolver(ctx)

    # ------------------------------------------------------------------
    # Caller discovery
    # ------------------------------------------------------------------

    def find_caller(self, ts_node: Any, rel_path: str) -> Optional[str]:
        """Id of the nearest enclosing registered callable, or None at top level."""
        file_id = file_node_id(rel_path)
        current = ts_node
        while current is not None:
            kind = current.type
            if kind in _FUNCTION_DECLARATIONS:
                name = current.child_by_field_name("name")
                if name is not None:
                    fn_id = function_node_id(file_id, node_text(name))
                    if self.ctx.has_node(fn_id):
                        return fn_id
            elif kind == "method_definition":
                method_id = self._method_id(current, rel_path)
                if method_id is not None and self.ctx.has_node(method_id):
                    return method_id
            elif kind == "variable_declarator":
                name = current.child_by_field_name("name")
                if name is not None and name.type == "identifier":
                    fn_id = function_node_id(file_id, node_text(name))
                    if self.ctx.has_node(fn_id):
                        return fn_id
            current = current.parent
        return None

    def _method_id(self, method: Any, rel_path: str) -> Optional[str]:
        name = method.child_by_field_name("name")
        body = method.parent
        if name is None or body is None or body.type != "class_body" or body.parent is None:
            return None
        cls_id = self.ctx.class_ids.get((rel_path, body.parent.start_byte))
        if cls_id is None:
            return None
        return method_node_id(cls_id, node_text(name))

    # ------------------------------------------------------------------
    # Callee naming and resolution
    # ------------------------------------------------------------------

    def callee_name(self, call_target: Any) -> Optional[str]:
        if call_target.type == "identifier":
            return node_text(call_target)
        if call_target.type == "member_expression":
            obj = call_target.child_by_field_name("object")
            prop = call_target.child_by_field_name("property")
            if obj is None or prop is None:
                return None
            prop_name = node_text(prop)
            qualified = f"{node_text(obj)}.{prop_name}"
            return qualified if self.ctx.lookup(qualified) is not None else prop_name
        return None

    def _resolve_by_binding(self, caller_id: str, call_target: Any, rel_path: str) -> bool:
        linked = False
        for decl_path, decl_name in self.resolver.resolve(call_target, rel_path):
            target_file = file_node_id(decl_path)
            for candidate in (
                function_node_id(target_file, decl_name),
                class_node_id(target_file, decl_name),
            ):
                if candidate != caller_id and self.ctx.has_node(candidate):
                    self.ctx.add_edge(caller_id, candidate, "calls")
                    linked = True
                    break
        return linked

    def trace_call(self, call: Any, rel_path: str) -> bool:
        """Resolve one call expression. Returns True if a ``calls`` edge was recorded."""
        arguments = call.child_by_field_name("arguments")
        if arguments is not None and arguments.type == "template_string":
            return False  # tagged template, not a call

        caller_id = self.find_caller(call, rel_path)
        if caller_id is None:
            return False

        call_target = call.child_by_field_name("function")
        if call_target is None:
            return False
        name = self.callee_name(call_target)
        if not name:
            return False

        target_id = self.ctx.lookup(name)
        if target_id and target_id != caller_id and self.ctx.has_node(target_id):
            self.ctx.add_edge(caller_id, target_id, "calls")
            return True

        try:
            return self._resolve_by_binding(caller_id, call_target, rel_path)
        except Exception as exc:
            logger.debug("%s: symbol resolution failed for '%s': %s", rel_path, name, exc)
            return False

    def trace_file(self, parsed: ParsedFile) -> int:
        """Trace every call expression in *parsed*; returns how many were linked."""
        linked = 0
        for call in iter_descendants(parsed.root, "call_expression"):
            if self.trace_call(call, parsed.rel_path):
                linked += 1
        return linked
