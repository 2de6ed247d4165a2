"""Code graph extraction engine.

Runs the source filter, pass 1 (symbol registry), pass 2 (call graph) and
the assembler over one project root. Each :meth:`AnalyzerEngine.analyze`
call builds a fresh :class:`~tsgraph.context.AnalysisContext`; nothing is
kept between runs.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, Union

from .calls import CallGraphResolver, SymbolResolver
from .config import CALL_PASS_REPORT_EVERY, SYMBOL_PASS_REPORT_EVERY
from .config_manager import AnalyzerSettings, load_settings
from .context import AnalysisContext
from .errors import GrammarUnavailableError, NoSourceFilesError, SourceRootError
from .models import ProgressEvent, ProjectGraph
from .parser import ParsedFile, TreeSitterParser
from .source_filter import discover_source_files, relative_posix
from .symbols import register_file

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]
ResolverFactory = Callable[[AnalysisContext], SymbolResolver]


def assemble(ctx: AnalysisContext) -> ProjectGraph:
    """Collect nodes and deduplicated edges, dropping edges with a missing endpoint."""
    nodes = list(ctx.nodes.values())
    live_ids = set(ctx.nodes)
    edges = [e for e in ctx.edges if e.source in live_ids and e.target in live_ids]
    dropped = len(ctx.edges) - len(edges)
    if dropped:
        logger.debug("Dropped %d dangling edges", dropped)
    return ProjectGraph(
        nodes=nodes,
        edges=edges,
        root_path=str(ctx.root),
        warnings=list(ctx.warnings),
    )


class AnalyzerEngine:
    """Builds a :class:`ProjectGraph` for the TS/JS sources under *root_path*."""

    def __init__(
        self,
        root_path: Union[str, Path],
        progress: Optional[ProgressCallback] = None,
        settings: Optional[AnalyzerSettings] = None,
        resolver_factory: Optional[ResolverFactory] = None,
        parser: Optional[TreeSitterParser] = None,
    ) -> None:
        self.root_path = Path(root_path).expanduser()
        self.progress = progress
        self.settings = settings or load_settings()
        self.resolver_factory = resolver_factory
        self._parser = parser

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    def _emit(self, stage: str, processed: int, total: int, current_file: str = "") -> None:
        if self.progress is None:
            return
        try:
            self.progress(ProgressEvent(stage, processed, total, current_file))
        except Exception as exc:
            logger.debug("Progress callback failed: %s", exc)

    def _report(self, stage: str, processed: int, total: int, current_file: str, every: int) -> None:
        if processed % every == 0 or processed == total:
            self._emit(stage, processed, total, current_file)

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def _validate_root(self) -> Path:
        if not self.root_path.exists():
            raise SourceRootError(f"Source root does not exist: {self.root_path}")
        if not self.root_path.is_dir():
            raise SourceRootError(f"Source root is not a directory: {self.root_path}")
        return self.root_path

    def _parse(
        self,
        syntax: TreeSitterParser,
        ctx: AnalysisContext,
        file_path: Path,
        rel_path: str,
    ) -> Optional[ParsedFile]:
        try:
            parsed = syntax.parse_file(file_path, rel_path)
        except (OSError, ValueError) as exc:
            logger.warning("Skipping %s: %s", rel_path, exc)
            ctx.warn(rel_path, f"skipped: {exc}")
            return None
        if parsed.has_syntax_errors:
            logger.warning("Syntax errors in %s; extraction may be incomplete", rel_path)
            ctx.warn(rel_path, "syntax errors; extracted declarations may be incomplete")
        return parsed

    def analyze(self) -> ProjectGraph:
        root = self._validate_root()

        self._emit("scan", 0, 0)
        files = discover_source_files(
            root,
            extra_skip_dirs=self.settings.extra_skip_dirs,
            extra_skip_extensions=self.settings.extra_skip_extensions,
        )
        if not files:
            raise NoSourceFilesError(
                f"No analyzable source found under {root}. "
                "Make sure it contains .ts/.tsx/.js/.jsx files."
            )
        total = len(files)
        self._emit("scan", total, total)

        syntax = self._parser or TreeSitterParser()
        if not syntax.languages:
            raise GrammarUnavailableError(
                "No tree-sitter grammar could be loaded. "
                "Install with: pip install tree-sitter-javascript tree-sitter-typescript"
            )

        rel_paths = [relative_posix(p, root) for p in files]
        ctx = AnalysisContext(root=root, settings=self.settings, source_paths=set(rel_paths))

        # === Pass 1: folders, files, functions, classes, methods, imports ===
        for index, (file_path, rel_path) in enumerate(zip(files, rel_paths), start=1):
            self._report("symbols", index, total, rel_path, SYMBOL_PASS_REPORT_EVERY)
            parsed = self._parse(syntax, ctx, file_path, rel_path)
            if parsed is None:
                continue
            try:
                register_file(ctx, parsed)
            except Exception as exc:
                logger.warning("Failed to extract symbols from %s: %s", rel_path, exc)
                ctx.warn(rel_path, f"symbol extraction failed: {exc}")
                continue
            ctx.files.append(parsed)

        logger.info(
            "Symbol registry built: %d nodes, %d registered names from %d files",
            len(ctx.nodes), len(ctx.registry), len(ctx.files),
        )

        # === Pass 2: call edges ===
        resolver = self.resolver_factory(ctx) if self.resolver_factory else None
        tracer = CallGraphResolver(ctx, resolver)
        traced_total = len(ctx.files)
        linked = 0
        for index, parsed in enumerate(ctx.files, start=1):
            self._report("calls", index, traced_total, parsed.rel_path, CALL_PASS_REPORT_EVERY)
            try:
                linked += tracer.trace_file(parsed)
            except Exception as exc:
                logger.warning("Failed to trace calls in %s: %s", parsed.rel_path, exc)
                ctx.warn(parsed.rel_path, f"call tracing failed: {exc}")
        logger.info("Call graph complete: %d call sites linked", linked)

        graph = assemble(ctx)
        self._emit("assemble", len(graph.nodes), len(graph.nodes))
        ctx.files.clear()
        return graph


def analyze_project(root_path: Union[str, Path], **kwargs) -> ProjectGraph:
    """Convenience wrapper around :class:`AnalyzerEngine`."""
    return AnalyzerEngine(root_path, **kwargs).analyze()
