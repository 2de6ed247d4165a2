"""Tree-sitter syntax layer for TypeScript / JavaScript sources.

Tree-sitter produces a concrete syntax tree that preserves every token and
tolerates broken input, so a file with a syntax error still yields the
declarations that did parse.
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from tree_sitter import Language, Parser as TSParser

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Language <-> file-extension mapping
# ---------------------------------------------------------------------------
LANGUAGE_MAP: Dict[str, str] = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
}

# language -> (grammar module, function returning the Language capsule)
_GRAMMAR_MODULES: Dict[str, Tuple[str, str]] = {
    "javascript": ("tree_sitter_javascript", "language"),
    "typescript": ("tree_sitter_typescript", "language_typescript"),
    "tsx": ("tree_sitter_typescript", "language_tsx"),
}


def node_text(ts_node: Any) -> str:
    return ts_node.text.decode("utf-8", errors="replace")


def start_line(ts_node: Any) -> int:
    return ts_node.start_point[0] + 1


def iter_descendants(ts_node: Any, node_type: str) -> Iterator[Any]:
    """Yield every descendant of *ts_node* with the given type, in source order."""
    stack: List[Any] = [ts_node]
    while stack:
        current = stack.pop()
        if current.type == node_type:
            yield current
        stack.extend(reversed(current.children))


@dataclass
class ParsedFile:
    """One source file and its syntax tree, alive for a single analysis run."""
    path: Path
    rel_path: str
    language: str
    source: str
    tree: Any

    @property
    def root(self) -> Any:
        return self.tree.root_node

    @property
    def has_syntax_errors(self) -> bool:
        return bool(self.tree.root_node.has_error)


class TreeSitterParser:
    """Loads the JS / TS / TSX grammars and parses files into :class:`ParsedFile`."""

    def __init__(self, languages: Optional[List[str]] = None) -> None:
        self._parsers: Dict[str, TSParser] = {}
        self._requested_languages = languages or list(_GRAMMAR_MODULES)
        self._init_parsers()

    # ------------------------------------------------------------------
    # Initialisation
    # ------------------------------------------------------------------

    def _init_parsers(self) -> None:
        for lang in self._requested_languages:
            spec = _GRAMMAR_MODULES.get(lang)
            if spec is None:
                logger.warning("No grammar module mapped for language '%s'", lang)
                continue
            mod_name, func_name = spec
            try:
                mod = importlib.import_module(mod_name)
                ts_lang = Language(getattr(mod, func_name)())
                self._parsers[lang] = TSParser(ts_lang)
                logger.debug("Loaded tree-sitter parser for %s", lang)
            except ImportError:
                logger.warning(
                    "Grammar package '%s' not installed for language '%s'. "
                    "Install with: pip install %s",
                    mod_name, lang, mod_name.replace("_", "-"),
                )
            except (AttributeError, TypeError, ValueError) as exc:
                logger.warning("Could not load tree-sitter grammar for %s: %s", lang, exc)

    @property
    def languages(self) -> List[str]:
        return sorted(self._parsers)

    @staticmethod
    def language_for(file_path: Path) -> Optional[str]:
        return LANGUAGE_MAP.get(file_path.suffix.lower())

    # ------------------------------------------------------------------
    # File-level parsing
    # ------------------------------------------------------------------

    def parse_file(
        self,
        file_path: Path,
        rel_path: str,
        source: Optional[str] = None,
    ) -> ParsedFile:
        """Parse *file_path* into a syntax tree.

        Raises:
            ValueError: when no grammar is loaded for the file's language.
            OSError: when the file cannot be read.
        """
        lang = self.language_for(file_path)
        if lang is None or lang not in self._parsers:
            raise ValueError(f"no grammar loaded for {file_path.suffix or file_path.name}")

        if source is None:
            source = file_path.read_text(encoding="utf-8", errors="ignore")

        tree = self._parsers[lang].parse(source.encode("utf-8"))
        return ParsedFile(
            path=file_path,
            rel_path=rel_path,
            language=lang,
            source=source,
            tree=tree,
        )
