"""Source set filter: which files under a root are analyzed.

Filtering is purely path / extension based. No file content is read here,
so the filter can run before any parse work.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Set

logger = logging.getLogger(__name__)

SOURCE_EXTENSIONS: Set[str] = {
    ".ts", ".tsx", ".mts", ".cts",
    ".js", ".jsx", ".mjs", ".cjs",
}

# Generated, vendored and VCS directories.
SKIP_DIRS: Set[str] = {
    "node_modules", "dist", "build", ".next", "out",
    "coverage", "vendor", ".git",
}

# Non-code suffixes to ignore (images, media, fonts, archives, ...).
BINARY_EXTENSIONS: Set[str] = {
    ".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg", ".ico", ".avif",
    ".mp4", ".webm", ".mov", ".avi", ".mkv", ".mp3", ".wav", ".ogg",
    ".woff", ".woff2", ".ttf", ".eot", ".otf",
    ".pdf", ".zip", ".tar", ".gz", ".7z",
    ".lock", ".bin", ".exe", ".dll", ".so",
    ".map",
}

MINIFIED_SUFFIXES = (".min.js", ".min.css")


def relative_posix(path: Path, root: Path) -> str:
    return path.relative_to(root).as_posix()


def is_excluded(
    rel_path: str,
    skip_dirs: Optional[Iterable[str]] = None,
    skip_extensions: Optional[Iterable[str]] = None,
) -> bool:
    """Return True if *rel_path* (root-relative, POSIX) must not be analyzed."""
    dirs = SKIP_DIRS.union(skip_dirs or ())
    parts = rel_path.split("/")
    if any(part in dirs for part in parts[:-1]):
        return True

    name = parts[-1].lower()
    suffix = Path(name).suffix
    if suffix in BINARY_EXTENSIONS or suffix in {e.lower() for e in (skip_extensions or ())}:
        return True
    if name.endswith(MINIFIED_SUFFIXES):
        return True
    return suffix not in SOURCE_EXTENSIONS


def discover_source_files(
    root: Path,
    extra_skip_dirs: Optional[Iterable[str]] = None,
    extra_skip_extensions: Optional[Iterable[str]] = None,
) -> List[Path]:
    """Enumerate analyzable files under *root*, sorted by relative path."""
    skip_dirs = set(extra_skip_dirs or ())
    skip_exts = set(extra_skip_extensions or ())
    files: List[Path] = []
    seen: Set[str] = set()

    for ext in sorted(SOURCE_EXTENSIONS):
        for file_path in root.rglob(f"*{ext}"):
            if not file_path.is_file() or file_path.is_symlink():
                continue
            rel = relative_posix(file_path, root)
            if rel in seen or is_excluded(rel, skip_dirs, skip_exts):
                continue
            seen.add(rel)
            files.append(file_path)

    files.sort(key=lambda p: relative_posix(p, root))
    logger.debug("Discovered %d source files under %s", len(files), root)
    return files
