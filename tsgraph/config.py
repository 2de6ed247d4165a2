"""Configuration paths and analyzer defaults for tsgraph."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("TSGRAPH_HOME", str(Path.home() / ".tsgraph"))).expanduser()

# Content snapshots are truncated to keep exported graphs bounded.
DEFAULT_FILE_CONTENT_LIMIT = 8000
DEFAULT_SYMBOL_CONTENT_LIMIT = 3000

# Progress is reported every N files in each pass (and always on the last one).
SYMBOL_PASS_REPORT_EVERY = 5
CALL_PASS_REPORT_EVERY = 10

