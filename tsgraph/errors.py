"""Caller-visible failures of an analysis run.

Only input-level problems surface as exceptions. Per-file problems become
:class:`~tsgraph.models.AnalysisWarning` entries and resolution misses simply
produce no edge.
"""

from __future__ import annotations


class AnalysisError(Exception):
    """Base class for failures that abort an analysis invocation."""


class SourceRootError(AnalysisError):
    """The root path is missing or is not a directory."""


class NoSourceFilesError(AnalysisError):
    """The filtered source set is empty."""


class GrammarUnavailableError(AnalysisError):
    """No tree-sitter grammar could be loaded."""
