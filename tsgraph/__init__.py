"""tsgraph: static code graph extraction for TypeScript and JavaScript projects."""

__version__ = "0.1.0"

from .engine import AnalyzerEngine, analyze_project
from .errors import AnalysisError, GrammarUnavailableError, NoSourceFilesError, SourceRootError
from .models import AnalysisWarning, Edge, Node, ProgressEvent, ProjectGraph

__all__ = [
    "__version__",
    "AnalyzerEngine",
    "analyze_project",
    "AnalysisError",
    "GrammarUnavailableError",
    "NoSourceFilesError",
    "SourceRootError",
    "AnalysisWarning",
    "Edge",
    "Node",
    "ProgressEvent",
    "ProjectGraph",
]
