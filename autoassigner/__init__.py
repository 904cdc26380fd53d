"""AutoAssigner: A CLI tool that rotates task assignment among the members of a named group."""

__version__ = "0.1.0"
__build_time__ = "unknown"
__git_commit__ = "unknown"

from autoassigner.models.config import AutoAssignerConfig, GroupConfig
from autoassigner.models.state import AssignmentResult, GroupCounts

__all__ = [
    "__version__",
    "__build_time__",
    "__git_commit__",
    "AutoAssignerConfig",
    "GroupConfig",
    "AssignmentResult",
    "GroupCounts",
]
