"""Top-level installer flows."""

from .install import InstallSummary, InstallWorkflow
from .reissue import ReissueCoordinator, ReissueOutcome, ReissueState

__all__ = ["InstallSummary", "InstallWorkflow", "ReissueCoordinator", "ReissueOutcome", "ReissueState"]
