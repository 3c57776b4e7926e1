"""greenaudit: multi-prompt parallel assessment of environmental claims.

Public API surface:
    - AssessmentConfig: Runtime configuration
    - AssessmentContext: Shared state threaded through all agents
    - run / run_pipeline: Async and sync entry points for one assessment job
"""

__version__ = "1.0.0"
__author__ = "greenaudit Contributors"

from config.settings import AssessmentConfig
from greenaudit.models.pipeline import AssessmentContext
from greenaudit.pipeline import run, run_pipeline

__all__ = [
    "__version__",
    "AssessmentConfig",
    "AssessmentContext",
    "run",
    "run_pipeline",
]
