"""greenaudit agents package.

All agents inherit from BaseAgent and operate on AssessmentContext.
Agents do not import from each other; all communication flows through context.
"""

from greenaudit.agents.base import AgentStatus, BaseAgent

__all__ = [
    "BaseAgent",
    "AgentStatus",
]
