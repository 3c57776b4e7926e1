"""BaseAgent ABC and AgentStatus constants for greenaudit.

All assessment agents inherit from BaseAgent and implement the async run()
method. The base class enforces the standard interface: run, validate_output,
reset.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from greenaudit.models.pipeline import AssessmentContext

logger = logging.getLogger(__name__)


class AgentStatus:
    """Status codes used on agent result objects."""

    OK = "OK"
    PARTIAL = "PARTIAL"
    FAILED = "FAILED"


class BaseAgent(ABC):
    """Abstract base class for all greenaudit assessment agents.

    Agents are stateless with respect to run data; all state flows through
    AssessmentContext. The oracle client and limiter are injected at
    construction so a single run shares one of each.
    """

    name: str = "BaseAgent"
    version: str = "1.0.0"

    @abstractmethod
    async def run(self, context: "AssessmentContext") -> Any:
        """Execute the agent and return a typed result.

        The result is stored on the context by the pipeline after this
        coroutine returns.

        Args:
            context: Shared assessment context with configuration and upstream results.

        Returns:
            A typed agent result dataclass (subclass-specific).
        """

    def validate_output(self, result: Any) -> bool:
        """Post-run validation of structured output.

        Args:
            result: The typed result produced by run().

        Returns:
            True if output is valid, False if validation failed.
        """
        return result is not None

    def reset(self) -> None:
        """Clear internal state for re-use."""

    async def run_timed(self, context: "AssessmentContext") -> Any:
        """Execute run() and log elapsed time."""
        start = time.monotonic()
        try:
            result = await self.run(context)
        except Exception as exc:
            logger.error(
                "Agent %s failed after %.2fs: %s",
                self.name,
                time.monotonic() - start,
                exc,
                exc_info=True,
            )
            raise
        logger.info(
            "Agent %s completed in %.2fs (status=%s)",
            self.name,
            time.monotonic() - start,
            getattr(result, "status", "?"),
        )
        return result
