"""Abstract base stage with an enforced lifecycle.

Every concrete stage implements only ``execute()``.  ``run_stage()`` is
**not overridable**; it logs, wraps failures, and records the result:

    execute -> record

so every stage reports the same way regardless of subclass behaviour.
"""

from __future__ import annotations

import abc
import logging
import time
from typing import Any, final

logger = logging.getLogger(__name__)


class StageExecutionError(RuntimeError):
    """Raised when a stage's execute() method fails."""


class BaseStage(abc.ABC):
    """Abstract base for the checksum pipeline stages.

    Subclasses **must** implement:
        * ``stage_id``: unique identifier (e.g. ``"save_checksums"``).
        * ``display_name``: human-readable name for reports.
        * ``execute(run_context)``: the stage's core logic.

    Subclasses **must not** override ``run_stage()``.
    """

    @property
    @abc.abstractmethod
    def stage_id(self) -> str:
        ...

    @property
    @abc.abstractmethod
    def display_name(self) -> str:
        ...

    @abc.abstractmethod
    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        """Execute the stage's core logic.

        Parameters
        ----------
        run_context:
            Mutable dict carrying run-wide state: the ``FixerConfig``,
            storage backends, the registry document, prior stage results.

        Returns
        -------
        dict:
            Structured result dict appropriate to the stage's purpose.
        """
        ...

    @final
    def run_stage(self, run_context: dict[str, Any]) -> dict[str, Any]:
        """Execute the stage and record its result.  **Do not override.**"""
        logger.info("%s [%s] starting", self.display_name, self.stage_id)
        started = time.monotonic()
        try:
            result = self.execute(run_context)
        except Exception as exc:
            logger.error(
                "%s [%s] execution failed: %s",
                self.display_name,
                self.stage_id,
                exc,
            )
            raise StageExecutionError(f"Stage {self.stage_id} failed: {exc}") from exc

        result["_elapsed_seconds"] = round(time.monotonic() - started, 3)
        run_context.setdefault("stage_results", {})[self.stage_id] = result
        logger.info(
            "%s [%s] finished in %.3fs",
            self.display_name,
            self.stage_id,
            result["_elapsed_seconds"],
        )
        return result

    def __repr__(self) -> str:
        return f"<{type(self).__name__} stage_id={self.stage_id!r}>"
