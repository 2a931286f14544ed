"""Error aggregation for fetcher runs."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import List

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RecordedError:
    """Structured representation of a captured pipeline error."""

    subject: str
    stage: str
    message: str
    exception_type: str


class ErrorHandler:
    """Collects errors encountered during one orchestrator run.

    Only the coordinating thread records errors; workers hand theirs over in
    their results.
    """

    def __init__(self) -> None:
        self._errors: List[RecordedError] = []

    def record(self, subject: str, stage: str, exc: BaseException) -> None:
        """Record an error for later reporting."""

        logger.debug("Recording error at stage %s for %s: %s", stage, subject, exc)
        self._errors.append(
            RecordedError(
                subject=subject,
                stage=stage,
                message=str(exc),
                exception_type=type(exc).__name__,
            )
        )

    @property
    def errors(self) -> List[RecordedError]:
        return list(self._errors)

    def count(self, stage: str) -> int:
        return sum(1 for error in self._errors if error.stage == stage)

    def as_dict(self) -> List[dict]:
        """Serialise errors for JSON output."""

        return [asdict(error) for error in self._errors]
