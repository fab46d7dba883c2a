"""Exceptions raised by the scoring and report pipeline."""

from typing import List, Any, Optional


class AuditError(Exception):
    """Base class for audit pipeline errors."""


class NotFound(AuditError):
    """A requested audit, question or tier does not exist."""


class UnknownTier(NotFound):
    """Tier is not one of tier_0..tier_4."""

    def __init__(self, tier: Any):
        self.tier = tier
        super().__init__(f"Unknown audit tier: {tier!r}")


class NotReady(AuditError):
    """Audit has not been submitted yet, so no report can be produced."""


class MissingResponse(AuditError):
    """Required questions have no response.

    ``partial_result`` holds the scores computed over the answered questions
    so callers can show progress, but it must not be used as a report.
    """

    def __init__(self, missing_question_ids: List[str], partial_result: Optional[Any] = None):
        self.missing_question_ids = list(missing_question_ids)
        self.partial_result = partial_result
        super().__init__(
            f"Missing responses for {len(self.missing_question_ids)} question(s): "
            f"{', '.join(self.missing_question_ids)}"
        )


class InvalidAnswerValue(AuditError):
    """Submitted answer matches none of the question's answer options."""

    def __init__(self, question_id: str, value: Any):
        self.question_id = question_id
        self.value = value
        super().__init__(f"Invalid answer {value!r} for question {question_id}")


class EmptyAggregate(AuditError):
    """Nothing to score."""


class InvalidStatusTransition(AuditError):
    """Audit status may only move forward: pending -> submitted -> completed."""


class InvalidQuestion(AuditError):
    """Question definition breaks a catalog rule."""
