"""Submission state machine.

States:
    UNSUBMITTED (no row) -> SUBMITTED -> GRADED
Resubmitting a GRADED submission moves it back to SUBMITTED and clears the grade
and feedback, since the graded work no longer exists. Withdrawing (deleting) a
submission returns the (coursework, student) pair to UNSUBMITTED.
"""

import enum
from typing import Any

from ClassroomApp.core.choices import SubmissionState


class SubmissionEvent(enum.Enum):
    SUBMIT = "submit"
    GRADE = "grade"
    WITHDRAW = "withdraw"


class InvalidTransition(Exception):
    """Raised when an event is not defined for the current state."""

    def __init__(self, state: str, event: SubmissionEvent) -> None:
        self.state = state
        self.event = event
        super().__init__(f"Cannot {event.value} a submission in state {state}")


TRANSITIONS: dict[tuple[str, SubmissionEvent], str] = {
    (SubmissionState.UNSUBMITTED, SubmissionEvent.SUBMIT): SubmissionState.SUBMITTED,
    (SubmissionState.SUBMITTED, SubmissionEvent.SUBMIT): SubmissionState.SUBMITTED,
    (SubmissionState.GRADED, SubmissionEvent.SUBMIT): SubmissionState.SUBMITTED,
    (SubmissionState.SUBMITTED, SubmissionEvent.GRADE): SubmissionState.GRADED,
    (SubmissionState.GRADED, SubmissionEvent.GRADE): SubmissionState.GRADED,
    (SubmissionState.SUBMITTED, SubmissionEvent.WITHDRAW): SubmissionState.UNSUBMITTED,
    (SubmissionState.GRADED, SubmissionEvent.WITHDRAW): SubmissionState.UNSUBMITTED,
}


def state_of(submission: Any | None) -> str:
    """Derive the lifecycle state of a stored submission (or its absence)."""
    if submission is None:
        return SubmissionState.UNSUBMITTED
    if submission.grade is None:
        return SubmissionState.SUBMITTED
    return SubmissionState.GRADED


def transition(state: str, event: SubmissionEvent) -> str:
    try:
        return TRANSITIONS[(state, event)]
    except KeyError:
        raise InvalidTransition(state, event) from None


def submission_fields(content: str, file_url: str | None) -> dict[str, Any]:
    """Fields written on SUBMIT, for first submissions and resubmissions alike.

    Grading is always reset: a new submission has never been graded, and a
    resubmission replaces the work that was graded.
    """
    return {
        "content": content,
        "file_url": file_url,
        "grade": None,
        "feedback": None,
    }


def grading_fields(grade: int, feedback: str | None) -> dict[str, Any]:
    return {"grade": grade, "feedback": feedback}


def clears_grading(previous_state: str, event: SubmissionEvent) -> bool:
    """True when applying ``event`` drops an existing grade."""
    return previous_state == SubmissionState.GRADED and event is SubmissionEvent.SUBMIT
