from typing import Dict, FrozenSet

from weshare.exceptions import Conflict
from weshare.verification.schemas import AuditAction, ReviewAction, SubmissionStatus

S = SubmissionStatus

# Allowed moves between submission states. Re-opening after
# CHANGES_REQUESTED happens by creating a new draft version, never in place.
TRANSITIONS: Dict[SubmissionStatus, FrozenSet[SubmissionStatus]] = {
    S.DRAFT: frozenset({S.SUBMITTED}),
    S.SUBMITTED: frozenset({S.IN_REVIEW, S.APPROVED, S.REJECTED, S.CHANGES_REQUESTED}),
    S.IN_REVIEW: frozenset({S.APPROVED, S.REJECTED, S.CHANGES_REQUESTED}),
    S.CHANGES_REQUESTED: frozenset({S.APPROVED, S.REJECTED, S.CHANGES_REQUESTED}),
    S.APPROVED: frozenset(),
    S.REJECTED: frozenset(),
}

REVIEWABLE: FrozenSet[SubmissionStatus] = frozenset({S.SUBMITTED, S.IN_REVIEW, S.CHANGES_REQUESTED})

# Latest-version states that block opening another draft
AWAITING_REVIEW: FrozenSet[SubmissionStatus] = frozenset({S.SUBMITTED, S.IN_REVIEW})

REVIEW_OUTCOMES: Dict[ReviewAction, SubmissionStatus] = {
    ReviewAction.APPROVE: S.APPROVED,
    ReviewAction.REJECT: S.REJECTED,
    ReviewAction.CHANGES_REQUESTED: S.CHANGES_REQUESTED,
}

AUDIT_ACTIONS: Dict[SubmissionStatus, AuditAction] = {
    S.SUBMITTED: AuditAction.SUBMITTED,
    S.IN_REVIEW: AuditAction.IN_REVIEW,
    S.APPROVED: AuditAction.APPROVED,
    S.REJECTED: AuditAction.REJECTED,
    S.CHANGES_REQUESTED: AuditAction.CHANGES_REQUESTED,
}


def can_transition(current: SubmissionStatus, target: SubmissionStatus) -> bool:
    return target in TRANSITIONS[current]


def ensure_transition(current: SubmissionStatus, target: SubmissionStatus) -> AuditAction:
    """Validate a move and return the audit action that records it"""
    if not can_transition(current, target):
        raise Conflict(f"Cannot move submission from {current.value} to {target.value}")
    return AUDIT_ACTIONS[target]
