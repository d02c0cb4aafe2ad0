"""
Driver Verification Module

Versioned, multi-step driver verification reviewed by admins:

- Drafts are filled in step by step (personal, vehicle, expiry) and with
  document uploads, then submitted once every required field is present
- Admins move submissions to IN_REVIEW and approve, reject or request changes
- Every status change appends one audit log row
- A new version is opened as a fresh draft; earlier versions stay untouched
- Approval mirrors the details onto the user's legacy verification fields

Key Components:
- state_machine.py: allowed status transitions and their audit actions
- service.py: VerificationService with driver and admin operations
- router.py: driver, legacy and admin endpoints
- schemas.py: step payloads, submission views and enums
"""

from .router import router, legacy_router, admin_router
from .service import VerificationService
from .schemas import (
    SubmissionStatus, ReviewAction, AuditAction, VerificationStep, DocumentType,
    Submission, SubmissionDetail, ReviewRequest, VerificationStatus
)

__all__ = [
    "router",
    "legacy_router",
    "admin_router",
    "VerificationService",
    "SubmissionStatus",
    "ReviewAction",
    "AuditAction",
    "VerificationStep",
    "DocumentType",
    "Submission",
    "SubmissionDetail",
    "ReviewRequest",
    "VerificationStatus",
]
