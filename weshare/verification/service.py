import logging
import time
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as SchemaError
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from weshare.auth.schemas import ADMIN_ROLES, UserRole
from weshare.exceptions import Conflict, Forbidden, NotFound, NotImplementedYet, ValidationError
from weshare.models import DriverVerificationSubmission, User, VerificationAuditLog
from weshare.storage import (
    BlobStore, DOCUMENT_TYPES, IMAGE_TYPES, content_type_for, document_key, validate_upload
)
from weshare.utils import is_valid_phone_number, normalize_phone_number
from weshare.verification.schemas import (
    DOCUMENT_COLUMNS, PDF_DOCUMENTS, REQUIRED_FIELDS, STEP_SCHEMAS,
    DocumentType, LegacyVerificationRequest, ReviewAction, ReviewRequest,
    SubmissionStatus, VerificationStatus, VerificationStep
)
from weshare.verification.state_machine import AWAITING_REVIEW, REVIEW_OUTCOMES, REVIEWABLE, ensure_transition

logger = logging.getLogger(__name__)

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

def _schema_details(exc: SchemaError) -> List[Dict[str, Any]]:
    return [
        {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
        for error in exc.errors()
    ]

class VerificationService:
    """Versioned driver verification submissions and their admin review"""

    # Lookups
    @staticmethod
    def latest_submission(db: Session, user_id: int) -> Optional[DriverVerificationSubmission]:
        return (
            db.query(DriverVerificationSubmission)
            .filter(DriverVerificationSubmission.user_id == user_id)
            .order_by(DriverVerificationSubmission.version.desc())
            .first()
        )

    @staticmethod
    def is_user_approved(db: Session, user: User) -> bool:
        """Admins, legacy-verified drivers and users whose latest submission is APPROVED"""
        if user.role in ADMIN_ROLES or user.driver_verified:
            return True
        latest = VerificationService.latest_submission(db, user.id)
        return latest is not None and latest.status == SubmissionStatus.APPROVED.value

    @staticmethod
    def get_status(db: Session, user: User) -> VerificationStatus:
        latest = VerificationService.latest_submission(db, user.id)
        return VerificationStatus(
            status=latest.status if latest else None,
            is_approved=VerificationService.is_user_approved(db, user),
            submission_id=latest.id if latest else None,
            rejection_reason=latest.rejection_reason if latest else None,
        )

    @staticmethod
    def _get_submission(db: Session, submission_id: int, lock: bool = False) -> DriverVerificationSubmission:
        query = db.query(DriverVerificationSubmission).filter(DriverVerificationSubmission.id == submission_id)
        if lock:
            query = query.with_for_update()
        submission = query.first()
        if not submission:
            raise NotFound("Submission not found")
        return submission

    @staticmethod
    def _get_own_draft(db: Session, submission_id: int, user: User) -> DriverVerificationSubmission:
        submission = VerificationService._get_submission(db, submission_id, lock=True)
        if submission.user_id != user.id:
            raise Forbidden("You can only edit your own submission")
        if submission.status != SubmissionStatus.DRAFT.value:
            raise Conflict(f"Submission is {submission.status}, only drafts can be edited")
        return submission

    # Driver side
    @staticmethod
    def create_draft(db: Session, user: User) -> DriverVerificationSubmission:
        """Return the open draft, or start the next version"""
        # Lock the user row so concurrent calls allocate versions one at a time
        db.query(User).filter(User.id == user.id).with_for_update().first()

        latest = VerificationService.latest_submission(db, user.id)
        if latest and latest.status == SubmissionStatus.DRAFT.value:
            return latest
        if latest and latest.status in {s.value for s in AWAITING_REVIEW}:
            raise Conflict("Your latest submission is awaiting review")

        submission = DriverVerificationSubmission(
            user_id=user.id,
            version=(latest.version + 1) if latest else 1,
            status=SubmissionStatus.DRAFT.value,
            full_name=user.name,
            phone=user.phone,
        )
        try:
            db.add(submission)
            db.commit()
        except IntegrityError:
            db.rollback()
            raise Conflict("A draft was created concurrently, please retry")
        db.refresh(submission)
        logger.info("User %s opened verification draft v%s (%s)", user.id, submission.version, submission.id)
        return submission

    @staticmethod
    def save_step(db: Session, submission_id: int, user: User, step: str, payload: Dict[str, Any]) -> DriverVerificationSubmission:
        """Validate one step's fields and write only those"""
        try:
            step_kind = VerificationStep(step)
        except ValueError:
            raise ValidationError(
                f"Unknown step '{step}'",
                details=[{"field": "step", "message": f"Must be one of: {', '.join(s.value for s in VerificationStep)}"}],
            )

        submission = VerificationService._get_own_draft(db, submission_id, user)
        try:
            data = STEP_SCHEMAS[step_kind](**payload)
        except SchemaError as exc:
            raise ValidationError("Invalid step data", details=_schema_details(exc))

        values = data.dict()
        if step_kind == VerificationStep.PERSONAL:
            phone = normalize_phone_number(values["phone"])
            if not is_valid_phone_number(phone):
                raise ValidationError(
                    "Invalid Rwandan phone number",
                    details=[{"field": "phone", "message": "Invalid Rwandan phone number"}],
                )
            values["phone"] = phone
            values["full_name"] = values["full_name"].strip()

        for field, value in values.items():
            setattr(submission, field, value)
        db.commit()
        db.refresh(submission)
        return submission

    @staticmethod
    def upload_document(
        db: Session,
        store: BlobStore,
        submission_id: int,
        user: User,
        document_type: str,
        content_type: str,
        data: bytes,
    ) -> str:
        """Store one document for a draft and record its path"""
        try:
            doc_type = DocumentType(document_type)
        except ValueError:
            raise ValidationError(
                f"Unknown document type '{document_type}'",
                details=[{"field": "documentType", "message": "Unsupported document type"}],
            )

        allowed = DOCUMENT_TYPES if doc_type in PDF_DOCUMENTS else IMAGE_TYPES
        extension = validate_upload(content_type, len(data), allowed)

        submission = VerificationService._get_own_draft(db, submission_id, user)
        filename = f"{doc_type.value}-{int(time.time() * 1000)}.{extension}"
        path = store.save(document_key(user.id, submission.id, filename), data)

        try:
            setattr(submission, DOCUMENT_COLUMNS[doc_type], path)
            db.commit()
        except Exception:
            db.rollback()
            store.delete(path)
            logger.exception("Could not record %s on submission %s, removed the stored file", path, submission_id)
            raise
        return path

    @staticmethod
    def missing_fields(submission: DriverVerificationSubmission) -> List[str]:
        return [
            name for column, name in REQUIRED_FIELDS.items()
            if getattr(submission, column) in (None, "")
        ]

    @staticmethod
    def submit(db: Session, submission_id: int, user: User) -> DriverVerificationSubmission:
        """DRAFT -> SUBMITTED once every required field is present"""
        submission = VerificationService._get_submission(db, submission_id, lock=True)
        if submission.user_id != user.id:
            raise Forbidden("You can only submit your own submission")
        action = ensure_transition(SubmissionStatus(submission.status), SubmissionStatus.SUBMITTED)

        missing = VerificationService.missing_fields(submission)
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                details=[{"field": name, "message": "This field is required"} for name in missing],
            )

        submission.status = SubmissionStatus.SUBMITTED.value
        submission.submitted_at = _utcnow()
        db.add(VerificationAuditLog(submission_id=submission.id, admin_id=user.id, action=action.value))
        db.commit()
        db.refresh(submission)
        logger.info("Submission %s (user %s v%s) submitted", submission.id, user.id, submission.version)
        return submission

    @staticmethod
    def list_my_submissions(db: Session, user: User) -> List[DriverVerificationSubmission]:
        return (
            db.query(DriverVerificationSubmission)
            .filter(DriverVerificationSubmission.user_id == user.id)
            .order_by(DriverVerificationSubmission.version.desc())
            .all()
        )

    @staticmethod
    def get_my_submission(db: Session, submission_id: int, user: User) -> DriverVerificationSubmission:
        submission = VerificationService._get_submission(db, submission_id)
        if submission.user_id != user.id:
            raise Forbidden("You can only view your own submissions")
        return submission

    @staticmethod
    def delete_my_data(db: Session, user: User) -> None:
        raise NotImplementedYet("Deleting verification data is not available yet. Please contact support.")

    # Admin side
    @staticmethod
    def start_review(db: Session, submission_id: int, admin: User) -> DriverVerificationSubmission:
        """SUBMITTED -> IN_REVIEW"""
        submission = VerificationService._get_submission(db, submission_id, lock=True)
        action = ensure_transition(SubmissionStatus(submission.status), SubmissionStatus.IN_REVIEW)

        submission.status = SubmissionStatus.IN_REVIEW.value
        db.add(VerificationAuditLog(submission_id=submission.id, admin_id=admin.id, action=action.value))
        db.commit()
        db.refresh(submission)
        logger.info("Admin %s started review of submission %s", admin.id, submission.id)
        return submission

    @staticmethod
    def review(db: Session, submission_id: int, admin: User, request: ReviewRequest) -> DriverVerificationSubmission:
        """Apply an admin decision and its audit row in one transaction"""
        reason = (request.reason or "").strip() or None
        if request.action != ReviewAction.APPROVE and not reason:
            raise ValidationError(
                "Reason is required for reject or request changes",
                details=[{"field": "reason", "message": "Required for this action"}],
            )

        submission = VerificationService._get_submission(db, submission_id, lock=True)
        current = SubmissionStatus(submission.status)
        if current not in REVIEWABLE:
            raise Conflict(f"Submission is {current.value} and cannot be reviewed")
        target = REVIEW_OUTCOMES[request.action]
        action = ensure_transition(current, target)

        try:
            submission.status = target.value
            submission.reviewed_by = admin.id
            submission.reviewed_at = _utcnow()
            submission.rejection_reason = None if target == SubmissionStatus.APPROVED else reason
            db.add(VerificationAuditLog(
                submission_id=submission.id,
                admin_id=admin.id,
                action=action.value,
                reason=reason,
            ))
            if target == SubmissionStatus.APPROVED:
                VerificationService._mirror_to_user(submission)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Review of submission %s failed", submission_id)
            raise
        db.refresh(submission)
        logger.info("Admin %s set submission %s to %s", admin.id, submission.id, submission.status)
        return submission

    @staticmethod
    def _mirror_to_user(submission: DriverVerificationSubmission) -> None:
        """Copy approved details onto the user's pre-workflow fields"""
        user = submission.user
        user.driver_verified = True
        if submission.national_id_number:
            user.national_id = submission.national_id_number
        if submission.license_front:
            user.driving_license_number = "verified"
        if submission.plate_number:
            user.license_plate = submission.plate_number
        if user.role == UserRole.PASSENGER.value:
            user.role = UserRole.DRIVER.value

    @staticmethod
    def admin_list(db: Session, status: Optional[SubmissionStatus] = None, search: Optional[str] = None) -> List[DriverVerificationSubmission]:
        query = db.query(DriverVerificationSubmission)
        if status:
            query = query.filter(DriverVerificationSubmission.status == status.value)
        if search:
            term = f"%{search.strip().lower()}%"
            query = query.filter(or_(
                func.lower(DriverVerificationSubmission.full_name).like(term),
                func.lower(DriverVerificationSubmission.phone).like(term),
                func.lower(DriverVerificationSubmission.plate_number).like(term),
            ))
        return query.order_by(
            DriverVerificationSubmission.submitted_at.desc(),
            DriverVerificationSubmission.id.desc(),
        ).all()

    @staticmethod
    def admin_get(db: Session, submission_id: int) -> DriverVerificationSubmission:
        return VerificationService._get_submission(db, submission_id)

    # Documents
    @staticmethod
    def get_document(store: BlobStore, path: str, requester: User) -> Tuple[str, bytes]:
        """Read a stored document, returning (content type, bytes)"""
        parts = PurePosixPath(path).parts if path else ()
        if not path or path.startswith("/") or "\\" in path or ".." in parts or len(parts) < 3:
            raise ValidationError(
                "Invalid document path",
                details=[{"field": "path", "message": "Expected {userId}/{submissionId}/{filename}"}],
            )
        if not parts[0].isdigit():
            raise ValidationError("Invalid document path")

        owner_id = int(parts[0])
        if owner_id != requester.id and requester.role not in ADMIN_ROLES:
            raise Forbidden("You can only view your own documents")
        if not store.exists(path):
            raise NotFound("File not found")
        return content_type_for(path), store.read(path)

    # Single-form verification kept for older clients
    @staticmethod
    def legacy_submit(db: Session, user: User, request: LegacyVerificationRequest) -> User:
        """Record details on the user; approval still requires admin review"""
        user.national_id = request.national_id
        user.driving_license_number = request.driving_license_number
        user.license_plate = request.license_plate
        db.commit()
        db.refresh(user)
        logger.info("User %s stored legacy verification details", user.id)
        return user
