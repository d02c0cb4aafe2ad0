from fastapi import APIRouter, Body, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional

from weshare.database import get_db
from weshare.auth.dependencies import get_current_user, require_admin
from weshare.models import User
from weshare.storage import BlobStore, get_verification_store
from weshare.verification.schemas import (
    AdminSubmission, AdminSubmissionDetail, LegacyVerificationRequest, LegacyVerificationStatus,
    ReviewRequest, Submission, SubmissionDetail, SubmissionStatus, UploadResponse, VerificationStatus
)
from weshare.verification.service import VerificationService

router = APIRouter()
legacy_router = APIRouter()
admin_router = APIRouter()

# Driver Endpoints
@router.get("/status", response_model=VerificationStatus)
def get_verification_status(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Latest submission status and whether the user may post trips"""
    return VerificationService.get_status(db, current_user)

@router.post("/submissions", response_model=Submission, status_code=status.HTTP_201_CREATED)
def create_draft(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Open a draft, or return the one already open"""
    return VerificationService.create_draft(db, current_user)

@router.get("/submissions", response_model=List[Submission])
def list_my_submissions(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return VerificationService.list_my_submissions(db, current_user)

@router.get("/submissions/{submission_id}", response_model=SubmissionDetail)
def get_my_submission(
    submission_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return VerificationService.get_my_submission(db, submission_id, current_user)

@router.put("/submissions/{submission_id}/steps/{step}", response_model=Submission)
def save_step(
    submission_id: int,
    step: str,
    payload: Dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Save one step (personal, vehicle or expiry) of a draft"""
    return VerificationService.save_step(db, submission_id, current_user, step, payload)

@router.post("/submissions/{submission_id}/documents", response_model=UploadResponse)
async def upload_document(
    submission_id: int,
    document_type: str = Form(..., alias="documentType"),
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_verification_store),
):
    """Upload an ID, license, vehicle photo, yellow card or insurance document"""
    data = await file.read()
    path = VerificationService.upload_document(
        db, store, submission_id, current_user, document_type, file.content_type or "", data
    )
    return UploadResponse(path=path)

@router.post("/submissions/{submission_id}/submit", response_model=Submission)
def submit(
    submission_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Send a complete draft for admin review"""
    return VerificationService.submit(db, submission_id, current_user)

@router.get("/documents")
def get_document(
    path: str = Query(..., description="Stored path {userId}/{submissionId}/{filename}"),
    current_user: User = Depends(get_current_user),
    store: BlobStore = Depends(get_verification_store),
):
    """Serve a verification document to its owner or an admin"""
    content_type, data = VerificationService.get_document(store, path, current_user)
    return Response(content=data, media_type=content_type, headers={"Cache-Control": "private, no-store"})

@router.delete("/my-data")
def delete_my_data(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    VerificationService.delete_my_data(db, current_user)

# Legacy Endpoints
@legacy_router.get("", response_model=LegacyVerificationStatus)
def get_legacy_verification(current_user: User = Depends(get_current_user)):
    return current_user

@legacy_router.post("")
def submit_legacy_verification(
    request: LegacyVerificationRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Store ID, license and plate on the profile"""
    VerificationService.legacy_submit(db, current_user, request)
    return {
        "success": True,
        "message": "Details saved. Complete the verification workflow to get approved for posting trips.",
    }

# Admin Endpoints
@admin_router.get("", response_model=List[AdminSubmission])
def admin_list_submissions(
    status: Optional[SubmissionStatus] = Query(None),
    search: Optional[str] = Query(None, description="Name, phone or plate"),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return VerificationService.admin_list(db, status=status, search=search)

@admin_router.get("/{submission_id}", response_model=AdminSubmissionDetail)
def admin_get_submission(
    submission_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return VerificationService.admin_get(db, submission_id)

@admin_router.post("/{submission_id}/start-review", response_model=AdminSubmission)
def start_review(
    submission_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return VerificationService.start_review(db, submission_id, admin)

@admin_router.post("/{submission_id}/review", response_model=AdminSubmission)
def review_submission(
    submission_id: int,
    request: ReviewRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Approve, reject or request changes"""
    return VerificationService.review(db, submission_id, admin, request)
