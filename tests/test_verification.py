from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from weshare.exceptions import Conflict, Forbidden, NotFound, NotImplementedYet, ValidationError
from weshare.models import VerificationAuditLog
from weshare.verification.schemas import DOCUMENT_COLUMNS, DocumentType, ReviewAction, ReviewRequest
from weshare.verification.service import VerificationService
from weshare.verification.state_machine import TRANSITIONS, can_transition
from weshare.verification.schemas import SubmissionStatus

PNG = b"\x89PNG\r\n\x1a\n" + b"0" * 64

PERSONAL = {
    "full_name": "Jean Bosco",
    "phone": "0788123456",
    "date_of_birth": "1990-04-12",
    "national_id_number": "1199080012345678",
}

VEHICLE = {
    "plate_number": "rab 123 a",
    "vehicle_make": "Toyota",
    "vehicle_model": "Corolla",
    "vehicle_color": "White",
    "vehicle_seats": 4,
}


@pytest.fixture
def driver(make_user):
    return make_user(name="Jean Bosco", role="DRIVER")


@pytest.fixture
def admin(make_user):
    return make_user(name="Reviewer", role="ADMIN")


@pytest.fixture
def complete_draft(db, driver, verification_store):
    """A draft with every field and document filled in"""
    def _complete_draft(skip=()):
        submission = VerificationService.create_draft(db, driver)
        VerificationService.save_step(db, submission.id, driver, "personal", PERSONAL)
        VerificationService.save_step(db, submission.id, driver, "vehicle", VEHICLE)
        for doc_type in DocumentType:
            if doc_type in skip or doc_type == DocumentType.VEHICLE_PHOTO_SIDE:
                continue
            VerificationService.upload_document(
                db, verification_store, submission.id, driver, doc_type.value, "image/png", PNG
            )
        return submission
    return _complete_draft


def audit_count(db, submission_id):
    return db.query(VerificationAuditLog).filter(VerificationAuditLog.submission_id == submission_id).count()


class TestStateMachine:
    def test_terminal_states_have_no_exits(self):
        assert TRANSITIONS[SubmissionStatus.APPROVED] == frozenset()
        assert TRANSITIONS[SubmissionStatus.REJECTED] == frozenset()

    def test_draft_only_submits(self):
        assert can_transition(SubmissionStatus.DRAFT, SubmissionStatus.SUBMITTED)
        assert not can_transition(SubmissionStatus.DRAFT, SubmissionStatus.APPROVED)
        assert not can_transition(SubmissionStatus.IN_REVIEW, SubmissionStatus.SUBMITTED)


class TestDrafts:
    def test_first_draft_is_prefilled(self, db, driver):
        submission = VerificationService.create_draft(db, driver)
        assert submission.version == 1
        assert submission.status == "DRAFT"
        assert submission.full_name == driver.name
        assert submission.phone == driver.phone

    def test_open_draft_is_returned(self, db, driver):
        first = VerificationService.create_draft(db, driver)
        again = VerificationService.create_draft(db, driver)
        assert again.id == first.id
        assert again.version == 1

    def test_no_new_draft_while_awaiting_review(self, db, driver, complete_draft):
        submission = complete_draft()
        VerificationService.submit(db, submission.id, driver)
        with pytest.raises(Conflict):
            VerificationService.create_draft(db, driver)

    def test_changes_requested_opens_next_version(self, db, driver, admin, complete_draft):
        submission = complete_draft()
        VerificationService.submit(db, submission.id, driver)
        VerificationService.review(
            db, submission.id, admin, ReviewRequest(action=ReviewAction.CHANGES_REQUESTED, reason="Blurry ID")
        )
        draft = VerificationService.create_draft(db, driver)
        assert draft.id != submission.id
        assert draft.version == 2
        db.refresh(submission)
        assert submission.status == "CHANGES_REQUESTED"


class TestSteps:
    def test_personal_step_normalises_phone(self, db, driver):
        submission = VerificationService.create_draft(db, driver)
        saved = VerificationService.save_step(db, submission.id, driver, "personal", PERSONAL)
        assert saved.phone == "+250788123456"
        assert saved.date_of_birth == date(1990, 4, 12)
        assert saved.plate_number is None

    def test_vehicle_step_uppercases_plate(self, db, driver):
        submission = VerificationService.create_draft(db, driver)
        saved = VerificationService.save_step(db, submission.id, driver, "vehicle", VEHICLE)
        assert saved.plate_number == "RAB 123 A"

    def test_expiry_step_is_optional(self, db, driver):
        submission = VerificationService.create_draft(db, driver)
        saved = VerificationService.save_step(db, submission.id, driver, "expiry", {"license_expiry": "2030-01-01"})
        assert saved.license_expiry == date(2030, 1, 1)
        assert saved.insurance_expiry is None

    def test_bad_national_id(self, db, driver):
        submission = VerificationService.create_draft(db, driver)
        with pytest.raises(ValidationError) as exc:
            VerificationService.save_step(
                db, submission.id, driver, "personal", dict(PERSONAL, national_id_number="12AB")
            )
        assert exc.value.details[0]["field"] == "national_id_number"

    def test_unknown_step(self, db, driver):
        submission = VerificationService.create_draft(db, driver)
        with pytest.raises(ValidationError):
            VerificationService.save_step(db, submission.id, driver, "banking", {})

    def test_other_users_draft(self, db, driver, make_user):
        submission = VerificationService.create_draft(db, driver)
        with pytest.raises(Forbidden):
            VerificationService.save_step(db, submission.id, make_user(), "vehicle", VEHICLE)


class TestDocuments:
    def test_upload_records_path(self, db, driver, verification_store):
        submission = VerificationService.create_draft(db, driver)
        path = VerificationService.upload_document(
            db, verification_store, submission.id, driver, "licenseBack", "image/jpeg", PNG
        )
        assert path.startswith(f"{driver.id}/{submission.id}/licenseBack-")
        assert path.endswith(".jpg")
        db.refresh(submission)
        assert submission.license_back == path
        assert verification_store.read(path) == PNG

    def test_failed_commit_removes_stored_file(self, db, driver, verification_store, monkeypatch, caplog):
        submission = VerificationService.create_draft(db, driver)

        def failing_commit():
            raise OperationalError("UPDATE", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "commit", failing_commit)
        with pytest.raises(OperationalError):
            VerificationService.upload_document(
                db, verification_store, submission.id, driver, "licenseFront", "image/png", PNG
            )
        monkeypatch.undo()

        assert list(verification_store.root.rglob("licenseFront-*")) == []
        assert submission.license_front is None
        assert "removed the stored file" in caplog.text

    def test_pdf_only_for_yellow_card_and_insurance(self, db, driver, verification_store):
        submission = VerificationService.create_draft(db, driver)
        path = VerificationService.upload_document(
            db, verification_store, submission.id, driver, "insurance", "application/pdf", b"%PDF-1.4"
        )
        assert path.endswith(".pdf")
        with pytest.raises(ValidationError):
            VerificationService.upload_document(
                db, verification_store, submission.id, driver, "licenseFront", "application/pdf", b"%PDF-1.4"
            )

    def test_size_limit(self, db, driver, verification_store):
        submission = VerificationService.create_draft(db, driver)
        with pytest.raises(ValidationError) as exc:
            VerificationService.upload_document(
                db, verification_store, submission.id, driver, "licenseFront", "image/png",
                b"0" * (5 * 1024 * 1024 + 1),
            )
        assert "too large" in exc.value.message

    def test_owner_and_admin_can_read(self, db, driver, admin, verification_store):
        submission = VerificationService.create_draft(db, driver)
        path = VerificationService.upload_document(
            db, verification_store, submission.id, driver, "nationalIdFront", "image/png", PNG
        )
        assert VerificationService.get_document(verification_store, path, driver) == ("image/png", PNG)
        assert VerificationService.get_document(verification_store, path, admin)[1] == PNG

    def test_other_users_cannot_read(self, db, driver, make_user, verification_store):
        submission = VerificationService.create_draft(db, driver)
        path = VerificationService.upload_document(
            db, verification_store, submission.id, driver, "nationalIdFront", "image/png", PNG
        )
        with pytest.raises(Forbidden):
            VerificationService.get_document(verification_store, path, make_user())

    @pytest.mark.parametrize("path", ["../etc/passwd", "/1/2/file.png", "1/../2/file.png", "1/file.png", ""])
    def test_rejects_bad_paths(self, driver, verification_store, path):
        with pytest.raises(ValidationError):
            VerificationService.get_document(verification_store, path, driver)

    def test_missing_file(self, driver, verification_store):
        with pytest.raises(NotFound):
            VerificationService.get_document(verification_store, f"{driver.id}/1/nothing.png", driver)


class TestSubmit:
    def test_submit_lists_missing_fields(self, db, driver, complete_draft):
        submission = complete_draft(skip=(DocumentType.LICENSE_BACK,))
        with pytest.raises(ValidationError) as exc:
            VerificationService.submit(db, submission.id, driver)
        assert "licenseBack" in exc.value.message
        assert [d["field"] for d in exc.value.details] == ["licenseBack"]
        db.refresh(submission)
        assert submission.status == "DRAFT"
        assert audit_count(db, submission.id) == 0

    def test_submit_writes_one_audit_row(self, db, driver, complete_draft):
        submission = complete_draft()
        submitted = VerificationService.submit(db, submission.id, driver)
        assert submitted.status == "SUBMITTED"
        assert submitted.submitted_at is not None
        audits = db.query(VerificationAuditLog).filter_by(submission_id=submission.id).all()
        assert [(a.action, a.admin_id) for a in audits] == [("SUBMITTED", driver.id)]

    def test_submit_twice_is_conflict(self, db, driver, complete_draft):
        submission = complete_draft()
        VerificationService.submit(db, submission.id, driver)
        with pytest.raises(Conflict):
            VerificationService.submit(db, submission.id, driver)

    def test_no_edits_after_submit(self, db, driver, complete_draft):
        submission = complete_draft()
        VerificationService.submit(db, submission.id, driver)
        with pytest.raises(Conflict):
            VerificationService.save_step(db, submission.id, driver, "vehicle", VEHICLE)


class TestReview:
    @pytest.fixture
    def submitted(self, db, driver, complete_draft):
        submission = complete_draft()
        return VerificationService.submit(db, submission.id, driver)

    def test_start_review(self, db, admin, submitted):
        before = audit_count(db, submitted.id)
        in_review = VerificationService.start_review(db, submitted.id, admin)
        assert in_review.status == "IN_REVIEW"
        assert audit_count(db, submitted.id) == before + 1

    def test_start_review_only_from_submitted(self, db, admin, submitted):
        VerificationService.start_review(db, submitted.id, admin)
        with pytest.raises(Conflict):
            VerificationService.start_review(db, submitted.id, admin)

    @pytest.mark.parametrize("action", [ReviewAction.REJECT, ReviewAction.CHANGES_REQUESTED])
    def test_reason_required(self, db, admin, submitted, action):
        with pytest.raises(ValidationError):
            VerificationService.review(db, submitted.id, admin, ReviewRequest(action=action, reason="  "))
        assert audit_count(db, submitted.id) == 1

    def test_approve_sets_legacy_fields(self, db, driver, admin, submitted):
        approved = VerificationService.review(db, submitted.id, admin, ReviewRequest(action=ReviewAction.APPROVE))
        assert approved.status == "APPROVED"
        assert approved.reviewed_by == admin.id
        assert approved.rejection_reason is None

        db.refresh(driver)
        assert driver.driver_verified is True
        assert driver.national_id == PERSONAL["national_id_number"]
        assert driver.license_plate == "RAB 123 A"
        assert driver.driving_license_number == "verified"
        assert VerificationService.is_user_approved(db, driver)

    def test_approve_promotes_passenger(self, db, make_user, admin, verification_store):
        passenger = make_user(role="PASSENGER")
        submission = VerificationService.create_draft(db, passenger)
        VerificationService.save_step(db, submission.id, passenger, "personal", PERSONAL)
        VerificationService.save_step(db, submission.id, passenger, "vehicle", VEHICLE)
        for doc_type in DOCUMENT_COLUMNS:
            VerificationService.upload_document(
                db, verification_store, submission.id, passenger, doc_type.value, "image/png", PNG
            )
        VerificationService.submit(db, submission.id, passenger)
        VerificationService.review(db, submission.id, admin, ReviewRequest(action=ReviewAction.APPROVE))
        db.refresh(passenger)
        assert passenger.role == "DRIVER"

    def test_reject_keeps_reason(self, db, driver, admin, submitted):
        rejected = VerificationService.review(
            db, submitted.id, admin, ReviewRequest(action=ReviewAction.REJECT, reason="Expired license")
        )
        assert rejected.rejection_reason == "Expired license"
        status = VerificationService.get_status(db, driver)
        assert status.status == "REJECTED"
        assert status.is_approved is False
        assert status.rejection_reason == "Expired license"

    def test_every_transition_is_audited(self, db, driver, admin, submitted):
        VerificationService.start_review(db, submitted.id, admin)
        VerificationService.review(
            db, submitted.id, admin, ReviewRequest(action=ReviewAction.CHANGES_REQUESTED, reason="Photo unclear")
        )
        VerificationService.review(db, submitted.id, admin, ReviewRequest(action=ReviewAction.APPROVE))
        detail = VerificationService.get_my_submission(db, submitted.id, driver)
        assert [a.action for a in detail.audits] == ["APPROVED", "CHANGES_REQUESTED", "IN_REVIEW", "SUBMITTED"]

    def test_terminal_state_cannot_be_reviewed(self, db, admin, submitted):
        VerificationService.review(db, submitted.id, admin, ReviewRequest(action=ReviewAction.APPROVE))
        with pytest.raises(Conflict):
            VerificationService.review(db, submitted.id, admin, ReviewRequest(action=ReviewAction.REJECT, reason="x"))
        assert audit_count(db, submitted.id) == 2

    def test_draft_cannot_be_reviewed(self, db, driver, admin):
        draft = VerificationService.create_draft(db, driver)
        with pytest.raises(Conflict):
            VerificationService.review(db, draft.id, admin, ReviewRequest(action=ReviewAction.APPROVE))

    def test_admin_search(self, db, admin, submitted):
        assert [s.id for s in VerificationService.admin_list(db, search="rab 123")] == [submitted.id]
        assert VerificationService.admin_list(db, status=SubmissionStatus.APPROVED) == []


class TestVerificationApi:
    def test_driver_flow(self, client, db, driver, admin, auth_headers):
        headers = auth_headers(driver)
        created = client.post("/api/v1/verification/submissions", headers=headers)
        assert created.status_code == 201
        submission_id = created.json()["id"]

        response = client.put(
            f"/api/v1/verification/submissions/{submission_id}/steps/personal", json=PERSONAL, headers=headers
        )
        assert response.status_code == 200

        upload = client.post(
            f"/api/v1/verification/submissions/{submission_id}/documents",
            data={"documentType": "licenseFront"},
            files={"file": ("front.png", PNG, "image/png")},
            headers=headers,
        )
        assert upload.status_code == 200
        path = upload.json()["path"]

        document = client.get("/api/v1/verification/documents", params={"path": path}, headers=headers)
        assert document.status_code == 200
        assert document.headers["content-type"] == "image/png"
        assert document.content == PNG

        incomplete = client.post(f"/api/v1/verification/submissions/{submission_id}/submit", headers=headers)
        assert incomplete.status_code == 400
        assert "licenseBack" in incomplete.json()["error"]

        status = client.get("/api/v1/verification/status", headers=headers).json()
        assert status == {
            "status": "DRAFT",
            "is_approved": False,
            "submission_id": submission_id,
            "rejection_reason": None,
        }

    def test_admin_endpoints_require_admin(self, client, driver, auth_headers):
        response = client.get("/api/v1/admin/verification", headers=auth_headers(driver))
        assert response.status_code == 403
        assert response.json()["kind"] == "forbidden"

    def test_admin_review_endpoint(self, client, db, driver, admin, complete_draft, auth_headers):
        submission = complete_draft()
        VerificationService.submit(db, submission.id, driver)

        missing_reason = client.post(
            f"/api/v1/admin/verification/{submission.id}/review",
            json={"action": "REJECT"},
            headers=auth_headers(admin),
        )
        assert missing_reason.status_code == 400

        approved = client.post(
            f"/api/v1/admin/verification/{submission.id}/review",
            json={"action": "APPROVE"},
            headers=auth_headers(admin),
        )
        assert approved.status_code == 200
        assert approved.json()["status"] == "APPROVED"
        assert approved.json()["user"]["id"] == driver.id

        detail = client.get(f"/api/v1/admin/verification/{submission.id}", headers=auth_headers(admin)).json()
        assert [a["action"] for a in detail["audits"]] == ["APPROVED", "SUBMITTED"]

    def test_delete_my_data_not_implemented(self, client, driver, auth_headers):
        response = client.delete("/api/v1/verification/my-data", headers=auth_headers(driver))
        assert response.status_code == 501
        assert response.json()["kind"] == "not_implemented"

    def test_delete_my_data_service_raises(self, db, driver):
        with pytest.raises(NotImplementedYet):
            VerificationService.delete_my_data(db, driver)

    def test_legacy_form_does_not_verify(self, client, db, driver, auth_headers):
        response = client.post(
            "/api/v1/driver/verification",
            json={"national_id": "1199080012345678", "driving_license_number": "DL-12345", "license_plate": "rac 456 b"},
            headers=auth_headers(driver),
        )
        assert response.status_code == 200
        legacy = client.get("/api/v1/driver/verification", headers=auth_headers(driver)).json()
        assert legacy["driver_verified"] is False
        assert legacy["license_plate"] == "RAC 456 B"
