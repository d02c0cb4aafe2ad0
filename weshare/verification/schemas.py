from pydantic import BaseModel, Field, validator
from typing import Dict, FrozenSet, List, Optional
from datetime import date, datetime
from enum import Enum
import re

from weshare.auth.schemas import UserSummary

class SubmissionStatus(str, Enum):
    """Lifecycle of a driver verification submission"""
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    IN_REVIEW = "IN_REVIEW"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

class ReviewAction(str, Enum):
    """Decision an admin can take on a submission"""
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"

class AuditAction(str, Enum):
    """Action recorded in the verification audit trail"""
    SUBMITTED = "SUBMITTED"
    IN_REVIEW = "IN_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"

class VerificationStep(str, Enum):
    PERSONAL = "personal"
    VEHICLE = "vehicle"
    EXPIRY = "expiry"

class DocumentType(str, Enum):
    NATIONAL_ID_FRONT = "nationalIdFront"
    NATIONAL_ID_BACK = "nationalIdBack"
    LICENSE_FRONT = "licenseFront"
    LICENSE_BACK = "licenseBack"
    YELLOW_CARD = "yellowCard"
    INSURANCE = "insurance"
    VEHICLE_PHOTO_FRONT = "vehiclePhotoFront"
    VEHICLE_PHOTO_REAR = "vehiclePhotoRear"
    VEHICLE_PHOTO_SIDE = "vehiclePhotoSide"

# Submission column that stores each uploaded document's path
DOCUMENT_COLUMNS: Dict[DocumentType, str] = {
    DocumentType.NATIONAL_ID_FRONT: "national_id_front",
    DocumentType.NATIONAL_ID_BACK: "national_id_back",
    DocumentType.LICENSE_FRONT: "license_front",
    DocumentType.LICENSE_BACK: "license_back",
    DocumentType.YELLOW_CARD: "yellow_card_path",
    DocumentType.INSURANCE: "insurance_path",
    DocumentType.VEHICLE_PHOTO_FRONT: "vehicle_photo_front",
    DocumentType.VEHICLE_PHOTO_REAR: "vehicle_photo_rear",
    DocumentType.VEHICLE_PHOTO_SIDE: "vehicle_photo_side",
}

# Documents that may also be uploaded as PDF
PDF_DOCUMENTS: FrozenSet[DocumentType] = frozenset({DocumentType.YELLOW_CARD, DocumentType.INSURANCE})

# Every field that must be filled before a draft can be submitted.
# The side vehicle photo is optional.
REQUIRED_FIELDS: Dict[str, str] = {
    "full_name": "fullName",
    "phone": "phone",
    "date_of_birth": "dateOfBirth",
    "national_id_number": "nationalIdNumber",
    "national_id_front": "nationalIdFront",
    "national_id_back": "nationalIdBack",
    "license_front": "licenseFront",
    "license_back": "licenseBack",
    "plate_number": "plateNumber",
    "vehicle_make": "vehicleMake",
    "vehicle_model": "vehicleModel",
    "vehicle_color": "vehicleColor",
    "vehicle_seats": "vehicleSeats",
    "yellow_card_path": "yellowCardPath",
    "insurance_path": "insurancePath",
    "vehicle_photo_front": "vehiclePhotoFront",
    "vehicle_photo_rear": "vehiclePhotoRear",
}

NATIONAL_ID_PATTERN = re.compile(r"^\d{14,16}$")
PLATE_PATTERN = re.compile(r"^[A-Za-z0-9\s]+$")
LICENSE_PATTERN = re.compile(r"^[A-Za-z0-9\-/]+$")

def _check_national_id(v: str) -> str:
    v = v.strip()
    if not NATIONAL_ID_PATTERN.match(v):
        raise ValueError('National ID must be 14-16 digits only')
    return v

def _check_plate(v: str) -> str:
    v = v.strip()
    if len(v) < 5 or len(v) > 15:
        raise ValueError('License plate must be 5-15 characters')
    if not PLATE_PATTERN.match(v):
        raise ValueError('License plate can only contain letters, numbers, and spaces (e.g. RAB 123 A)')
    return v.upper()

# Step payloads
class PersonalInfoStep(BaseModel):
    full_name: str = Field(..., min_length=2, max_length=255)
    phone: str = Field(..., min_length=10)
    date_of_birth: date
    national_id_number: str

    @validator('national_id_number')
    def validate_national_id(cls, v):
        return _check_national_id(v)

class VehicleInfoStep(BaseModel):
    plate_number: str
    vehicle_make: str = Field(..., min_length=2, max_length=100)
    vehicle_model: str = Field(..., min_length=2, max_length=100)
    vehicle_color: str = Field(..., min_length=2, max_length=50)
    vehicle_seats: int = Field(..., ge=1, le=20)

    @validator('plate_number')
    def validate_plate(cls, v):
        return _check_plate(v)

class ExpiryStep(BaseModel):
    license_expiry: Optional[date] = None
    insurance_expiry: Optional[date] = None

STEP_SCHEMAS = {
    VerificationStep.PERSONAL: PersonalInfoStep,
    VerificationStep.VEHICLE: VehicleInfoStep,
    VerificationStep.EXPIRY: ExpiryStep,
}

class LegacyVerificationRequest(BaseModel):
    """Single-form driver details kept for pre-workflow clients"""
    national_id: str
    driving_license_number: str = Field(..., min_length=5, max_length=20)
    license_plate: str

    @validator('national_id')
    def validate_national_id(cls, v):
        return _check_national_id(v)

    @validator('license_plate')
    def validate_plate(cls, v):
        return _check_plate(v)

    @validator('driving_license_number')
    def validate_license(cls, v):
        v = v.strip()
        if not LICENSE_PATTERN.match(v):
            raise ValueError('Driving license can only contain letters, numbers, hyphens, and slashes')
        return v

# Requests
class ReviewRequest(BaseModel):
    action: ReviewAction
    reason: Optional[str] = None

# Responses
class AuditEntry(BaseModel):
    id: int
    submission_id: int
    admin_id: int
    action: AuditAction
    reason: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class Submission(BaseModel):
    id: int
    user_id: int
    version: int
    status: SubmissionStatus
    full_name: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    national_id_number: Optional[str] = None
    plate_number: Optional[str] = None
    vehicle_make: Optional[str] = None
    vehicle_model: Optional[str] = None
    vehicle_color: Optional[str] = None
    vehicle_seats: Optional[int] = None
    license_expiry: Optional[date] = None
    insurance_expiry: Optional[date] = None
    national_id_front: Optional[str] = None
    national_id_back: Optional[str] = None
    license_front: Optional[str] = None
    license_back: Optional[str] = None
    yellow_card_path: Optional[str] = None
    insurance_path: Optional[str] = None
    vehicle_photo_front: Optional[str] = None
    vehicle_photo_rear: Optional[str] = None
    vehicle_photo_side: Optional[str] = None
    rejection_reason: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class SubmissionDetail(Submission):
    audits: List[AuditEntry] = []

class AdminSubmission(Submission):
    user: Optional[UserSummary] = None

class AdminSubmissionDetail(AdminSubmission):
    audits: List[AuditEntry] = []

class VerificationStatus(BaseModel):
    status: Optional[SubmissionStatus] = None
    is_approved: bool
    submission_id: Optional[int] = None
    rejection_reason: Optional[str] = None

class UploadResponse(BaseModel):
    success: bool = True
    path: str

class LegacyVerificationStatus(BaseModel):
    driver_verified: bool
    national_id: Optional[str] = None
    driving_license_number: Optional[str] = None
    license_plate: Optional[str] = None

    class Config:
        from_attributes = True
