from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.orm import Session
from weshare.database import get_db
from weshare.auth.schemas import (
    AuthResponse, PhoneLoginRequest, Profile, ProfileImageResponse, SignupRequest, User as UserSchema
)
from weshare.auth.service import UserService
from weshare.auth.utils import create_access_token
from weshare.auth.dependencies import get_current_user
from weshare.models import User
from weshare.storage import BlobStore, content_type_for, get_profile_store
from weshare.verification.service import VerificationService

router = APIRouter()
profile_router = APIRouter()

OTP_NOTICE = "In the future, an OTP will be sent to this phone number for verification"

def _auth_response(user: User) -> dict:
    access_token = create_access_token(data={"sub": str(user.id), "role": user.role})
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": user,
        "message": OTP_NOTICE,
    }

@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(request: SignupRequest, db: Session = Depends(get_db)):
    """Register a new phone number"""
    user = UserService.signup(db, request)
    return _auth_response(user)

@router.post("/login", response_model=AuthResponse)
def login(request: PhoneLoginRequest, db: Session = Depends(get_db)):
    """Log in with a phone number, creating the account on first use"""
    user, _created = UserService.login(db, request)
    return _auth_response(user)

@router.get("/me", response_model=UserSchema)
def read_users_me(current_user: User = Depends(get_current_user)):
    """Get current user"""
    return current_user

# Profile Endpoints
@profile_router.get("", response_model=Profile)
def get_profile(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Current user profile with verification status"""
    return Profile(
        id=current_user.id,
        phone=current_user.phone,
        name=current_user.name,
        role=current_user.role,
        phone_verified=current_user.phone_verified,
        driver_verified=current_user.driver_verified,
        created_at=current_user.created_at,
        profile_image_url=current_user.profile_image_url,
        is_verified=VerificationService.is_user_approved(db, current_user),
    )

@profile_router.post("/image", response_model=ProfileImageResponse)
async def upload_profile_image(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_profile_store),
):
    """Upload a profile picture (JPEG, PNG or WebP, max 5MB)"""
    data = await file.read()
    path = UserService.save_profile_image(db, store, current_user, file.content_type or "", data)
    return ProfileImageResponse(profile_image_url=path)

@profile_router.get("/image/{user_id}")
def get_profile_image(
    user_id: int,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_profile_store),
):
    """Serve a user's profile picture"""
    path, data = UserService.read_profile_image(db, store, user_id)
    return Response(
        content=data,
        media_type=content_type_for(path),
        headers={"Cache-Control": "public, max-age=60"},
    )
