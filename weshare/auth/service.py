import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional, Tuple

from weshare.models import User
from weshare.auth.schemas import PhoneLoginRequest, SignupRequest, UserRole
from weshare.exceptions import Conflict, NotFound, ValidationError
from weshare.storage import BlobStore, IMAGE_TYPES, profile_image_key, validate_upload
from weshare.utils import is_valid_phone_number, normalize_phone_number

logger = logging.getLogger(__name__)

class UserService:
    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
        """Get user by ID"""
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_user_by_phone(db: Session, phone: str) -> Optional[User]:
        """Get user by phone, accepting any local or international format"""
        return db.query(User).filter(User.phone == normalize_phone_number(phone)).first()

    @staticmethod
    def normalize_and_validate_phone(phone: str) -> str:
        normalized = normalize_phone_number(phone)
        if not is_valid_phone_number(normalized):
            raise ValidationError(
                "Invalid Rwandan phone number. Use format +250XXXXXXXXX or 07XXXXXXXX",
                details=[{"field": "phone", "message": "Invalid Rwandan phone number"}],
            )
        return normalized

    @staticmethod
    def create_user(db: Session, phone: str, name: str, role: UserRole = UserRole.PASSENGER) -> User:
        """Create a new user with an already-normalised phone"""
        db_user = User(
            phone=phone,
            name=name.strip(),
            role=role.value,
            phone_verified=True,  # OTP delivery is not wired up yet
        )
        try:
            db.add(db_user)
            db.commit()
            db.refresh(db_user)
        except IntegrityError:
            db.rollback()
            raise Conflict("An account with this phone number already exists. Please login instead.")
        logger.info("Created user %s with role %s", db_user.id, db_user.role)
        return db_user

    @staticmethod
    def signup(db: Session, request: SignupRequest) -> User:
        """Register a new phone number"""
        phone = UserService.normalize_and_validate_phone(request.phone)
        if UserService.get_user_by_phone(db, phone):
            raise Conflict("An account with this phone number already exists. Please login instead.")
        return UserService.create_user(db, phone, request.name)

    @staticmethod
    def login(db: Session, request: PhoneLoginRequest) -> Tuple[User, bool]:
        """Find the user for a phone number, creating a passenger account on first login"""
        phone = UserService.normalize_and_validate_phone(request.phone)
        user = UserService.get_user_by_phone(db, phone)
        if user:
            if not user.phone_verified:
                user.phone_verified = True
                db.commit()
                db.refresh(user)
            return user, False
        return UserService.create_user(db, phone, request.name), True

    @staticmethod
    def save_profile_image(db: Session, store: BlobStore, user: User, content_type: str, data: bytes) -> str:
        """Validate and store a profile picture, returning its path"""
        extension = validate_upload(content_type, len(data), IMAGE_TYPES)
        path = store.save(profile_image_key(user.id, extension), data)
        user.profile_image_url = path
        db.commit()
        return path

    @staticmethod
    def read_profile_image(db: Session, store: BlobStore, user_id: int) -> Tuple[str, bytes]:
        user = UserService.get_user_by_id(db, user_id)
        if not user or not user.profile_image_url:
            raise NotFound("No profile image")
        if not store.exists(user.profile_image_url):
            raise NotFound("File not found")
        return user.profile_image_url, store.read(user.profile_image_url)
