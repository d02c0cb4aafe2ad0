from sqlalchemy import Column, Integer, BigInteger, String, Boolean, DateTime, Date, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from weshare.database import Base

# SQLite only autoincrements INTEGER PRIMARY KEY
Id = BigInteger().with_variant(Integer, "sqlite")

# ================================
# Users
# ================================
class User(Base):
    __tablename__ = "users"

    id = Column(Id, primary_key=True, index=True)
    phone = Column(String(20), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="PASSENGER", index=True)
    phone_verified = Column(Boolean, default=False)
    profile_image_url = Column(String(500))

    # Pre-workflow verification fields, mirrored on approval
    driver_verified = Column(Boolean, default=False)
    national_id = Column(String(20))
    driving_license_number = Column(String(20))
    license_plate = Column(String(15))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    trips = relationship("Trip", back_populates="driver")
    bookings = relationship("Booking", back_populates="passenger")
    bus_trips = relationship("BusTrip", back_populates="agency")
    ticket_bookings = relationship("TicketBooking", back_populates="passenger")
    verification_submissions = relationship(
        "DriverVerificationSubmission",
        back_populates="user",
        foreign_keys="DriverVerificationSubmission.user_id",
    )

# ================================
# Carpool Trips & Bookings
# ================================
class Trip(Base):
    __tablename__ = "trips"

    id = Column(Id, primary_key=True, index=True)
    driver_id = Column(BigInteger, ForeignKey("users.id"), nullable=False, index=True)
    depart_city = Column(String(100), nullable=False, index=True)
    depart_location = Column(String(255), nullable=False)
    destination_city = Column(String(100), nullable=False, index=True)
    destination_location = Column(String(255), nullable=False)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=False)
    available_seats = Column(Integer, nullable=False)
    price = Column(Integer, nullable=False)
    car_model = Column(String(100), nullable=False)
    status = Column(String(20), nullable=False, default="ACTIVE", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    driver = relationship("User", back_populates="trips")
    bookings = relationship("Booking", back_populates="trip", cascade="all, delete-orphan")

    @property
    def booked_seats(self) -> int:
        return sum(b.seats for b in self.bookings if b.status in ("PENDING", "CONFIRMED", "COMPLETED"))

    @property
    def remaining_seats(self) -> int:
        return max(self.available_seats - self.booked_seats, 0)

class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Id, primary_key=True, index=True)
    trip_id = Column(BigInteger, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(BigInteger, ForeignKey("users.id"), nullable=False, index=True)
    seats = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default="PENDING", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    trip = relationship("Trip", back_populates="bookings")
    passenger = relationship("User", back_populates="bookings")
    messages = relationship("Message", back_populates="booking", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="booking", cascade="all, delete-orphan")

# ================================
# Agency Bus Trips & Tickets
# ================================
class BusTrip(Base):
    __tablename__ = "bus_trips"

    id = Column(Id, primary_key=True, index=True)
    agency_id = Column(BigInteger, ForeignKey("users.id"), nullable=False, index=True)
    depart_city = Column(String(100), nullable=False, index=True)
    destination_city = Column(String(100), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=False)
    total_seats = Column(Integer, nullable=False)
    price = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="ACTIVE", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    agency = relationship("User", back_populates="bus_trips")
    ticket_bookings = relationship("TicketBooking", back_populates="bus_trip")

    @property
    def available_seats(self) -> int:
        held = sum(t.seats for t in self.ticket_bookings if t.status in ("CONFIRMED", "COMPLETED"))
        return max(self.total_seats - held, 0)

class TicketBooking(Base):
    __tablename__ = "ticket_bookings"

    id = Column(Id, primary_key=True, index=True)
    bus_trip_id = Column(BigInteger, ForeignKey("bus_trips.id"), nullable=False, index=True)
    user_id = Column(BigInteger, ForeignKey("users.id"), nullable=False, index=True)
    seats = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default="CONFIRMED", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    bus_trip = relationship("BusTrip", back_populates="ticket_bookings")
    passenger = relationship("User", back_populates="ticket_bookings")

# ================================
# Driver Verification
# ================================
class DriverVerificationSubmission(Base):
    __tablename__ = "driver_verification_submissions"
    __table_args__ = (
        UniqueConstraint("user_id", "version", name="uq_submission_user_version"),
    )

    id = Column(Id, primary_key=True, index=True)
    user_id = Column(BigInteger, ForeignKey("users.id"), nullable=False, index=True)
    version = Column(Integer, nullable=False)
    status = Column(String(30), nullable=False, default="DRAFT", index=True)

    # Personal
    full_name = Column(String(255))
    phone = Column(String(20))
    date_of_birth = Column(Date)
    national_id_number = Column(String(16))

    # Vehicle
    plate_number = Column(String(15))
    vehicle_make = Column(String(100))
    vehicle_model = Column(String(100))
    vehicle_color = Column(String(50))
    vehicle_seats = Column(Integer)

    # Expiry
    license_expiry = Column(Date)
    insurance_expiry = Column(Date)

    # Documents (blob store paths)
    national_id_front = Column(String(500))
    national_id_back = Column(String(500))
    license_front = Column(String(500))
    license_back = Column(String(500))
    yellow_card_path = Column(String(500))
    insurance_path = Column(String(500))
    vehicle_photo_front = Column(String(500))
    vehicle_photo_rear = Column(String(500))
    vehicle_photo_side = Column(String(500))

    # Review
    rejection_reason = Column(Text)
    reviewed_by = Column(BigInteger, ForeignKey("users.id"))
    reviewed_at = Column(DateTime(timezone=True))
    submitted_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="verification_submissions", foreign_keys=[user_id])
    reviewer = relationship("User", foreign_keys=[reviewed_by])
    audits = relationship(
        "VerificationAuditLog",
        back_populates="submission",
        order_by="VerificationAuditLog.id.desc()",
    )

class VerificationAuditLog(Base):
    __tablename__ = "verification_audit_logs"

    id = Column(Id, primary_key=True, index=True)
    submission_id = Column(BigInteger, ForeignKey("driver_verification_submissions.id"), nullable=False, index=True)
    admin_id = Column(BigInteger, ForeignKey("users.id"), nullable=False, index=True)
    action = Column(String(30), nullable=False, index=True)
    reason = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # Relationships
    submission = relationship("DriverVerificationSubmission", back_populates="audits")

# ================================
# Messaging
# ================================
class Message(Base):
    __tablename__ = "messages"

    id = Column(Id, primary_key=True, index=True)
    booking_id = Column(BigInteger, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(BigInteger, ForeignKey("users.id"), nullable=False)
    receiver_id = Column(BigInteger, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    read = Column(Boolean, default=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    booking = relationship("Booking", back_populates="messages")
    sender = relationship("User", foreign_keys=[sender_id])
    receiver = relationship("User", foreign_keys=[receiver_id])

# ================================
# Payments
# ================================
class Payment(Base):
    __tablename__ = "payments"

    id = Column(Id, primary_key=True, index=True)
    booking_id = Column(BigInteger, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(BigInteger, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    method = Column(String(30), nullable=False)
    status = Column(String(20), nullable=False, default="PENDING", index=True)
    transaction_id = Column(String(100), unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    booking = relationship("Booking", back_populates="payments")
