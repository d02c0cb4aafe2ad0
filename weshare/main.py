import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from weshare.config import settings
from weshare.exceptions import register_exception_handlers
from weshare.auth.router import router as auth_router, profile_router
from weshare.trips.router import router as trips_router
from weshare.bookings.router import router as bookings_router
from weshare.bus_trips.router import router as bus_trips_router, tickets_router
from weshare.verification.router import (
    router as verification_router,
    legacy_router as driver_verification_router,
    admin_router as admin_verification_router,
)
from weshare.messages.router import router as messages_router
from weshare.payments.router import router as payments_router
from weshare.notifications.router import router as notifications_router
from weshare.admin.router import router as admin_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="WeShare Rwanda carpooling and bus ticketing API",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(auth_router, prefix=f"{settings.API_V1_STR}/auth", tags=["Authentication"])
app.include_router(profile_router, prefix=f"{settings.API_V1_STR}/profile", tags=["Profile"])
app.include_router(trips_router, prefix=f"{settings.API_V1_STR}/trips", tags=["Trips"])
app.include_router(bookings_router, prefix=f"{settings.API_V1_STR}/bookings", tags=["Bookings"])
app.include_router(bus_trips_router, prefix=f"{settings.API_V1_STR}/bus-trips", tags=["Bus Trips"])
app.include_router(tickets_router, prefix=f"{settings.API_V1_STR}/ticket-bookings", tags=["Bus Tickets"])
app.include_router(verification_router, prefix=f"{settings.API_V1_STR}/verification", tags=["Driver Verification"])
app.include_router(
    driver_verification_router,
    prefix=f"{settings.API_V1_STR}/driver/verification",
    tags=["Driver Verification"]
)
app.include_router(
    admin_verification_router,
    prefix=f"{settings.API_V1_STR}/admin/verification",
    tags=["Admin Verification"]
)
app.include_router(messages_router, prefix=f"{settings.API_V1_STR}/messages", tags=["Messages"])
app.include_router(payments_router, prefix=f"{settings.API_V1_STR}/payments", tags=["Payments"])
app.include_router(notifications_router, prefix=f"{settings.API_V1_STR}/notifications", tags=["Notifications"])
app.include_router(admin_router, prefix=f"{settings.API_V1_STR}/admin", tags=["Admin System"])

@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "WeShare Rwanda API",
        "version": "1.0.0",
        "docs": "/docs"
    }

@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
