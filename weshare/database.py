from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from weshare.config import settings

connect_args = {}
if settings.database_url.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(settings.database_url, pool_pre_ping=True, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """Request-scoped database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
