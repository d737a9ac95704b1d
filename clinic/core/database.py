from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Generator
from pymongo import MongoClient
import redis

from .config import settings
from .documents import PrescriptionStore

def _create_engine(url: str):
    if url.startswith("sqlite"):
        # One shared connection for in-memory databases
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    # PostgreSQL connection pool settings
    return create_engine(
        url,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,  # Recycle connections after 30 minutes
    )

engine = _create_engine(settings.get_database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# Clients connect lazily on first use
redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)
mongo_client = MongoClient(settings.MONGO_URI, connect=False)

# Database dependency
def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# Redis dependency
def get_redis():
    """Get Redis client."""
    return redis_client

# Document store dependency
def get_prescription_store() -> PrescriptionStore:
    """Get the prescription document store."""
    return PrescriptionStore(mongo_client[settings.MONGO_DB]["prescriptions"])

# Database initialization
def init_db():
    """Initialize database tables."""
    from .. import models  # noqa: F401  register mappers
    Base.metadata.create_all(bind=engine)
