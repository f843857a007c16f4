from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from expense_tracker.core.config import settings

# 1. Create the Database Engine
# pool_pre_ping=True handles "stale" connections gracefully
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)

# 2. Create a Session Factory
# Every request gets its own session; nothing is shared between requests
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# This Base class tracks all our models
Base = declarative_base()

# 3. The Dependency
# One session per request, closed when the request is done.
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
