# File: app/db/session.py

from fastapi import Depends
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from app.core.config import settings

# sqlite needs check_same_thread False (requests and background tasks share the pool)
connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,
    connect_args=connect_args,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def init_db():
    from app.db.base import Base
    from app.models import kv_entry  # noqa: F401  registers the table
    Base.metadata.create_all(bind=engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_kv(db: Session = Depends(get_db)):
    from app.db.kv import KVStore
    return KVStore(db)
