from sqlalchemy import create_engine, Column, Integer, String, DateTime, Text, Index
from sqlalchemy.orm import declarative_base, sessionmaker
from datetime import datetime, timezone
from pathlib import Path


def utc_now():
    """Return current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)

Base = declarative_base()


class Lead(Base):
    __tablename__ = 'leads'

    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False, index=True)

    # Listing details
    name = Column(String, nullable=False)  # Job title
    company = Column(String, index=True)
    location = Column(String)
    salary = Column(String)
    experience = Column(String)
    description = Column(Text)  # Snippet from the result card

    # Origin
    source = Column(String, nullable=False, index=True)  # indeed, naukri
    source_url = Column(String)
    external_id = Column(String)

    status = Column(String, default='new', index=True)  # new, contacted, ...
    tags = Column(Text)  # JSON array of skill tags
    extra = Column(Text)  # JSON object: search keyword, scraped_at

    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    __table_args__ = (
        Index('ix_leads_owner_source_external', 'owner_id', 'source', 'external_id'),
        Index('ix_leads_owner_source_url', 'owner_id', 'source_url'),
    )


# Database setup - import settings for database URL
from api.config import settings

engine_kwargs = {'echo': False, 'pool_pre_ping': True}
if settings.database_url.startswith('sqlite'):
    engine_kwargs['connect_args'] = {'check_same_thread': False}
else:
    engine_kwargs.update(pool_size=5, max_overflow=10, pool_recycle=3600)

engine = create_engine(settings.database_url, **engine_kwargs)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def init_db():
    if settings.database_url.startswith('sqlite:///./data/'):
        Path('data').mkdir(exist_ok=True)
    Base.metadata.create_all(bind=engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
