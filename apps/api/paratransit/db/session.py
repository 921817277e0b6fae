from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from paratransit.core.config import settings


def engine_options(url: str) -> dict:
    """Backend-specific create_engine() keyword arguments."""
    parsed = make_url(url)
    backend = parsed.get_backend_name()
    if backend.startswith("postgresql"):
        return {"pool_pre_ping": True, "connect_args": {"options": "-c timezone=utc"}}
    if backend == "sqlite":
        options: dict = {"connect_args": {"check_same_thread": False}}
        if parsed.database in (None, "", ":memory:"):
            # Single shared connection so every session sees the same in-memory DB
            options["poolclass"] = StaticPool
        return options
    return {"pool_pre_ping": True}


engine = create_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
