from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

from rental.core.config import settings


class Base(DeclarativeBase):
    pass


def create_db_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # In-memory databases live as long as their single connection
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


engine = create_db_engine(settings.database_url)


def create_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)


SessionLocal = create_session_factory(engine)


def init_db(bind: Engine | None = None) -> None:
    # Import models so they register on Base.metadata
    from rental import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
