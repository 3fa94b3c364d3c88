###############
###############
###############
# In this file,
# we prepare the SQLAlchemy engine and session factory
# used by the SQL template store, and create the tables
# if they do not already exist.
###############
###############
###############

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from handgesture.core.config import DATABASE_URL, SQL_ECHO

Base = declarative_base()


def make_engine(url: str = DATABASE_URL, echo: bool = SQL_ECHO):
    """Build an engine. SQLite connections are shared across the worker threads FastAPI uses."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)
    return create_engine(url, echo=echo)


def make_session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_db(engine):
    # model modules must be imported so their tables are registered on Base
    from handgesture.models import template  # noqa: F401
    Base.metadata.create_all(bind=engine)


engine = make_engine()
SessionLocal = make_session_factory(engine)
