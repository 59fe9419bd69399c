import os
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, declarative_base

from shortener.config import Settings

Base = declarative_base()


def _prepare_sqlite_dir(database: str):
    data_dir = os.path.dirname(database)
    if data_dir and not os.path.exists(data_dir):
        os.makedirs(data_dir)


def make_engine(settings: Settings) -> Engine:
    """Builds an engine with a fixed-size connection pool."""
    url = make_url(settings.database_url)
    kwargs = {}

    if url.get_backend_name() == "sqlite":
        if not url.database or url.database == ":memory:":
            raise ValueError("in-memory SQLite cannot be shared across pooled connections")
        _prepare_sqlite_dir(url.database)
        kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}

    return create_engine(
        url,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
        pool_pre_ping=True,
        **kwargs,
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine):
    # models must be imported so their tables are registered on Base
    from shortener import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
