from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base

from indexify.logger import get_logger

logger = get_logger(__name__)

# Create base model class
Base = declarative_base()


def create_db_engine(db_url: str) -> Engine:
    """Create a SQLAlchemy engine for the metadata catalog.

    SQLite connections are shared with executor threads, so same-thread
    checks are disabled. An in-memory SQLite database lives only as long
    as its connection, so it is pinned to a single one.
    """
    url = make_url(db_url)

    if url.get_backend_name() == "sqlite":
        if url.database in (None, "", ":memory:"):
            from sqlalchemy.pool import StaticPool

            engine = create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            from sqlalchemy.pool import NullPool

            engine = create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=NullPool,
            )
    else:
        from sqlalchemy.pool import QueuePool

        engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_size=10,
            max_overflow=20,
            pool_timeout=30,
            pool_recycle=3600,
            pool_pre_ping=True,
        )

    logger.info(
        "Persistence: using database %s", url.render_as_string(hide_password=True)
    )
    return engine
