from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.pool import StaticPool
from sqlalchemy.exc import SQLAlchemyError
from opentutor.core.config import settings
from opentutor.core.exceptions import UpstreamServiceError
import logging

logger = logging.getLogger(__name__)

# Ensure the URL uses postgresql:// (not postgres://) for SQLAlchemy
db_url = settings.database_url
if db_url.startswith("postgres://"):
    db_url = db_url.replace("postgres://", "postgresql://", 1)

logger.info(f"Connecting to database: {db_url[:20]}...")  # Log partial URL for debugging


def build_engine(url: str):
    """Create an engine with pool settings suited to the database backend."""
    if url.startswith("sqlite"):
        # In-memory databases must share one connection across threads
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=False, **kwargs)

    return create_engine(
        url,
        echo=False,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=5,
        max_overflow=10,
    )


engine = build_engine(db_url)


def get_session():
    """Dependency for getting database sessions."""
    with Session(engine) as session:
        yield session


def init_db(bind=None):
    """Initialize database tables."""
    SQLModel.metadata.create_all(bind or engine)


def dialect_insert(session: Session, model):
    """
    Build an INSERT for `model` that supports ON CONFLICT clauses.

    PostgreSQL and SQLite both implement upserts, but SQLAlchemy exposes them
    through dialect-specific insert constructs.
    """
    dialect_name = session.get_bind().dialect.name
    if dialect_name == "postgresql":
        return postgresql.insert(model)
    if dialect_name == "sqlite":
        return sqlite.insert(model)
    raise NotImplementedError(f"Upserts are not supported on dialect '{dialect_name}'")


def commit_or_raise(session: Session, action: str) -> None:
    """
    Commit the session, converting storage failures to UpstreamServiceError.

    The transaction is rolled back first so no partial mutation survives.
    """
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to {action}: {str(e)}")
        raise UpstreamServiceError(f"Failed to {action}: {str(e)}", service="database") from e
