"""
Database configuration:
- pool_pre_ping=True on server databases
- SSL enforced for Supabase
- Foreign keys switched on for SQLite
- Retry on OperationalError for the preflight check
- One transaction per logical write (see `transaction`)
"""
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, declarative_base, Session
from contextlib import contextmanager
from dotenv import load_dotenv
import logging
from typing import Generator, Iterator
import time

from adega.config import settings

load_dotenv()

logger = logging.getLogger(__name__)

Base = declarative_base()


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """SQLite ships with foreign key enforcement off, turn it on per connection"""
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(database_url: str) -> Engine:
    """Create the engine for a URL, SQLite for local use and tests, PostgreSQL otherwise"""
    if database_url.startswith("sqlite"):
        sqlite_engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=settings.SQL_ECHO,
        )
        enable_sqlite_foreign_keys(sqlite_engine)
        return sqlite_engine

    # psycopg3 driver, SQLAlchemy would otherwise pick psycopg2
    for prefix in ("postgres://", "postgresql://"):
        if database_url.startswith(prefix):
            database_url = "postgresql+psycopg://" + database_url[len(prefix):]
            break

    # Add SSL mode for Supabase if not present
    if "supabase" in database_url and "sslmode" not in database_url:
        separator = "&" if "?" in database_url else "?"
        database_url += f"{separator}sslmode=require"
        logger.info("Added sslmode=require to DATABASE_URL")

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        pool_recycle=300,
        pool_timeout=30,
        echo=settings.SQL_ECHO,
        connect_args={
            "connect_timeout": 10,
            "keepalives": 1,
            "keepalives_idle": 30,
            "keepalives_interval": 10,
            "keepalives_count": 5,
        },
    )


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run a unit of work: commit when the block finishes, roll back and
    re-raise on any error so no partial write survives.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def test_connection(max_retries: int = settings.DB_CONNECT_RETRIES) -> tuple[bool, str]:
    """Preflight check with retry on OperationalError"""
    for attempt in range(max_retries + 1):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True, "Database connection successful"
        except OperationalError as e:
            if attempt == max_retries:
                return False, f"Database connection failed: {e}"
            logger.warning(f"Database connection attempt {attempt + 1} failed, retrying...")
            time.sleep(1)
    return False, "Database connection test failed"
