from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from creator_program.core.config import settings

_url = make_url(settings.DATABASE_URL)
IS_POSTGRES = _url.get_backend_name().startswith("postgresql")

connect_args = {}
engine_kwargs = {"pool_pre_ping": True}
if IS_POSTGRES:
    # Every statement issued while serving a request is capped by this deadline
    statement_timeout_ms = settings.REQUEST_TIMEOUT_SECONDS * 1000
    connect_args["options"] = f"-c timezone=utc -c statement_timeout={statement_timeout_ms}"
elif _url.get_backend_name() == "sqlite":
    connect_args["check_same_thread"] = False
    if _url.database in (None, "", ":memory:"):
        engine_kwargs["poolclass"] = StaticPool

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, **engine_kwargs)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def set_statement_timeout(db: Session, seconds: int) -> None:
    """Override the per-statement deadline for this connection (Postgres only)."""
    if db.get_bind().dialect.name != "postgresql":
        return
    db.execute(text(f"SET statement_timeout = {int(seconds) * 1000}"))
    db.commit()


def reset_statement_timeout(db: Session) -> None:
    if db.get_bind().dialect.name != "postgresql":
        return
    db.execute(text("RESET statement_timeout"))
    db.commit()


@contextmanager
def sweep_session() -> Iterator[Session]:
    """Session for the batch sweep, running under the sweep deadline."""
    db = SessionLocal()
    try:
        set_statement_timeout(db, settings.SWEEP_TIMEOUT_SECONDS)
        yield db
    finally:
        db.rollback()
        reset_statement_timeout(db)
        db.close()
