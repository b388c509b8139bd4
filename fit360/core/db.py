from typing import Any, Iterable

from sqlalchemy import create_engine
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from fit360.core.config import settings

Base = declarative_base()

engine = None
SessionLocal = None

if settings.DATABASE_DSN:
    connect_args = {}
    if settings.DATABASE_DSN.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
    engine = create_engine(settings.DATABASE_DSN, future=True, connect_args=connect_args)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# dialects with INSERT ... ON CONFLICT DO UPDATE
_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def upsert(db: Session, model, values: dict[str, Any], conflict_cols: Iterable[str]) -> None:
    """
    Insert a row or overwrite the existing one that shares `conflict_cols`.

    Relies on the store's native conflict resolution, so the target columns
    must be backed by a unique constraint on the model.
    """
    conflict_cols = list(conflict_cols)
    dialect = db.get_bind().dialect.name
    insert = _INSERTS.get(dialect)
    if insert is None:
        raise RuntimeError(f"upsert not supported for dialect {dialect!r}")

    stmt = insert(model).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=conflict_cols,
        set_={k: stmt.excluded[k] for k in values if k not in conflict_cols},
    )
    db.execute(stmt)
