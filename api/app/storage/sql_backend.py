"""SQLAlchemy backend storing each key as one row of a ``records`` table."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Column, DateTime, String, Text, create_engine, delete, func
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ..obs import add_query_logger

Base = declarative_base()


class RecordRow(Base):
    """Serialized value of one store key."""

    __tablename__ = "records"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


def create_store_engine(url: str) -> Engine:
    """Return an engine for ``url``.

    In-memory SQLite uses a static pool so that every connection shares the
    same database.
    """

    if url in {"sqlite://", "sqlite:///:memory:"}:
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True)


class SQLBackend:
    """Persist store values in a relational database."""

    def __init__(self, url: str = "sqlite://", engine: Engine | None = None) -> None:
        self.engine = engine or create_store_engine(url)
        add_query_logger(self.engine, "records")
        Base.metadata.create_all(bind=self.engine)
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)

    def read(self, key: str) -> Optional[str]:
        with self.Session() as session:
            row = session.get(RecordRow, key)
            return row.value if row is not None else None

    def write(self, key: str, value: str) -> None:
        with self.Session.begin() as session:
            session.merge(RecordRow(key=key, value=value))

    def delete(self, key: str) -> None:
        with self.Session.begin() as session:
            session.execute(delete(RecordRow).where(RecordRow.key == key))

    def clear(self) -> None:
        with self.Session.begin() as session:
            session.execute(delete(RecordRow))
