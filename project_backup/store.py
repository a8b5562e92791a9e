"""
Backup storage abstraction for SQL databases and an in-memory implementation.
"""

from __future__ import annotations

from typing import Dict, Protocol

from sqlalchemy import JSON, Column, Integer, String, create_engine, select
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from project_backup.schemas import BackupRecord


class BackupStore(Protocol):
    """Interface for backup record persistence."""

    def put(self, backup_id: str, record: BackupRecord) -> None:
        ...

    def query_by_user(self, user_id: str) -> list[BackupRecord]:
        ...

    def list_all(self) -> list[BackupRecord]:
        ...

    def count(self) -> int:
        ...


class InMemoryBackupStore:
    """
    Process-local store for development and tests.

    Records are copied on the way in and out, so a caller that mutates a
    record has to ``put`` it back for the change to stick.
    """

    def __init__(self):
        self.records: Dict[str, BackupRecord] = {}

    def put(self, backup_id: str, record: BackupRecord) -> None:
        self.records[backup_id] = record.model_copy(deep=True)

    def query_by_user(self, user_id: str) -> list[BackupRecord]:
        return [
            record.model_copy(deep=True)
            for record in self.records.values()
            if record.backupMetadata.userId == user_id
        ]

    def list_all(self) -> list[BackupRecord]:
        return [record.model_copy(deep=True) for record in self.records.values()]

    def count(self) -> int:
        return len(self.records)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.records.clear()


class SqlBackupStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlBackupStore")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def put(self, backup_id: str, record: BackupRecord) -> None:
        payload = record.model_dump(mode="json")
        with self.Session() as session:
            stmt = select(BackupRow).where(BackupRow.backup_id == backup_id)
            row = session.execute(stmt).scalar_one_or_none()
            if row:
                row.user_id = record.backupMetadata.userId
                row.timestamp = record.backupMetadata.timestamp
                row.record = payload
            else:
                session.add(
                    BackupRow(
                        backup_id=backup_id,
                        user_id=record.backupMetadata.userId,
                        timestamp=record.backupMetadata.timestamp,
                        record=payload,
                    )
                )
            session.commit()

    def query_by_user(self, user_id: str) -> list[BackupRecord]:
        with self.Session() as session:
            stmt = (
                select(BackupRow)
                .where(BackupRow.user_id == user_id)
                .order_by(BackupRow.seq.asc())
            )
            rows = session.execute(stmt).scalars().all()
            return [BackupRecord.model_validate(row.record) for row in rows]

    def list_all(self) -> list[BackupRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(BackupRow).order_by(BackupRow.seq.asc())
            ).scalars().all()
            return [BackupRecord.model_validate(row.record) for row in rows]

    def count(self) -> int:
        with self.Session() as session:
            return session.query(BackupRow).count()


Base = declarative_base()


class BackupRow(Base):
    __tablename__ = "project_backups"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    backup_id = Column(String, nullable=False, unique=True)
    user_id = Column(String, nullable=False, index=True)
    timestamp = Column(String, nullable=False)
    record = Column(JSON, nullable=False)
