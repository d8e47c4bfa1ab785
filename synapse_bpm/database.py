"""
Database connection and session management.
"""
from __future__ import annotations

import logging
from typing import Any, Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from synapse_bpm.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> Engine:
    """
    Create the SQLAlchemy engine for PostgreSQL or SQLite.

    In-memory SQLite databases share a single connection so every session
    sees the same schema.
    """
    if database_url.lower().startswith("sqlite://"):
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=False, **kwargs)

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=settings.db_pool_recycle,
        echo=False,
    )


engine: Engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for getting a database session.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(seed: bool | None = None) -> None:
    """
    Initialize database by registering models and creating tables.
    """
    from synapse_bpm.models import Base
    from synapse_bpm.seeds import seed_sample_data

    Base.metadata.create_all(bind=engine)

    if seed is None:
        seed = settings.seed_sample_data
    if not seed:
        return

    db = SessionLocal()
    try:
        inserted = seed_sample_data(db)
        if inserted:
            logger.info("Seeded %s sample rows", inserted)
    finally:
        db.close()


def database_health() -> dict[str, Any]:
    """
    Return structured database health details.
    """
    try:
        with engine.connect() as connection:
            if engine.dialect.name == "postgresql":
                result = connection.execute(
                    text(
                        "SELECT current_database() AS database_name, "
                        "current_user AS database_user, "
                        "version() AS server_version"
                    )
                ).mappings().one()
                return {
                    "ok": True,
                    "dialect": engine.dialect.name,
                    "database": str(result["database_name"]),
                    "user": str(result["database_user"]),
                    "server_version": str(result["server_version"]),
                }

            version = connection.execute(text("SELECT sqlite_version()")).scalar()
            return {
                "ok": True,
                "dialect": engine.dialect.name,
                "server_version": str(version),
            }
    except SQLAlchemyError as exc:
        logger.error("Database health check failed: %s", exc)
        return {
            "ok": False,
            "error": str(exc),
        }
