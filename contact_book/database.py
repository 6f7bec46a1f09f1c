"""Database configuration and session management.

This module builds the SQLAlchemy engine and session factory, defines
the declarative base, and provides a database session dependency for
FastAPI routes. The session factory lives on ``app.state`` so every
component receives its connection explicitly.
"""

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

from .core import Settings


Base = declarative_base()
"""Declarative base class for SQLAlchemy models."""


def build_engine(settings: Settings) -> Engine:
    """Create an engine bound to the configured database URL."""
    return create_engine(
        settings.database_url,
        future=True,
        pool_pre_ping=True,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    """Return a session factory bound to ``engine``."""
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        future=True,
    )


def get_db(request: Request):
    """
    Provide a SQLAlchemy database session.

    This function is used as a FastAPI dependency.
    It yields a session from the factory registered on the application
    and ensures it is properly closed after the request is completed.
    """

    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
