"""
Main application entry point for the Contact Book API.

This module builds the FastAPI application: it configures logging and
CORS, registers the JSON error handlers, and includes routers for
authentication, users, contacts and addresses.

The database session factory is passed into :func:`create_app`; when it
is omitted the factory is built from environment settings, and missing
database variables abort startup. Run with::

    uvicorn main:create_app --factory

Modules:
- FastAPI: Web framework
- CORSMiddleware: Middleware for handling CORS
- contact_book.database: Engine and session factory
- contact_book.models: SQLAlchemy models
- contact_book.auth: Authentication router and bearer-token gate
- contact_book.users: Users router
- contact_book.contacts: Contacts router
- contact_book.addresses: Addresses router
- contact_book.core: Application settings
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import sessionmaker

from contact_book import addresses, auth, contacts, models, users
from contact_book.core import configure_logging, get_settings
from contact_book.database import build_engine, build_session_factory
from contact_book.errors import register_exception_handlers

logger = logging.getLogger("contact_book")


def create_app(session_factory: sessionmaker | None = None) -> FastAPI:
    """
    Build the Contact Book application.

    Args:
        session_factory (sessionmaker | None): Factory used for every
            request session. Built from settings when omitted.

    Returns:
        FastAPI: Configured application.
    """
    allowed_origins = ["*"]
    if session_factory is None:
        settings = get_settings()
        configure_logging(settings.LOG_LEVEL)
        engine = build_engine(settings)
        # Create tables (no migrations)
        models.Base.metadata.create_all(bind=engine)
        session_factory = build_session_factory(engine)
        allowed_origins = settings.ALLOWED_ORIGINS
        logger.info("Connected to database %s", engine.url.render_as_string())

    app = FastAPI(title="Contact Book API")
    app.state.session_factory = session_factory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(auth.me_router)
    app.include_router(users.router)
    app.include_router(contacts.router)
    app.include_router(addresses.router)

    @app.get("/")
    def root():
        """Return a pointer to the Swagger UI."""
        return {"message": "Contact Book API. Visit /docs for Swagger UI"}

    @app.get("/health")
    def health():
        """Report that the server is up."""
        return {"status": "ok", "message": "Server is running"}

    return app
