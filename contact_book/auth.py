"""Authentication routes and the bearer-token gate."""

import logging

from fastapi import APIRouter, Depends, Header, status
from sqlalchemy.orm import Session

from . import schemas
from .crud import UserRepository
from .database import get_db
from .errors import Unauthorized
from .models import User
from .security import parse_bearer
from .services import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])
me_router = APIRouter(tags=["auth"])


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    """Build an :class:`AuthService` on the request's session."""
    return AuthService(UserRepository(db))


def get_current_user(
    authorization: str | None = Header(None),
    service: AuthService = Depends(get_auth_service),
) -> User:
    """
    Dependency that resolves the caller from an opaque bearer token.

    The token is read from ``Authorization: Bearer <token>``, trimmed,
    and looked up in the credential store. Any failure stops the request
    with 401 before the route body runs.

    Raises:
        Unauthorized: If the header is missing or the token is empty or
            unknown.
    """
    if authorization is None:
        logger.debug("Rejected request without Authorization header")
        raise Unauthorized("Unauthorized")
    try:
        return service.resolve_by_token(parse_bearer(authorization))
    except Unauthorized as exc:
        logger.debug("Rejected bearer token: %s", exc.message)
        raise


@router.post(
    "/register",
    response_model=schemas.Envelope[schemas.UserOut],
    status_code=status.HTTP_201_CREATED,
)
def register(
    user_in: schemas.UserCreate,
    service: AuthService = Depends(get_auth_service),
):
    """Register a new user."""

    user = service.register(user_in)
    return {"message": "User registered successfully", "data": user}


@router.post("/login", response_model=schemas.Envelope[schemas.AuthOut])
def login(
    credentials: schemas.LoginRequest,
    service: AuthService = Depends(get_auth_service),
):
    """Authenticate user and return a fresh access token."""

    result = service.login(credentials.email, credentials.password)
    return {"message": "Login successful", "data": result}


@me_router.get("/me", response_model=schemas.Envelope[schemas.AuthOut])
def read_me(
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    """
    Retrieve the currently authenticated user.

    Args:
        current_user (User): Authenticated user obtained from the token.
        service (AuthService): Auth service bound to the request session.

    Returns:
        dict: Envelope with the user profile and its current token.
    """
    return {
        "message": "User retrieved successfully",
        "data": service.me(current_user.id),
    }
