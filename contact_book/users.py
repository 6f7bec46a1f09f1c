"""User directory routes for the Contact Book API."""

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from . import schemas
from .auth import get_current_user
from .crud import UserRepository
from .database import get_db
from .services import UserService

router = APIRouter(
    prefix="/users",
    tags=["users"],
    dependencies=[Depends(get_current_user)],
)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(UserRepository(db))


@router.get("", response_model=schemas.Envelope[schemas.Page[schemas.UserOut]])
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=schemas.MAX_PAGE_SIZE),
    search: str | None = Query(None),
    service: UserService = Depends(get_user_service),
):
    """
    Retrieve one page of users.

    Args:
        page (int): 1-based page number.
        limit (int): Page size.
        search (str | None): Substring matched against name and email.
        service (UserService): User service bound to the request session.

    Returns:
        dict: Envelope with the page of users.
    """
    return {
        "message": "Users found successfully",
        "data": service.list(page, limit, search),
    }


@router.post(
    "",
    response_model=schemas.Envelope[schemas.UserOut],
    status_code=status.HTTP_201_CREATED,
)
def create_user(
    user_in: schemas.UserCreate,
    service: UserService = Depends(get_user_service),
):
    """Create a user profile; the password is hashed server-side."""
    return {"message": "User created successfully", "data": service.create(user_in)}


@router.get("/{user_id}", response_model=schemas.Envelope[schemas.UserOut])
def get_user(
    user_id: int = Path(..., ge=1, le=schemas.MAX_ID),
    service: UserService = Depends(get_user_service),
):
    """
    Retrieve a single user by ID.

    Raises:
        NotFound: If the user does not exist.
    """
    return {"message": "User found successfully", "data": service.find_by_id(user_id)}


@router.put("/{user_id}", response_model=schemas.Envelope[schemas.UserOut])
def update_user(
    changes: schemas.UserUpdate,
    user_id: int = Path(..., ge=1, le=schemas.MAX_ID),
    service: UserService = Depends(get_user_service),
):
    """
    Partially update a user.

    Only fields provided in the request will be updated.
    """
    return {
        "message": "User updated successfully",
        "data": service.update(user_id, changes),
    }


@router.delete("/{user_id}", response_model=schemas.Message)
def delete_user(
    user_id: int = Path(..., ge=1, le=schemas.MAX_ID),
    service: UserService = Depends(get_user_service),
):
    """Delete a user together with their contacts and addresses."""
    service.delete(user_id)
    return {"message": "User deleted successfully"}
