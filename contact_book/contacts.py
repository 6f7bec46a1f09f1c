"""Contact management routes for the Contact Book API."""

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from . import schemas
from .auth import get_current_user
from .crud import ContactRepository
from .database import get_db
from .models import User
from .services import ContactService

router = APIRouter(prefix="/contacts", tags=["contacts"])


def get_contact_service(db: Session = Depends(get_db)) -> ContactService:
    return ContactService(ContactRepository(db))


@router.post(
    "",
    response_model=schemas.Envelope[schemas.ContactOut],
    status_code=status.HTTP_201_CREATED,
)
def create_contact(
    contact_in: schemas.ContactCreate,
    service: ContactService = Depends(get_contact_service),
    current_user: User = Depends(get_current_user),
):
    """
    Create a new contact owned by the current user.

    Args:
        contact_in (ContactCreate): Contact input data.
        service (ContactService): Contact service bound to the request session.
        current_user (User): Authenticated user.

    Returns:
        dict: Envelope with the created contact.
    """
    return {
        "message": "Contact created successfully",
        "data": service.create(current_user.id, contact_in),
    }


@router.get("", response_model=schemas.Envelope[schemas.Page[schemas.ContactOut]])
def list_contacts(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=schemas.MAX_PAGE_SIZE),
    search: str | None = Query(None),
    service: ContactService = Depends(get_contact_service),
    current_user: User = Depends(get_current_user),
):
    """
    Retrieve one page of contacts belonging to the current user.

    Supports optional text search by name, email or phone.

    Args:
        page (int): 1-based page number.
        limit (int): Page size.
        search (str | None): Optional search query.
        service (ContactService): Contact service bound to the request session.
        current_user (User): Authenticated user.

    Returns:
        dict: Envelope with the page of contacts.
    """
    return {
        "message": "Contacts retrieved successfully",
        "data": service.list(current_user.id, page, limit, search),
    }


@router.get("/{contact_id}", response_model=schemas.Envelope[schemas.ContactOut])
def get_contact(
    contact_id: int = Path(..., ge=1, le=schemas.MAX_ID),
    service: ContactService = Depends(get_contact_service),
    current_user: User = Depends(get_current_user),
):
    """
    Retrieve a single contact by ID for the current user.

    Raises:
        NotFound: If the contact does not exist or belongs to someone else.
    """
    return {
        "message": "Contact found successfully",
        "data": service.find_by_id(contact_id, current_user.id),
    }


@router.put("/{contact_id}", response_model=schemas.Envelope[schemas.ContactOut])
def update_contact(
    changes: schemas.ContactUpdate,
    contact_id: int = Path(..., ge=1, le=schemas.MAX_ID),
    service: ContactService = Depends(get_contact_service),
    current_user: User = Depends(get_current_user),
):
    """
    Partially update an existing contact.

    Only fields provided in the request will be updated.
    """
    return {
        "message": "Contact updated successfully",
        "data": service.update(contact_id, current_user.id, changes),
    }


@router.delete("/{contact_id}", response_model=schemas.Message)
def delete_contact(
    contact_id: int = Path(..., ge=1, le=schemas.MAX_ID),
    service: ContactService = Depends(get_contact_service),
    current_user: User = Depends(get_current_user),
):
    """Delete a contact owned by the current user, with its addresses."""
    service.delete(contact_id, current_user.id)
    return {"message": "Contact deleted successfully"}
