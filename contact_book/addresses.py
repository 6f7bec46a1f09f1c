"""Address routes for the Contact Book API.

Every address hangs off one of the caller's contacts; the parent contact
is re-resolved for the current user on each request.
"""

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from . import schemas
from .auth import get_current_user
from .crud import AddressRepository
from .database import get_db
from .models import User
from .services import AddressService

router = APIRouter(prefix="/addresses", tags=["addresses"])


def get_address_service(db: Session = Depends(get_db)) -> AddressService:
    return AddressService(AddressRepository(db))


@router.post(
    "",
    response_model=schemas.Envelope[schemas.AddressOut],
    status_code=status.HTTP_201_CREATED,
)
def create_address(
    address_in: schemas.AddressCreate,
    service: AddressService = Depends(get_address_service),
    current_user: User = Depends(get_current_user),
):
    """
    Create an address for one of the current user's contacts.

    Raises:
        NotFound: If ``contact_id`` does not resolve for the current user.
    """
    return {
        "message": "Address created successfully",
        "data": service.create(current_user.id, address_in),
    }


@router.get("", response_model=schemas.Envelope[schemas.Page[schemas.AddressOut]])
def list_addresses(
    contact_id: int = Query(..., ge=1, le=schemas.MAX_ID),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=schemas.MAX_PAGE_SIZE),
    search: str | None = Query(None),
    service: AddressService = Depends(get_address_service),
    current_user: User = Depends(get_current_user),
):
    """
    Retrieve one page of addresses of a contact.

    Args:
        contact_id (int): Parent contact, which must belong to the caller.
        page (int): 1-based page number.
        limit (int): Page size.
        search (str | None): Substring matched against every address field.
        service (AddressService): Address service bound to the request session.
        current_user (User): Authenticated user.

    Returns:
        dict: Envelope with the page of addresses.
    """
    return {
        "message": "Addresses retrieved successfully",
        "data": service.list(current_user.id, contact_id, page, limit, search),
    }


@router.get("/{address_id}", response_model=schemas.Envelope[schemas.AddressOut])
def get_address(
    address_id: int = Path(..., ge=1, le=schemas.MAX_ID),
    service: AddressService = Depends(get_address_service),
    current_user: User = Depends(get_current_user),
):
    """
    Retrieve a single address by ID.

    Raises:
        NotFound: If the address does not exist or its contact belongs to
            another user.
    """
    return {
        "message": "Address found successfully",
        "data": service.find_by_id(address_id, current_user.id),
    }


@router.put("/{address_id}", response_model=schemas.Envelope[schemas.AddressOut])
def update_address(
    changes: schemas.AddressUpdate,
    address_id: int = Path(..., ge=1, le=schemas.MAX_ID),
    service: AddressService = Depends(get_address_service),
    current_user: User = Depends(get_current_user),
):
    """Partially update an address of one of the caller's contacts."""
    return {
        "message": "Address updated successfully",
        "data": service.update(address_id, current_user.id, changes),
    }


@router.delete("/{address_id}", response_model=schemas.Message)
def delete_address(
    address_id: int = Path(..., ge=1, le=schemas.MAX_ID),
    service: AddressService = Depends(get_address_service),
    current_user: User = Depends(get_current_user),
):
    """Delete an address of one of the caller's contacts."""
    service.delete(address_id, current_user.id)
    return {"message": "Address deleted successfully"}
