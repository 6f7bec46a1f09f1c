"""Repositories for users, contacts and addresses.

This module contains database interaction logic isolated from the
services and FastAPI route handlers. Each repository receives its
``Session`` through the constructor. Lookups return ``None`` when no row
matches; translating that into a domain error is the caller's job.
"""

from typing import Any, Sequence, Tuple

from sqlalchemy import Select, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models


def paginate(
    db: Session, stmt: Select, page: int, limit: int
) -> Tuple[Sequence[Any], int]:
    """
    Run ``stmt`` for a single page and count all matching rows.

    Args:
        db (Session): Database session.
        stmt (Select): Filtered statement selecting one entity.
        page (int): 1-based page number.
        limit (int): Page size.

    Returns:
        tuple: Rows of the requested page and the total row count.
    """
    total = db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery()))
    rows = db.scalars(stmt.offset((page - 1) * limit).limit(limit)).all()
    return rows, total or 0


def like_any(search: str | None, *columns):
    """Build an ``OR`` of case-insensitive substring matches, or ``None``."""
    if not search:
        return None
    pattern = f"%{search}%"
    return or_(*(column.ilike(pattern) for column in columns))


def save(db: Session, instance):
    """Persist ``instance`` and reload it; roll back if the commit fails."""
    db.add(instance)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(instance)
    return instance


def remove(db: Session, instance) -> None:
    """Delete ``instance``; roll back if the commit fails."""
    db.delete(instance)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


class UserRepository:
    """Credential store and user directory persistence."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> models.User | None:
        """
        Retrieve a user by primary key.

        Args:
            user_id (int): User identifier.

        Returns:
            User | None: User if found, otherwise ``None``.
        """
        return self.db.execute(
            select(models.User).where(models.User.id == user_id)
        ).scalar_one_or_none()

    def get_by_email(self, email: str) -> models.User | None:
        """
        Retrieve a user by email address.

        Args:
            email (str): User email.

        Returns:
            User | None: User if found, otherwise ``None``.
        """
        return self.db.execute(
            select(models.User).where(models.User.email == email)
        ).scalar_one_or_none()

    def get_by_token(self, token: str) -> models.User | None:
        """Retrieve the user holding the session token ``token``, if any."""
        return self.db.execute(
            select(models.User).where(models.User.token == token)
        ).scalar_one_or_none()

    def list(self, page: int, limit: int, search: str | None = None):
        """
        Retrieve one page of users, optionally filtered by name or email.

        Returns:
            tuple: Users of the page and the total number of matches.
        """
        stmt = select(models.User).order_by(models.User.id)
        condition = like_any(search, models.User.name, models.User.email)
        if condition is not None:
            stmt = stmt.where(condition)
        return paginate(self.db, stmt, page, limit)

    def create(self, name: str, email: str, password: str) -> models.User:
        """
        Create and persist a new user.

        The password is stored exactly as given; hashing belongs to the
        service layer.

        Args:
            name (str): Display name.
            email (str): Unique email address.
            password (str): Password hash.

        Returns:
            User: Newly created user instance.
        """
        user = models.User(name=name, email=email, password=password)
        return save(self.db, user)

    def update(self, user: models.User, changes: dict) -> models.User:
        """Apply ``changes`` to ``user`` and persist it."""
        for key, value in changes.items():
            setattr(user, key, value)
        return save(self.db, user)

    def set_token(self, user: models.User, token: str) -> models.User:
        """Replace the stored session token of ``user``."""
        user.token = token
        return save(self.db, user)

    def delete(self, user: models.User) -> None:
        """Delete ``user``; the ORM cascade removes its contacts."""
        remove(self.db, user)


class ContactRepository:
    """Contact persistence. Every lookup is scoped to the owning user."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, contact_id: int, user_id: int) -> models.Contact | None:
        """
        Retrieve a single contact owned by the given user.

        Args:
            contact_id (int): Contact identifier.
            user_id (int): Identifier of the contact owner.

        Returns:
            Contact | None: Contact if found, otherwise ``None``.
        """
        return self.db.execute(
            select(models.Contact).where(
                models.Contact.id == contact_id,
                models.Contact.user_id == user_id,
            )
        ).scalar_one_or_none()

    def list(self, user_id: int, page: int, limit: int, search: str | None = None):
        """
        Retrieve one page of contacts for the given user.

        Supports optional case-insensitive search by name, email or phone.

        Args:
            user_id (int): Contact owner.
            page (int): 1-based page number.
            limit (int): Page size.
            search (str | None): Optional search query.

        Returns:
            tuple: Contacts of the page and the total number of matches.
        """
        stmt = (
            select(models.Contact)
            .where(models.Contact.user_id == user_id)
            .order_by(models.Contact.id)
        )
        condition = like_any(
            search,
            models.Contact.first_name,
            models.Contact.last_name,
            models.Contact.email,
            models.Contact.phone,
        )
        if condition is not None:
            stmt = stmt.where(condition)
        return paginate(self.db, stmt, page, limit)

    def create(self, user_id: int, data: dict) -> models.Contact:
        """Create a contact stamped with the owning ``user_id``."""
        contact = models.Contact(**data, user_id=user_id)
        return save(self.db, contact)

    def update(self, contact: models.Contact, changes: dict) -> models.Contact:
        """
        Update mutable fields of a contact.

        Args:
            contact (Contact): Contact instance.
            changes (dict): Fields to update.

        Returns:
            Contact: Updated contact.
        """
        for key, value in changes.items():
            setattr(contact, key, value)
        return save(self.db, contact)

    def delete(self, contact: models.Contact) -> None:
        """Delete ``contact`` together with its addresses."""
        remove(self.db, contact)


class AddressRepository:
    """Address persistence, scoped through the owning contact."""

    def __init__(self, db: Session):
        self.db = db

    def find_contact(self, contact_id: int, user_id: int) -> models.Contact | None:
        """Resolve the parent contact only if it belongs to ``user_id``."""
        return ContactRepository(self.db).get(contact_id, user_id)

    def get(self, address_id: int, user_id: int) -> models.Address | None:
        """
        Retrieve an address whose contact is owned by the given user.

        Args:
            address_id (int): Address identifier.
            user_id (int): Identifier of the requesting user.

        Returns:
            Address | None: Address if found and owned, otherwise ``None``.
        """
        return self.db.execute(
            select(models.Address)
            .join(models.Contact, models.Address.contact_id == models.Contact.id)
            .where(
                models.Address.id == address_id,
                models.Contact.user_id == user_id,
            )
        ).scalar_one_or_none()

    def list(self, contact_id: int, page: int, limit: int, search: str | None = None):
        """
        Retrieve one page of addresses of a contact.

        Supports optional case-insensitive search across every address field.

        Returns:
            tuple: Addresses of the page and the total number of matches.
        """
        stmt = (
            select(models.Address)
            .where(models.Address.contact_id == contact_id)
            .order_by(models.Address.id)
        )
        condition = like_any(
            search,
            models.Address.street,
            models.Address.city,
            models.Address.state,
            models.Address.postal_code,
            models.Address.country,
        )
        if condition is not None:
            stmt = stmt.where(condition)
        return paginate(self.db, stmt, page, limit)

    def create(self, contact_id: int, data: dict) -> models.Address:
        """Create an address attached to ``contact_id``."""
        address = models.Address(**data, contact_id=contact_id)
        return save(self.db, address)

    def update(self, address: models.Address, changes: dict) -> models.Address:
        """Apply ``changes`` to ``address`` and persist it."""
        for key, value in changes.items():
            setattr(address, key, value)
        return save(self.db, address)

    def delete(self, address: models.Address) -> None:
        """Delete ``address``."""
        remove(self.db, address)
