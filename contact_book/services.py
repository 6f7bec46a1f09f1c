"""Business rules for the auth gate and the three CRUD verticals.

Services receive their repository through the constructor. They own
password hashing, ownership checks, merge-patch updates and the
translation of missing rows into :class:`~contact_book.errors.NotFound`.
"""

import logging

from sqlalchemy.exc import IntegrityError

from . import models, schemas
from .crud import AddressRepository, ContactRepository, UserRepository
from .errors import Conflict, InvalidCredentials, NotFound, Unauthorized
from .security import generate_token, get_password_hash, verify_password

logger = logging.getLogger(__name__)

USER_EXISTS = "user already exists"
USER_NOT_FOUND = "user not found"
CONTACT_NOT_FOUND = "contact not found"
ADDRESS_NOT_FOUND = "address not found"


def patch_fields(payload) -> dict:
    """Return only the fields the client actually supplied."""
    return payload.model_dump(exclude_unset=True, exclude_none=True)


class AuthService:
    """Registration, login and token resolution."""

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def register(self, payload: schemas.UserCreate) -> models.User:
        """
        Register a new user.

        The raw password is hashed here and nowhere else on this path.

        Raises:
            Conflict: If the email is already registered.
        """
        if self.repo.get_by_email(payload.email) is not None:
            raise Conflict(USER_EXISTS)
        try:
            user = self.repo.create(
                payload.name, payload.email, get_password_hash(payload.password)
            )
        except IntegrityError:
            raise Conflict(USER_EXISTS)
        logger.info("Registered user %s", user.id)
        return user

    def login(self, email: str, password: str) -> schemas.AuthOut:
        """
        Check credentials and issue a fresh token, replacing the old one.

        Raises:
            InvalidCredentials: If the email is unknown or the password
                does not match.
        """
        user = self.repo.get_by_email(email)
        if user is None or not verify_password(password, user.password):
            raise InvalidCredentials("email or password is incorrect")
        user = self.repo.set_token(user, generate_token())
        logger.info("User %s logged in", user.id)
        return schemas.AuthOut(
            user=schemas.UserOut.model_validate(user), access_token=user.token
        )

    def resolve_by_token(self, token: str | None) -> models.User:
        if not token:
            raise Unauthorized("token is required")
        user = self.repo.get_by_token(token)
        if user is None:
            raise Unauthorized("Unauthorized")
        return user

    def me(self, user_id: int) -> schemas.AuthOut:
        user = self.repo.get_by_id(user_id)
        if user is None:
            raise NotFound(USER_NOT_FOUND)
        return schemas.AuthOut(
            user=schemas.UserOut.model_validate(user), access_token=user.token
        )


class UserService:
    """Owner-less directory of user profiles."""

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def list(
        self, page: int, limit: int, search: str | None = None
    ) -> schemas.Page[schemas.UserOut]:
        rows, total = self.repo.list(page, limit, search)
        return schemas.Page[schemas.UserOut].build(
            [schemas.UserOut.model_validate(row) for row in rows], page, limit, total
        )

    def create(self, payload: schemas.UserCreate) -> models.User:
        """Create a user; the password is hashed before it is stored."""
        if self.repo.get_by_email(payload.email) is not None:
            raise Conflict(USER_EXISTS)
        try:
            user = self.repo.create(
                payload.name, payload.email, get_password_hash(payload.password)
            )
        except IntegrityError:
            raise Conflict(USER_EXISTS)
        logger.info("Created user %s", user.id)
        return user

    def find_by_id(self, user_id: int) -> models.User:
        user = self.repo.get_by_id(user_id)
        if user is None:
            raise NotFound(USER_NOT_FOUND)
        return user

    def update(self, user_id: int, payload: schemas.UserUpdate) -> models.User:
        """
        Merge-patch a user profile.

        Raises:
            NotFound: If the user does not exist.
            Conflict: If the new email belongs to another user.
        """
        user = self.find_by_id(user_id)
        changes = patch_fields(payload)
        email = changes.get("email")
        if email and email != user.email:
            other = self.repo.get_by_email(email)
            if other is not None:
                raise Conflict(USER_EXISTS)
        try:
            user = self.repo.update(user, changes)
        except IntegrityError:
            raise Conflict(USER_EXISTS)
        logger.info("Updated user %s fields=%s", user.id, sorted(changes))
        return user

    def delete(self, user_id: int) -> None:
        user = self.find_by_id(user_id)
        self.repo.delete(user)
        logger.info("Deleted user %s", user_id)


class ContactService:
    """Contacts, each strictly owned by one user."""

    def __init__(self, repo: ContactRepository):
        self.repo = repo

    def list(
        self, user_id: int, page: int, limit: int, search: str | None = None
    ) -> schemas.Page[schemas.ContactOut]:
        rows, total = self.repo.list(user_id, page, limit, search)
        return schemas.Page[schemas.ContactOut].build(
            [schemas.ContactOut.model_validate(row) for row in rows],
            page,
            limit,
            total,
        )

    def create(self, user_id: int, payload: schemas.ContactCreate) -> models.Contact:
        contact = self.repo.create(user_id, payload.model_dump())
        logger.info("User %s created contact %s", user_id, contact.id)
        return contact

    def find_by_id(self, contact_id: int, user_id: int) -> models.Contact:
        """
        Load a contact owned by ``user_id``.

        A contact that exists but belongs to someone else is reported
        exactly like a missing one.
        """
        contact = self.repo.get(contact_id, user_id)
        if contact is None:
            raise NotFound(CONTACT_NOT_FOUND)
        return contact

    def update(
        self, contact_id: int, user_id: int, payload: schemas.ContactUpdate
    ) -> models.Contact:
        contact = self.find_by_id(contact_id, user_id)
        changes = patch_fields(payload)
        contact = self.repo.update(contact, changes)
        logger.info("User %s updated contact %s", user_id, contact_id)
        return contact

    def delete(self, contact_id: int, user_id: int) -> None:
        contact = self.find_by_id(contact_id, user_id)
        self.repo.delete(contact)
        logger.info("User %s deleted contact %s", user_id, contact_id)


class AddressService:
    """Addresses, owned by a contact and through it by a user."""

    def __init__(self, repo: AddressRepository):
        self.repo = repo

    def _require_contact(self, contact_id: int, user_id: int) -> models.Contact:
        contact = self.repo.find_contact(contact_id, user_id)
        if contact is None:
            raise NotFound(CONTACT_NOT_FOUND)
        return contact

    def list(
        self,
        user_id: int,
        contact_id: int,
        page: int,
        limit: int,
        search: str | None = None,
    ) -> schemas.Page[schemas.AddressOut]:
        self._require_contact(contact_id, user_id)
        rows, total = self.repo.list(contact_id, page, limit, search)
        return schemas.Page[schemas.AddressOut].build(
            [schemas.AddressOut.model_validate(row) for row in rows],
            page,
            limit,
            total,
        )

    def create(self, user_id: int, payload: schemas.AddressCreate) -> models.Address:
        """
        Create an address under one of the caller's contacts.

        Raises:
            NotFound: If the contact does not resolve for ``user_id``.
                Nothing is written in that case.
        """
        self._require_contact(payload.contact_id, user_id)
        data = payload.model_dump(exclude={"contact_id"})
        address = self.repo.create(payload.contact_id, data)
        logger.info(
            "User %s created address %s for contact %s",
            user_id,
            address.id,
            payload.contact_id,
        )
        return address

    def find_by_id(self, address_id: int, user_id: int) -> models.Address:
        address = self.repo.get(address_id, user_id)
        if address is None:
            raise NotFound(ADDRESS_NOT_FOUND)
        return address

    def update(
        self, address_id: int, user_id: int, payload: schemas.AddressUpdate
    ) -> models.Address:
        address = self.find_by_id(address_id, user_id)
        address = self.repo.update(address, patch_fields(payload))
        logger.info("User %s updated address %s", user_id, address_id)
        return address

    def delete(self, address_id: int, user_id: int) -> None:
        address = self.find_by_id(address_id, user_id)
        self.repo.delete(address)
        logger.info("User %s deleted address %s", user_id, address_id)
