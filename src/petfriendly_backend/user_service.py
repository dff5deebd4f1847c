from __future__ import annotations

import logging
import sqlite3
from typing import Optional, Union

from .database import Database
from .entities import User
from .errors import NotFoundError, ValidationError
from .models import ProfileUpdateRequest, RegisterRequest, Role, UserCreateRequest, UserStatistics, UserUpdateRequest
from .pagination import Page, PageRequest
from .repositories import UserRepository
from .security import hash_password, verify_password
from .utils import is_blank, utcnow

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "Error: Email is already taken!"


class UserService:
    """Accounts: registration, lookups, activation, profile edits and statistics."""

    def __init__(self, db: Database):
        self.users = UserRepository(db)

    def create(self, payload: Union[RegisterRequest, UserCreateRequest], role: Optional[Role] = None) -> User:
        email = str(payload.email).lower()
        if self.users.exists_by_email(email):
            raise ValidationError(EMAIL_TAKEN)

        requested_role = getattr(payload, "role", None)
        requested_active = getattr(payload, "active", None)
        now = utcnow()
        user = User(
            email=email,
            password=hash_password(payload.password),
            first_name=payload.first_name,
            last_name=payload.last_name,
            role=role or requested_role or Role.USER,
            phone=payload.phone,
            city=payload.city,
            active=True if requested_active is None else requested_active,
            created_at=now,
            updated_at=now,
        )
        try:
            self.users.insert(user)
        except sqlite3.IntegrityError as exc:
            raise ValidationError(EMAIL_TAKEN) from exc
        logger.info(f"Created user {user.id} ({user.email}) with role {user.role.value}")
        return user

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the active user matching the credentials, else None."""
        user = self.users.find_by_email(email)
        if user is None or not user.active or not verify_password(password, user.password):
            return None
        return user

    def get(self, user_id: int) -> User:
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User not found with id: {user_id}")
        return user

    def find_by_email(self, email: str) -> Optional[User]:
        return self.users.find_by_email(email)

    def get_by_email(self, email: str) -> User:
        user = self.users.find_by_email(email)
        if user is None:
            raise NotFoundError(f"User not found with email: {email}")
        return user

    def find_all(self, pageable: Optional[PageRequest] = None) -> Page[User]:
        return self.users.find_all(pageable)

    def find_by_role(self, role: Role, pageable: Optional[PageRequest] = None) -> Page[User]:
        return self.users.find_by(pageable, role=role)

    def find_active(self, pageable: Optional[PageRequest] = None) -> Page[User]:
        return self.users.find_by(pageable, active=True)

    def search_by_name(self, name: str, pageable: Optional[PageRequest] = None) -> Page[User]:
        return self.users.search_by_name(name, pageable)

    def update(self, user_id: int, payload: UserUpdateRequest) -> User:
        user = self.get(user_id)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)

        new_email = changes.pop("email", None)
        if new_email is not None:
            new_email = str(new_email).lower()
            if new_email != user.email and self.users.exists_by_email(new_email):
                raise ValidationError(EMAIL_TAKEN)
            user.email = new_email

        new_password = changes.pop("password", None)
        if new_password is not None:
            user.password = hash_password(new_password)

        for field_name, value in changes.items():
            setattr(user, field_name, value)
        user.updated_at = utcnow()
        self.users.update(user)
        logger.info(f"Updated user {user_id}")
        return user

    def update_profile(self, user_id: int, payload: ProfileUpdateRequest) -> User:
        user = self.get(user_id)
        for field_name, value in payload.model_dump().items():
            if not is_blank(value):
                setattr(user, field_name, value.strip())
        user.updated_at = utcnow()
        self.users.update(user)
        logger.info(f"Updated profile of user {user_id}")
        return user

    def change_password(self, user_id: int, new_password: str) -> User:
        if len(new_password) < 6:
            raise ValidationError("Password must be at least 6 characters")
        user = self.get(user_id)
        user.password = hash_password(new_password)
        user.updated_at = utcnow()
        self.users.update(user)
        logger.info(f"Changed password of user {user_id}")
        return user

    def _set_active(self, user_id: int, active: bool) -> User:
        user = self.get(user_id)
        user.active = active
        user.updated_at = utcnow()
        self.users.update(user)
        logger.info(f"{'Activated' if active else 'Deactivated'} user {user_id}")
        return user

    def activate(self, user_id: int) -> User:
        return self._set_active(user_id, True)

    def deactivate(self, user_id: int) -> User:
        return self._set_active(user_id, False)

    def delete(self, user_id: int) -> None:
        if not self.users.delete_by_id(user_id):
            raise NotFoundError(f"User not found with id: {user_id}")
        logger.info(f"Deleted user {user_id}")

    def exists_by_id(self, user_id: int) -> bool:
        return self.users.exists_by_id(user_id)

    def exists_by_email(self, email: str) -> bool:
        return self.users.exists_by_email(email)

    def count(self) -> int:
        return self.users.count()

    def count_active(self) -> int:
        return self.users.count_by(active=True)

    def count_by_role(self, role: Role) -> int:
        return self.users.count_by(role=role)

    def statistics(self) -> UserStatistics:
        return UserStatistics(
            total_users=self.count(),
            active_users=self.count_active(),
            visitors=self.count_by_role(Role.VISITOR),
            standard_users=self.count_by_role(Role.USER),
            foundation_admins=self.count_by_role(Role.FOUNDATION_ADMIN),
            super_admins=self.count_by_role(Role.SUPER_ADMIN),
        )
