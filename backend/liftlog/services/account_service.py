from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from liftlog.errors import DuplicateRow, ValidationError
from liftlog.models import User
from liftlog.repositories.user_repo import UserRepository
from liftlog.schemas.user import PreferencesUpdate, UserRegister
from liftlog.security import hash_password, verify_password

log = logging.getLogger(__name__)

DUPLICATE_EMAIL = "email already registered"


class AccountService:
    """Accounts and the per-user preferences the session controller reads."""

    def __init__(self, db: Session):
        self.users = UserRepository(db)

    def register(self, payload: UserRegister) -> User:
        if self.users.get_by_email(payload.email) is not None:
            raise ValidationError(DUPLICATE_EMAIL)
        try:
            user = self.users.create(
                email=payload.email,
                name=payload.name,
                password_hash=hash_password(payload.password),
                weight_unit=payload.weight_unit.value,
            )
            self.users.commit()
        except DuplicateRow:
            raise ValidationError(DUPLICATE_EMAIL)
        log.info("Registered user %s (unit %s)", user.id, user.weight_unit)
        return user

    def authenticate(self, email: str, password: str) -> User | None:
        user = self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            log.warning("failed login attempt")
            return None
        return user

    def update_preferences(self, user_id: int, payload: PreferencesUpdate) -> User:
        user = self.users.get(user_id)
        user.weight_unit = payload.weight_unit.value
        self.users.commit()
        log.info("User %s now logs weights in %s", user_id, user.weight_unit)
        return user
