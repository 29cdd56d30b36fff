# liftlog/repositories/user_repo.py
from __future__ import annotations
from typing import Optional

from sqlalchemy import select, func

from liftlog.models import User
from liftlog.repositories.base import BaseRepository

class UserRepository(BaseRepository[User]):
    model = User

    def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == email.lower())
        return self.db.execute(stmt).scalar_one_or_none()

    def create(self, *, email: str, name: str, password_hash: str, weight_unit: str = "kg") -> User:
        # a clashing e-mail surfaces as DuplicateRow from the flush
        return self.add_and_refresh(
            User(email=email, name=name, password_hash=password_hash, weight_unit=weight_unit)
        )
