"""Data access layer for users"""

from typing import Optional
from sqlalchemy.orm import Session
from connect_onboarding.infrastructure.database.models import User


class UserRepository:
    """Repository for registered users"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_email(self, email: str) -> Optional[User]:
        """Fetch a user by email"""
        return self.db.query(User).filter(User.email == email).first()

    def create_user(self, email: str, hashed_password: str, account_id: str, country: str) -> User:
        """Stage a new user row and flush it so constraint violations surface here"""
        user = User(
            email=email,
            password=hashed_password,
            account_id=account_id,
            country=country,
        )
        self.db.add(user)
        self.db.flush()
        return user

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
