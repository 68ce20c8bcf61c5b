"""
User Repository - Data access layer for user accounts and their tokens
"""

from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from repositories.base import BaseRepository
from domain.models import User
from app.exceptions import ConflictError


class UserRepository(BaseRepository[User]):
    """Repository for user data access"""

    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by (already normalised) email"""
        return self.db.query(User).filter(User.email == email).first()

    def get_by_verification_token(self, token: str) -> Optional[User]:
        return self.db.query(User).filter(User.verification_token == token).first()

    def get_by_reset_token(self, token: str) -> Optional[User]:
        return self.db.query(User).filter(User.reset_token == token).first()

    def create_user(self, user: User) -> User:
        """Insert a new user, mapping unique violations to ConflictError"""
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
            return user
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("User with this email already exists")
