"""
Per-request GraphQL context: the database session and the signed-in user.
"""

from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session
from strawberry.fastapi import BaseContext

from api.dependencies import get_db, get_optional_user
from app.exceptions import UnauthorizedError
from domain.models import User


class GraphQLContext(BaseContext):
    def __init__(self, db: Session, user: Optional[User] = None):
        super().__init__()
        self.db = db
        self.user = user

    def require_user(self) -> User:
        """The signed-in user; anonymous callers get ``Not authenticated``"""
        if self.user is None:
            raise UnauthorizedError("Not authenticated")
        return self.user


async def get_context(
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
) -> GraphQLContext:
    return GraphQLContext(db=db, user=user)
