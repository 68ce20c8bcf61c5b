"""
Feedback repository
"""

from typing import List
from sqlalchemy.orm import Session

from domain.models import Feedback
from repositories.base import BaseRepository


class FeedbackRepository(BaseRepository[Feedback]):
    def __init__(self, db: Session):
        super().__init__(db, Feedback)

    def recent(self, limit: int = 50) -> List[Feedback]:
        """Latest submissions first"""
        return (
            self.db.query(Feedback)
            .order_by(Feedback.created_at.desc())
            .limit(limit)
            .all()
        )
