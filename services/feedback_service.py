import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.exceptions import ServiceValidationError
from domain.models import Feedback
from domain.schemas.feedback_schemas import FeedbackCreate
from repositories import FeedbackRepository
from services.security import normalize_email, sanitize_input, validate_email

logger = logging.getLogger("dietplanner.feedback")


class FeedbackService:
    """Contact form submissions"""

    @staticmethod
    def submit(db: Session, user_id: Optional[UUID], data: FeedbackCreate) -> bool:
        """Store a contact message; signed-in callers are linked to it"""
        email = normalize_email(data.email)
        if not validate_email(email):
            raise ServiceValidationError("Invalid email format")

        name = sanitize_input(data.name)
        subject = sanitize_input(data.subject)
        message = sanitize_input(data.message)
        if not (name and subject and message):
            raise ServiceValidationError("Name, subject and message are required")

        feedback = FeedbackRepository(db).create(
            Feedback(
                user_id=user_id,
                name=name,
                email=email,
                subject=subject,
                category=data.category,
                message=message,
            )
        )
        logger.info(f"feedback_submitted id={feedback.id} category={feedback.category.value} user_id={user_id}")
        return True

    @staticmethod
    def recent(db: Session, limit: int = 50) -> List[Feedback]:
        return FeedbackRepository(db).recent(limit)
