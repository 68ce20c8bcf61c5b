"""
Contact form feedback model.
"""

import uuid

from sqlalchemy import Column, DateTime, Enum as SQLEnum, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship

from domain.models.database import Base, utc_now
from domain.enums import FeedbackCategory


class Feedback(Base):
    """Message submitted through the contact form, optionally by a signed-in user"""

    __tablename__ = "feedback"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("app_user.id", ondelete="SET NULL"))
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    subject = Column(Text, nullable=False)
    category = Column(
        SQLEnum(FeedbackCategory, name="feedback_category"),
        nullable=False,
        default=FeedbackCategory.GENERAL,
    )
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utc_now)

    user = relationship("User", back_populates="feedback")
