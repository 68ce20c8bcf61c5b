"""
User account model.
"""

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum as SQLEnum,
    Float,
    Integer,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from domain.models.database import Base, utc_now
from domain.enums import Gender, Goal, ActivityLevel


class User(Base):
    """User account with the profile used to personalise generated plans"""

    __tablename__ = "app_user"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(Text, unique=True, nullable=False, index=True)
    name = Column(Text, nullable=False)
    password = Column(Text, nullable=False)
    age = Column(Integer)
    weight = Column(Float)  # kg
    height = Column(Float)  # cm
    gender = Column(SQLEnum(Gender, name="gender"))
    nationality = Column(Text)
    goal = Column(SQLEnum(Goal, name="goal"))
    activity_level = Column(SQLEnum(ActivityLevel, name="activity_level"))
    preferences = Column(Text, nullable=False, default="[]")  # JSON array stored as text
    email_verified = Column(Boolean, nullable=False, default=False)
    verification_token = Column(Text, unique=True)
    reset_token = Column(Text, unique=True)
    reset_token_expiry = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(
        DateTime, nullable=False, default=utc_now, onupdate=utc_now
    )

    # Relationships
    diet_plans = relationship(
        "DietPlan",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="DietPlan.created_at.desc()",
    )
    feedback = relationship("Feedback", back_populates="user")
