"""
Weekly diet plan models.
"""

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum as SQLEnum,
    Float,
    ForeignKey,
    Integer,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from domain.models.database import Base, utc_now
from domain.enums import DayOfWeek, MealType


class DietPlan(Base):
    """A named seven-day plan owned by one user"""

    __tablename__ = "diet_plan"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(Text, nullable=False)
    description = Column(Text)
    week_start = Column(DateTime, nullable=False)
    week_end = Column(DateTime, nullable=False)
    is_active = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(
        DateTime, nullable=False, default=utc_now, onupdate=utc_now
    )

    # Relationships
    user = relationship("User", back_populates="diet_plans")
    meals = relationship(
        "Meal", back_populates="diet_plan", cascade="all, delete-orphan"
    )


class Meal(Base):
    """One meal slot (day x meal type) of a diet plan"""

    __tablename__ = "meal"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    diet_plan_id = Column(
        Uuid, ForeignKey("diet_plan.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day = Column(SQLEnum(DayOfWeek, name="day_of_week"), nullable=False)
    meal_type = Column(SQLEnum(MealType, name="meal_type"), nullable=False)
    name = Column(Text, nullable=False)
    description = Column(Text)
    calories = Column(Integer)
    protein = Column(Float)
    carbs = Column(Float)
    fat = Column(Float)
    fiber = Column(Float)
    ingredients = Column(Text, nullable=False, default="[]")  # JSON array stored as text
    instructions = Column(Text)
    prep_time = Column(Integer)  # minutes
    cook_time = Column(Integer)  # minutes
    servings = Column(Integer)

    # Relationships
    diet_plan = relationship("DietPlan", back_populates="meals")
