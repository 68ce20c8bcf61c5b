from __future__ import annotations

from pydantic import BaseModel, Field

from domain.enums import FeedbackCategory


class FeedbackCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=254)
    subject: str = Field(min_length=1, max_length=200)
    category: FeedbackCategory = FeedbackCategory.GENERAL
    message: str = Field(min_length=1, max_length=5000)
