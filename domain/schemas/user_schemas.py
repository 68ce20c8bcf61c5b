from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from domain.enums import ActivityLevel, Gender, Goal
from domain.schemas.plan_schemas import CamelModel


class ProfileFields(CamelModel):
    age: Optional[int] = Field(default=None, ge=1, le=130)
    weight: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)
    gender: Optional[Gender] = None
    nationality: Optional[str] = None
    goal: Optional[Goal] = None
    activity_level: Optional[ActivityLevel] = None


class RegistrationData(ProfileFields):
    email: str
    password: str
    name: str
    preferences: List[str] = Field(default_factory=list)


class ProfileUpdate(ProfileFields):
    name: Optional[str] = None
    preferences: Optional[List[str]] = None
