"""Signed-in user model."""

from enum import Enum
from typing import Optional

from pydantic import Field

from synckaro.models.base import Entity


class UserRole(str, Enum):
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class CurrentUser(Entity):
    """The acting user supplied by the authentication backend."""

    id: str = Field(..., min_length=1, description="User ID")
    name: str = Field(default="", description="Display name")
    mobile: str = Field(default="", description="Mobile number")
    role: UserRole = Field(default=UserRole.TEACHER, description="User role")
    email: Optional[str] = Field(default=None, description="Email address")
