"""Authentication schemas."""

from typing import Optional

from pydantic import BaseModel


class User(BaseModel):
    """Caller identity taken from verified token claims."""

    id: str
    email: Optional[str] = None
    is_admin: bool = False


class UserResponse(BaseModel):
    user: User
