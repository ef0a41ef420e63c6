from pydantic import BaseModel, Field

from app.models import UserRole


class UserResponse(BaseModel):
    id: int
    full_name: str
    username: str
    role: str
    is_active: bool


class UserCreate(BaseModel):
    full_name: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=4)
    role: UserRole = UserRole.OPERATOR
