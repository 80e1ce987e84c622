"""User Pydantic schemas."""


from datetime import datetime

from pydantic import EmailStr, Field

from crm_api.domain.enums import UserRole
from crm_api.schemas.common import CamelModel

class UserCreate(CamelModel):
    username: str = Field(min_length=3, max_length=100)
    email: EmailStr
    role: UserRole = UserRole.TEAM_MEMBER

class UserOut(CamelModel):
    id: str
    username: str
    email: str
    role: UserRole
    created_at: datetime
