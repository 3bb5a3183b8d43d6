from pydantic import BaseModel, EmailStr, ConfigDict, Field
from typing import Optional


class UserBase(BaseModel):
    email: EmailStr


class UserCreate(UserBase):
    password: str = Field(min_length=8)
    username: str = Field(min_length=3, max_length=32)
    full_name: str | None = None
    team_id: Optional[int] = None


class User(UserBase):
    id: int
    is_active: bool
    team_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class UserRegisterResponse(BaseModel):
    id: int
    email: EmailStr
    username: str
    full_name: Optional[str] = None
    team_id: Optional[int] = None
    model_config = ConfigDict(from_attributes=True)


class UserMeResponse(BaseModel):
    id: int
    email: EmailStr
    username: str
    full_name: Optional[str] = None
    is_active: bool
    team_id: Optional[int] = None
    model_config = ConfigDict(from_attributes=True)


class TeamUpdate(BaseModel):
    team_id: int


class Token(BaseModel):
    access_token: str
    token_type: str
