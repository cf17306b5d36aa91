from datetime import datetime
from typing import Optional, Self
from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.models.enums import UserRole
from app.schemas._email import SubmittedEmail
from app.schemas._partial import reject_explicit_nulls


class UserCreate(BaseModel):
    email: SubmittedEmail = Field(..., examples=["joao.silva@exemplo.com"])
    password: str = Field(..., min_length=8, examples=["senha123"])
    first_name: str = Field(..., min_length=1, examples=["João"])
    last_name: str = Field(..., min_length=1, examples=["Silva"])
    role: UserRole = Field(default=UserRole.STAFF, examples=["STAFF"])
    restaurant_id: Optional[int] = Field(default=None, examples=[1])

    @model_validator(mode="after")
    def validar_restaurante(self) -> Self:
        if (self.role == UserRole.SUPER_ADMIN) != (self.restaurant_id is None):
            raise ValueError("restaurant_id deve ser nulo apenas para SUPER_ADMIN")
        return self


class UserUpdate(BaseModel):
    email: Optional[SubmittedEmail] = None
    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    role: Optional[UserRole] = None
    restaurant_id: Optional[int] = None
    is_active: Optional[bool] = None
    password: Optional[str] = Field(default=None, min_length=8)

    @model_validator(mode="before")
    @classmethod
    def _campos_obrigatorios(cls, data):
        return reject_explicit_nulls(
            data, ("email", "first_name", "last_name", "role", "is_active", "password")
        )


class UserOut(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    role: UserRole
    restaurant_id: Optional[int]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
