from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, HttpUrl, model_validator

from app.schemas._email import SubmittedEmail
from app.schemas._partial import reject_explicit_nulls

HEX_COLOR_PATTERN = r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$"


class RestaurantOwnerCreate(BaseModel):
    email: SubmittedEmail = Field(..., examples=["dono@cantina.com"])
    password: str = Field(..., min_length=8, examples=["senha-forte-123"])
    first_name: str = Field(..., min_length=1, examples=["Maria"])
    last_name: str = Field(..., min_length=1, examples=["Souza"])


class RestaurantBase(BaseModel):
    name: str = Field(..., min_length=1, examples=["Cantina da Nona"])
    description: Optional[str] = Field(default=None, examples=["Massas artesanais"])
    email: SubmittedEmail = Field(..., examples=["contato@cantina.com"])
    phone: Optional[str] = Field(default=None, examples=["11987654321"])
    address: Optional[str] = Field(default=None, examples=["Rua das Flores, 123"])
    logo_url: Optional[HttpUrl] = Field(default=None, examples=["https://exemplo.com/logo.png"])
    brand_color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN, examples=["#FF5733"])


class RestaurantCreate(RestaurantBase):
    owner: Optional[RestaurantOwnerCreate] = None


class RestaurantUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    email: Optional[SubmittedEmail] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    logo_url: Optional[HttpUrl] = None
    brand_color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)
    is_active: Optional[bool] = None

    @model_validator(mode="before")
    @classmethod
    def _campos_obrigatorios(cls, data):
        return reject_explicit_nulls(data, ("name", "email", "is_active"))


class RestaurantOut(BaseModel):
    id: int
    name: str
    description: Optional[str]
    email: str
    phone: Optional[str]
    address: Optional[str]
    logo_url: Optional[str]
    brand_color: Optional[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
