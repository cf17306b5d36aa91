from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.schemas._email import SubmittedEmail
from app.schemas._partial import reject_explicit_nulls


class CustomerCreate(BaseModel):
    restaurant_id: int = Field(..., examples=[1])
    first_name: str = Field(..., min_length=1, examples=["Ana"])
    last_name: str = Field(..., min_length=1, examples=["Pereira"])
    email: Optional[SubmittedEmail] = Field(default=None, examples=["ana@exemplo.com"])
    phone: Optional[str] = Field(default=None, examples=["11912345678"])
    notes: Optional[str] = Field(default=None, examples=["Alergia a amendoim"])


class CustomerUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[SubmittedEmail] = None
    phone: Optional[str] = None
    loyalty_points: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None
    is_active: Optional[bool] = None

    @model_validator(mode="before")
    @classmethod
    def _campos_obrigatorios(cls, data):
        return reject_explicit_nulls(data, ("first_name", "last_name", "loyalty_points", "is_active"))


class CustomerVisit(BaseModel):
    points: int = Field(default=0, ge=0, examples=[10])


class CustomerOut(BaseModel):
    id: int
    restaurant_id: int
    first_name: str
    last_name: str
    email: Optional[str]
    phone: Optional[str]
    loyalty_points: int
    total_visits: int
    last_visit_date: Optional[datetime]
    notes: Optional[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
