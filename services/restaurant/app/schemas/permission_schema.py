from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict

from app.models.enums import UserRole


class PermissionOut(BaseModel):
    id: int
    name: str
    description: Optional[str]
    resource: str
    action: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RolePermissionOut(BaseModel):
    id: int
    role: UserRole
    permission_id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
