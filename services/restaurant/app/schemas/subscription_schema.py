from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import SubscriptionStatus, SubscriptionTier


class SubscriptionCreate(BaseModel):
    restaurant_id: int = Field(..., examples=[1])
    tier: SubscriptionTier = Field(..., examples=["BASIC"])
    stripe_customer_id: Optional[str] = Field(default=None, examples=["cus_123"])


class SubscriptionOut(BaseModel):
    id: int
    restaurant_id: int
    tier: SubscriptionTier
    status: SubscriptionStatus
    stripe_subscription_id: Optional[str]
    stripe_customer_id: Optional[str]
    current_period_start: Optional[datetime]
    current_period_end: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
