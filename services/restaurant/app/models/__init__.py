from app.models.enums import SubscriptionStatus, SubscriptionTier, UserRole
from app.models.restaurant import Restaurant
from app.models.user import User
from app.models.customer import Customer
from app.models.subscription import Subscription
from app.models.permission import Permission, RolePermission

__all__ = [
    "SubscriptionStatus",
    "SubscriptionTier",
    "UserRole",
    "Restaurant",
    "User",
    "Customer",
    "Subscription",
    "Permission",
    "RolePermission",
]
