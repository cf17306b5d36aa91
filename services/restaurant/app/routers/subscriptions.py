from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.auth_dependencies import get_tenant_scope, require_permission
from app.core.database import get_db
from app.core.exceptions import ServiceError
from app.core.tenancy import TenantScope
from app.schemas.subscription_schema import SubscriptionCreate, SubscriptionOut
from . import crud
from .errors import to_http_exception

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])


@router.post("/", response_model=SubscriptionOut, status_code=status.HTTP_201_CREATED)
def create_subscription(
    payload: SubscriptionCreate,
    db: Session = Depends(get_db),
    _=Depends(require_permission("billing:write")),
    scope: TenantScope = Depends(get_tenant_scope),
):
    try:
        return crud.create_subscription(db, payload, scope)
    except ServiceError as exc:
        raise to_http_exception(exc)
    except IntegrityError:
        raise HTTPException(status_code=400, detail="Erro ao criar assinatura")


@router.get("/restaurant/{restaurant_id}", response_model=SubscriptionOut)
def get_subscription_by_restaurant(
    restaurant_id: int,
    db: Session = Depends(get_db),
    _=Depends(require_permission("billing:read")),
    scope: TenantScope = Depends(get_tenant_scope),
):
    subscription = crud.get_subscription_by_restaurant(db, restaurant_id, scope)
    if not subscription:
        raise HTTPException(status_code=404, detail="Assinatura não encontrada")
    return subscription
