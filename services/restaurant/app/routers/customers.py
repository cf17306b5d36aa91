from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.auth_dependencies import get_tenant_scope, narrow_scope, require_permission
from app.core.database import get_db
from app.core.exceptions import ServiceError
from app.core.tenancy import TenantScope
from app.schemas.customer_schema import CustomerCreate, CustomerOut, CustomerUpdate, CustomerVisit
from . import crud
from .errors import to_http_exception

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.post("/", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: CustomerCreate,
    db: Session = Depends(get_db),
    _=Depends(require_permission("customers:write")),
    scope: TenantScope = Depends(get_tenant_scope),
):
    try:
        return crud.create_customer(db, payload, scope)
    except ServiceError as exc:
        raise to_http_exception(exc)
    except IntegrityError:
        raise HTTPException(status_code=400, detail="Erro ao criar cliente")


@router.get("/", response_model=List[CustomerOut])
def list_customers(
    restaurant_id: Optional[int] = Query(default=None, description="Filtra por restaurante (SUPER_ADMIN)"),
    limit: int = Query(default=50, gt=0),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    _=Depends(require_permission("customers:read")),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return crud.list_customers(db, narrow_scope(scope, restaurant_id), limit=limit, offset=offset)


@router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    _=Depends(require_permission("customers:read")),
    scope: TenantScope = Depends(get_tenant_scope),
):
    customer = crud.get_customer(db, customer_id, scope)
    if not customer:
        raise HTTPException(status_code=404, detail=crud.CUSTOMER_NOT_FOUND)
    return customer


@router.put("/{customer_id}", response_model=CustomerOut)
def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    db: Session = Depends(get_db),
    _=Depends(require_permission("customers:write")),
    scope: TenantScope = Depends(get_tenant_scope),
):
    try:
        return crud.update_customer(db, customer_id, payload, scope)
    except ServiceError as exc:
        raise to_http_exception(exc)
    except IntegrityError:
        raise HTTPException(status_code=400, detail="Erro ao atualizar cliente")


@router.post("/{customer_id}/visits", response_model=CustomerOut)
def record_customer_visit(
    customer_id: int,
    payload: CustomerVisit,
    db: Session = Depends(get_db),
    _=Depends(require_permission("customers:write")),
    scope: TenantScope = Depends(get_tenant_scope),
):
    try:
        return crud.record_customer_visit(db, customer_id, scope, points=payload.points)
    except ServiceError as exc:
        raise to_http_exception(exc)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
