from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.auth_dependencies import get_tenant_scope, require_permission
from app.core.database import get_db
from app.core.exceptions import ServiceError
from app.core.tenancy import TenantScope
from app.schemas.restaurant_schema import RestaurantCreate, RestaurantOut, RestaurantUpdate
from . import crud, validators
from .errors import to_http_exception

router = APIRouter(prefix="/restaurants", tags=["Restaurants"])


@router.post("/", response_model=RestaurantOut, status_code=status.HTTP_201_CREATED)
def create_restaurant(payload: RestaurantCreate, db: Session = Depends(get_db)):
    # cadastro público: o restaurante nasce com plano FREE e, opcionalmente, com o dono
    if payload.owner is not None:
        validators.ensure_unique_email(db, payload.owner.email)

    try:
        return crud.create_restaurant(db, payload)
    except IntegrityError:
        raise HTTPException(status_code=400, detail="Erro ao criar restaurante")


@router.get("/by-user/{user_id}", response_model=RestaurantOut)
def get_restaurant_by_user(
    user_id: int,
    db: Session = Depends(get_db),
    scope: TenantScope = Depends(get_tenant_scope),
):
    restaurant = crud.get_restaurant_by_user_id(db, user_id, scope)
    if not restaurant:
        raise HTTPException(status_code=404, detail=crud.RESTAURANT_NOT_FOUND)
    return restaurant


@router.get("/{restaurant_id}", response_model=RestaurantOut)
def get_restaurant(
    restaurant_id: int,
    db: Session = Depends(get_db),
    scope: TenantScope = Depends(get_tenant_scope),
):
    restaurant = crud.get_restaurant(db, restaurant_id, scope)
    if not restaurant:
        raise HTTPException(status_code=404, detail=crud.RESTAURANT_NOT_FOUND)
    return restaurant


@router.put("/{restaurant_id}", response_model=RestaurantOut)
def update_restaurant(
    restaurant_id: int,
    payload: RestaurantUpdate,
    db: Session = Depends(get_db),
    _=Depends(require_permission("settings:write")),
    scope: TenantScope = Depends(get_tenant_scope),
):
    try:
        return crud.update_restaurant(db, restaurant_id, payload, scope)
    except ServiceError as exc:
        raise to_http_exception(exc)
    except IntegrityError:
        raise HTTPException(status_code=400, detail="Erro ao atualizar restaurante")
