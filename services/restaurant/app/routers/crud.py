from datetime import timedelta
from typing import List, Optional, Set

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from app.core.clock import utcnow
from app.core.exceptions import (
    DependencyMissingError,
    EntityNotFoundError,
    PermissionDeniedError,
    TenantAssignmentError,
    TenantScopeError,
)
from app.core.security import get_password_hash
from app.core.tenancy import TenantScope
from app.models.customer import Customer
from app.models.enums import SubscriptionStatus, SubscriptionTier, UserRole
from app.models.restaurant import Restaurant
from app.models.subscription import Subscription
from app.models.user import User
from app.schemas.customer_schema import CustomerCreate, CustomerUpdate
from app.schemas.restaurant_schema import RestaurantCreate, RestaurantUpdate
from app.schemas.subscription_schema import SubscriptionCreate
from app.schemas.user_schema import UserCreate, UserUpdate
from app.services import access_control

RESTAURANT_NOT_FOUND = "Restaurante não encontrado"
USER_NOT_FOUND = "Usuário não encontrado"
CUSTOMER_NOT_FOUND = "Cliente não encontrado"

BILLING_PERIOD = timedelta(days=30)
PAID_TIERS = {SubscriptionTier.BASIC, SubscriptionTier.PROFESSIONAL}


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise


def _locked(query: Query):
    # SELECT ... FOR UPDATE; a escrita acontece na mesma transação
    return query.with_for_update().first()


def _ensure_restaurant_exists(db: Session, restaurant_id: int) -> None:
    if db.query(Restaurant.id).filter(Restaurant.id == restaurant_id).first() is None:
        raise DependencyMissingError(RESTAURANT_NOT_FOUND)


def _check_role_assignment(role: UserRole, restaurant_id: Optional[int]) -> None:
    if (role == UserRole.SUPER_ADMIN) != (restaurant_id is None):
        raise TenantAssignmentError("restaurant_id deve ser nulo apenas para SUPER_ADMIN")


def _role_permissions(db: Session, role: Optional[UserRole], cache=None) -> Set[str]:
    if role is None:
        return set()
    return {permission.name for permission in access_control.permissions_for_role(db, role, cache)}


def _ensure_can_manage(
    db: Session,
    scope: TenantScope,
    actor_role: Optional[UserRole],
    role: UserRole,
    cache=None,
) -> None:
    # usuário do tenant só gerencia papéis contidos nas próprias permissões
    if scope.unrestricted:
        return
    missing = _role_permissions(db, role, cache) - _role_permissions(db, actor_role, cache)
    if missing:
        raise PermissionDeniedError(f"Sem permissão para gerenciar usuários com papel {role.value}")


def _url_to_str(data: dict) -> dict:
    if data.get("logo_url") is not None:
        data["logo_url"] = str(data["logo_url"])
    return data


# ---------------------------------------------------------------------------
# Restaurant
# ---------------------------------------------------------------------------


def create_restaurant(db: Session, payload: RestaurantCreate) -> Restaurant:
    """Cria o restaurante, a assinatura FREE e, opcionalmente, o dono."""
    now = utcnow()
    restaurant = Restaurant(
        **_url_to_str(payload.model_dump(exclude={"owner"})),
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    db.add(restaurant)
    try:
        db.flush()
        db.add(
            Subscription(
                restaurant_id=restaurant.id,
                tier=SubscriptionTier.FREE,
                status=SubscriptionStatus.ACTIVE,
                current_period_start=None,
                current_period_end=None,
                created_at=now,
                updated_at=now,
            )
        )
        if payload.owner is not None:
            db.add(
                User(
                    email=payload.owner.email,
                    password_hash=get_password_hash(payload.owner.password),
                    first_name=payload.owner.first_name,
                    last_name=payload.owner.last_name,
                    role=UserRole.RESTAURANT_OWNER,
                    restaurant_id=restaurant.id,
                    is_active=True,
                    created_at=now,
                    updated_at=now,
                )
            )
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    db.refresh(restaurant)
    return restaurant


def get_restaurant(db: Session, restaurant_id: int, scope: TenantScope) -> Optional[Restaurant]:
    query = db.query(Restaurant).filter(Restaurant.id == restaurant_id, Restaurant.is_active.is_(True))
    return scope.apply(query, Restaurant.id).first()


def get_restaurant_by_user_id(db: Session, user_id: int, scope: TenantScope) -> Optional[Restaurant]:
    query = (
        db.query(Restaurant)
        .join(User, User.restaurant_id == Restaurant.id)
        .filter(User.id == user_id, Restaurant.is_active.is_(True))
    )
    return scope.apply(query, Restaurant.id).first()


def update_restaurant(
    db: Session,
    restaurant_id: int,
    payload: RestaurantUpdate,
    scope: TenantScope,
) -> Restaurant:
    # sem filtro de is_active: a atualização pode reativar o restaurante
    restaurant = _locked(scope.apply(db.query(Restaurant).filter(Restaurant.id == restaurant_id), Restaurant.id))
    if restaurant is None:
        raise EntityNotFoundError(RESTAURANT_NOT_FOUND)

    for field, value in _url_to_str(payload.model_dump(exclude_unset=True)).items():
        setattr(restaurant, field, value)
    restaurant.updated_at = utcnow()

    _commit(db)
    db.refresh(restaurant)
    return restaurant


# ---------------------------------------------------------------------------
# User / staff
# ---------------------------------------------------------------------------


def create_user(
    db: Session,
    payload: UserCreate,
    scope: TenantScope,
    actor_role: Optional[UserRole] = None,
    cache=None,
) -> User:
    role = payload.role or UserRole.STAFF
    _check_role_assignment(role, payload.restaurant_id)

    if role == UserRole.SUPER_ADMIN and not scope.unrestricted:
        raise TenantScopeError("Apenas SUPER_ADMIN pode criar outro SUPER_ADMIN")
    if payload.restaurant_id is not None:
        scope.ensure_permits(payload.restaurant_id, RESTAURANT_NOT_FOUND)
        _ensure_restaurant_exists(db, payload.restaurant_id)
    _ensure_can_manage(db, scope, actor_role, role, cache)

    now = utcnow()
    user = User(
        email=payload.email,
        password_hash=get_password_hash(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        role=role,
        restaurant_id=payload.restaurant_id,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    _commit(db)
    db.refresh(user)
    return user


def update_user(
    db: Session,
    user_id: int,
    payload: UserUpdate,
    scope: TenantScope,
    actor_role: Optional[UserRole] = None,
    cache=None,
) -> User:
    user = _locked(scope.apply(db.query(User).filter(User.id == user_id), User.restaurant_id))
    if user is None:
        raise EntityNotFoundError(USER_NOT_FOUND)

    update_data = payload.model_dump(exclude_unset=True)

    # o invariante papel/restaurante vale para o resultado já mesclado
    role = update_data.get("role", user.role)
    restaurant_id = update_data.get("restaurant_id", user.restaurant_id)
    _check_role_assignment(role, restaurant_id)

    if role == UserRole.SUPER_ADMIN and not scope.unrestricted:
        raise TenantScopeError("Apenas SUPER_ADMIN pode conceder o papel SUPER_ADMIN")
    if restaurant_id is not None and restaurant_id != user.restaurant_id:
        scope.ensure_permits(restaurant_id, RESTAURANT_NOT_FOUND)
        _ensure_restaurant_exists(db, restaurant_id)
    _ensure_can_manage(db, scope, actor_role, user.role, cache)
    _ensure_can_manage(db, scope, actor_role, role, cache)

    if "password" in update_data:
        user.password_hash = get_password_hash(update_data.pop("password"))

    for field, value in update_data.items():
        setattr(user, field, value)
    user.updated_at = utcnow()

    _commit(db)
    db.refresh(user)
    return user


def _staff_query(db: Session, scope: TenantScope) -> Query:
    query = db.query(User).filter(User.role != UserRole.SUPER_ADMIN)
    return scope.apply(query, User.restaurant_id)


def list_staff(db: Session, scope: TenantScope, limit: int = 50, offset: int = 0) -> List[User]:
    return _staff_query(db, scope).order_by(User.id.asc()).offset(offset).limit(limit).all()


def get_staff_member(db: Session, user_id: int, scope: TenantScope) -> Optional[User]:
    return _staff_query(db, scope).filter(User.id == user_id).first()


# ---------------------------------------------------------------------------
# Customer
# ---------------------------------------------------------------------------


def create_customer(db: Session, payload: CustomerCreate, scope: TenantScope) -> Customer:
    scope.ensure_permits(payload.restaurant_id, RESTAURANT_NOT_FOUND)
    _ensure_restaurant_exists(db, payload.restaurant_id)

    now = utcnow()
    customer = Customer(
        **payload.model_dump(),
        loyalty_points=0,
        total_visits=0,
        last_visit_date=None,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    db.add(customer)
    _commit(db)
    db.refresh(customer)
    return customer


def list_customers(db: Session, scope: TenantScope, limit: int = 50, offset: int = 0) -> List[Customer]:
    query = scope.apply(db.query(Customer), Customer.restaurant_id)
    return (
        query.order_by(Customer.created_at.desc(), Customer.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )


def get_customer(db: Session, customer_id: int, scope: TenantScope) -> Optional[Customer]:
    query = db.query(Customer).filter(Customer.id == customer_id)
    return scope.apply(query, Customer.restaurant_id).first()


def _locked_customer(db: Session, customer_id: int, scope: TenantScope) -> Customer:
    customer = _locked(scope.apply(db.query(Customer).filter(Customer.id == customer_id), Customer.restaurant_id))
    if customer is None:
        raise EntityNotFoundError(CUSTOMER_NOT_FOUND)
    return customer


def update_customer(db: Session, customer_id: int, payload: CustomerUpdate, scope: TenantScope) -> Customer:
    customer = _locked_customer(db, customer_id, scope)

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(customer, field, value)
    customer.updated_at = utcnow()

    _commit(db)
    db.refresh(customer)
    return customer


def record_customer_visit(db: Session, customer_id: int, scope: TenantScope, points: int = 0) -> Customer:
    if points < 0:
        raise ValueError("Pontos de fidelidade não podem ser negativos")

    customer = _locked_customer(db, customer_id, scope)

    now = utcnow()
    customer.total_visits = (customer.total_visits or 0) + 1
    customer.loyalty_points = (customer.loyalty_points or 0) + points
    customer.last_visit_date = now
    customer.updated_at = now

    _commit(db)
    db.refresh(customer)
    return customer


# ---------------------------------------------------------------------------
# Subscription
# ---------------------------------------------------------------------------


def create_subscription(db: Session, payload: SubscriptionCreate, scope: TenantScope) -> Subscription:
    scope.ensure_permits(payload.restaurant_id, RESTAURANT_NOT_FOUND)
    _ensure_restaurant_exists(db, payload.restaurant_id)

    now = utcnow()
    period_start = period_end = None
    if payload.tier in PAID_TIERS:
        period_start = now
        period_end = now + BILLING_PERIOD

    try:
        # no máximo uma assinatura ACTIVE por restaurante
        previous = (
            db.query(Subscription)
            .filter(
                Subscription.restaurant_id == payload.restaurant_id,
                Subscription.status == SubscriptionStatus.ACTIVE,
            )
            .with_for_update()
            .all()
        )
        for subscription in previous:
            subscription.status = SubscriptionStatus.CANCELED
            subscription.updated_at = now

        subscription = Subscription(
            restaurant_id=payload.restaurant_id,
            tier=payload.tier,
            status=SubscriptionStatus.ACTIVE,
            stripe_customer_id=payload.stripe_customer_id,
            current_period_start=period_start,
            current_period_end=period_end,
            created_at=now,
            updated_at=now,
        )
        db.add(subscription)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    db.refresh(subscription)
    return subscription


def get_subscription_by_restaurant(db: Session, restaurant_id: int, scope: TenantScope) -> Optional[Subscription]:
    query = scope.apply(
        db.query(Subscription).filter(Subscription.restaurant_id == restaurant_id),
        Subscription.restaurant_id,
    )
    newest_first = (Subscription.created_at.desc(), Subscription.id.desc())

    active = query.filter(Subscription.status == SubscriptionStatus.ACTIVE).order_by(*newest_first).first()
    if active is not None:
        return active
    return query.order_by(*newest_first).first()
