# app/services.py
"""Use cases composed from crud, auth and the search pipeline.

Functions here raise `DealershipError` subclasses for business failures; the
routes translate them into HTTP responses.
"""
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.orm import Session

from . import crud, schemas
from .auth import hash_password, verify_password, create_access_token, establish_session, revoke_session
from .cache import SessionCache
from .inventory import select_fields, resolve_candidates, reconcile
from .models import Car, User
from .permissions import USER, STAFF, ADMIN
from .utils import logger, ConflictError, NotFoundError


def search_inventory(db: Session, query: Mapping[str, Any]) -> Dict[str, list]:
    """Run the search pipeline; both views come back newest car first."""
    fields = select_fields(query)
    if fields:
        candidates = resolve_candidates(db, fields, query)
    else:
        candidates = crud.find_cars(db)
    result = reconcile(candidates, fields, query)
    result["filtered"].sort(key=lambda car: car.id, reverse=True)
    result["formatted"].sort(key=lambda car: int(car["id"]), reverse=True)
    return result

# accounts

def register_account(db: Session, payload: schemas.UserCreate, role: str = USER) -> User:
    if crud.get_user_by_email(db, payload.email):
        raise ConflictError(f"User with email '{payload.email}' already exists")
    if role == ADMIN and crud.find_users(db, User.role == ADMIN):
        raise ConflictError("Admin user already exists")
    user = crud.create_user(db, {
        "name": payload.name,
        "email": payload.email,
        "password": hash_password(payload.password),
        "role": role,
    })
    logger.info("Registered %s account %s", role, user.email)
    return user


def login(db: Session, email: str, password: str, cache: SessionCache) -> Optional[str]:
    """Sign and cache a token for valid credentials.

    Returns None for bad credentials. Raises RuntimeError when the token could
    not be cached, since such a token would never validate.
    """
    user = crud.get_user_by_email(db, email)
    if not user or not verify_password(password, user.password):
        return None
    token = create_access_token(user.id, user.email, user.role)
    if not establish_session(token, user.email, cache):
        raise RuntimeError("session could not be established")
    logger.info("User %s logged in", user.email)
    return token


def update_account(db: Session, user: User, payload: schemas.UserUpdate, cache: SessionCache) -> Dict[str, bool]:
    """Apply changed fields. A new email or password revokes the current session."""
    updates: Dict[str, Any] = {}
    if payload.name and payload.name != user.name:
        updates["name"] = payload.name
    if payload.email and payload.email != user.email:
        if crud.get_user_by_email(db, payload.email):
            raise ConflictError(f"User with email '{payload.email}' already exists")
        updates["email"] = payload.email
    if payload.password and not verify_password(payload.password, user.password):
        updates["password"] = hash_password(payload.password)
    if not updates:
        return {"changes": False, "revoked": False}

    old_email = user.email
    crud.update_user(db, user, updates)
    revoked = False
    if "email" in updates or "password" in updates:
        revoke_session(old_email, cache)
        revoked = True
    return {"changes": True, "revoked": revoked}


def delete_account(db: Session, user: User, cache: SessionCache):
    email = user.email
    crud.delete_user(db, user)
    revoke_session(email, cache)
    logger.info("Deleted account %s", email)


def delete_staff(db: Session, staff_id: int, cache: SessionCache):
    staff = crud.get_user(db, staff_id)
    if not staff or staff.role != STAFF:
        raise NotFoundError("Staff not found")
    delete_account(db, staff, cache)

# inventory

def add_car(db: Session, payload: schemas.CarCreate, actor_id: int) -> Car:
    data = {schemas.CAR_COLUMNS[k]: v for k, v in payload.model_dump().items()}
    car = crud.create_car(db, {**data, "sold": False, "updated_by": actor_id})
    logger.info("Car %s %s (id=%s) added by user %s", car.brand, car.model, car.id, actor_id)
    return car


def update_car_data(db: Session, car_id: int, payload: schemas.CarUpdate, actor_id: int) -> bool:
    """Apply the fields that differ from the stored car; True when something changed."""
    car = crud.get_car(db, car_id)
    if not car:
        raise NotFoundError("Car not found")
    updates = {}
    for key, value in payload.model_dump(exclude_none=True).items():
        column = schemas.CAR_COLUMNS[key]
        if getattr(car, column) != value:
            updates[column] = value
    if not updates:
        return False
    updates["updated_by"] = actor_id
    crud.update_car(db, car, updates)
    logger.info("Car %s updated by user %s: %s", car_id, actor_id, sorted(updates))
    return True


def remove_car(db: Session, car_id: int):
    car = crud.get_car(db, car_id)
    if not car:
        raise NotFoundError("Car not found")
    crud.delete_car(db, car)
    logger.info("Car %s deleted", car_id)


def purchase_car(db: Session, car_id: int, buyer_id: int):
    car = crud.get_car(db, car_id)
    if not car:
        raise NotFoundError("Car not found")
    buyer = crud.get_user(db, buyer_id)
    if not buyer:
        raise NotFoundError("User not found")
    sale = crud.record_sale(db, car, buyer)
    if sale is None:
        raise ConflictError(f"Car with id '{car_id}' has already been sold")
    logger.info("Car %s sold to user %s for %s", car_id, buyer_id, sale.price)
    return sale
