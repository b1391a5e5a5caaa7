# app/api/routes.py
import os
from typing import Annotated, List, Optional

from dotenv import load_dotenv
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.orm import Session

from .. import crud, schemas, services
from ..auth import (
    SessionResult, get_session, require_session, require_capability, revoke_session, JWT_EXPIRES_SECONDS,
)
from ..cache import SessionCache, get_session_cache
from ..db import get_db, is_alive
from ..inventory import format_public
from ..models import User
from ..pagination import paginate, DEFAULT_PAGE_SIZE
from ..permissions import (
    authorize, STAFF, ADMIN, VIEW_FULL_INVENTORY, MANAGE_INVENTORY, VIEW_SALES, BUY_CAR, VIEW_STAFF, MANAGE_STAFF,
)
from ..utils import ConflictError, NotFoundError

load_dotenv()
COOKIE_SECURE = os.getenv("COOKIE_SECURE", "0") == "1"

router = APIRouter()

Db = Annotated[Session, Depends(get_db)]
Cache = Annotated[SessionCache, Depends(get_session_cache)]
OptionalSession = Annotated[SessionResult, Depends(get_session)]
ActiveSession = Annotated[SessionResult, Depends(require_session)]


def _current_user(db: Session, session: SessionResult):
    user = crud.get_user(db, session.subject.id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def _sale_out(sale) -> schemas.SaleOut:
    return schemas.SaleOut(
        id=sale.id,
        carId=sale.car_id,
        userId=sale.user_id,
        price=sale.price,
        createdAt=sale.created_at,
        car=format_public(sale.car) if sale.car else None,
    )


@router.get("/")
def home():
    return {"message": "Welcome to RideFleet dealership"}


@router.get("/stat")
def stat(db: Db):
    if not is_alive(db):
        return {"dbStatus": "Disconnected"}
    return {"dbStatus": "Connected", "users": crud.count_users(db), "cars": crud.count_unsold(db)}

# accounts

@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(payload: schemas.UserCreate, session: OptionalSession, db: Db, response: Response):
    if session.valid:
        response.status_code = status.HTTP_200_OK
        return {"message": "This user is already logged in"}
    try:
        user = services.register_account(db, payload)
    except ConflictError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"message": f"User with email '{user.email}' created successfully"}


@router.post("/admin/register/{admin_slug}", status_code=status.HTTP_201_CREATED)
def admin_register(admin_slug: str, payload: schemas.AdminCreate, session: OptionalSession, db: Db, response: Response):
    if session.valid:
        if not authorize(session.subject.role, VIEW_STAFF):
            raise HTTPException(status_code=403, detail="Forbidden, access denied.")
        response.status_code = status.HTTP_200_OK
        return {"message": "This admin/staff is already logged in"}
    expected = os.getenv("ADMIN_SLUG")
    if not expected or admin_slug != expected:
        raise HTTPException(status_code=401, detail="Unauthorized")
    role = ADMIN if payload.admin else STAFF
    try:
        user = services.register_account(db, payload, role=role)
    except ConflictError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"message": f"{role.capitalize()} with email '{user.email}' created successfully"}


@router.post("/login")
def login(payload: schemas.LoginIn, session: OptionalSession, db: Db, cache: Cache, response: Response):
    if session.valid:
        return {"message": "This user is already logged in"}
    try:
        token = services.login(db, payload.email, payload.password, cache)
    except RuntimeError:
        raise HTTPException(status_code=500, detail="Internal server error, could not establish session")
    if not token:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    response.set_cookie(
        "token", token, httponly=True, secure=COOKIE_SECURE, samesite="strict", max_age=JWT_EXPIRES_SECONDS,
    )
    return {"token": token}


@router.get("/logout")
def logout(session: ActiveSession, cache: Cache, response: Response):
    revoke_session(session.subject.email, cache)
    response.delete_cookie("token")
    return {"message": "Logged out successfully"}


@router.get("/user")
def get_user(session: ActiveSession, db: Db):
    user = _current_user(db, session)
    return {"myInfo": schemas.UserOut.model_validate(user)}


@router.put("/user/update")
def update_user(payload: schemas.UserUpdate, session: ActiveSession, db: Db, cache: Cache):
    if not payload.model_dump(exclude_none=True):
        raise HTTPException(status_code=400, detail="At least one field (email, name, or password) must be provided for update.")
    user = _current_user(db, session)
    try:
        result = services.update_account(db, user, payload, cache)
    except ConflictError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not result["changes"]:
        return {"message": "No changes made"}
    if result["revoked"]:
        return {"message": "User data updated successfully, please log in again"}
    return {"message": "User data updated successfully"}


@router.get("/user/purchases")
def user_purchases(session: ActiveSession, db: Db):
    sales = crud.list_sales(db, user_id=session.subject.id)
    return {"totalPurchases": len(sales), "purchases": [_sale_out(s) for s in sales]}


@router.delete("/user/delete")
def delete_user(session: ActiveSession, db: Db, cache: Cache):
    user = _current_user(db, session)
    email = user.email
    services.delete_account(db, user, cache)
    return {"message": f"User with email '{email}' deleted successfully"}


@router.get("/admin/staff")
def get_staff(session: Annotated[SessionResult, Depends(require_capability(VIEW_STAFF))], db: Db):
    users = crud.find_users(db, User.role.in_([ADMIN, STAFF]))
    staff = [schemas.UserOut.model_validate(u) for u in users]
    return {
        "totalStaff": len(staff),
        "admin": [u for u in staff if u.role == ADMIN],
        "staff": [u for u in staff if u.role == STAFF],
    }


@router.delete("/admin/delete/{staff_id}")
def delete_staff(staff_id: int, session: Annotated[SessionResult, Depends(require_capability(MANAGE_STAFF))], db: Db, cache: Cache):
    try:
        services.delete_staff(db, staff_id, cache)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"message": f"Staff with id '{staff_id}' deleted successfully"}

# inventory

@router.get("/cars")
def cars(
    request: Request,
    session: OptionalSession,
    db: Db,
    page: Optional[int] = Query(None, ge=1),
    size: Optional[int] = Query(None, ge=1),
):
    result = services.search_inventory(db, request.query_params)
    if session.valid and authorize(session.subject.role, VIEW_FULL_INVENTORY):
        data: List = [schemas.CarOut.model_validate(c) for c in result["filtered"]]
    else:
        data = result["formatted"]
    if page is None and size is None:
        return data
    return paginate(data, page or 1, size or DEFAULT_PAGE_SIZE)


@router.post("/inventory/cars/create", status_code=status.HTTP_201_CREATED)
def create_car(payload: schemas.CarCreate, session: Annotated[SessionResult, Depends(require_capability(MANAGE_INVENTORY))], db: Db):
    car = services.add_car(db, payload, actor_id=session.subject.id)
    return {"message": f"Car '{car.brand} {car.model}' created and added to inventory successfully", "id": car.id}


@router.post("/inventory/cars/buy/{car_id}", status_code=status.HTTP_201_CREATED)
def buy_car(car_id: int, session: Annotated[SessionResult, Depends(require_capability(BUY_CAR))], db: Db):
    try:
        sale = services.purchase_car(db, car_id, buyer_id=session.subject.id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"message": f"Car with id '{car_id}' purchased successfully", "sale": _sale_out(sale)}


@router.get("/inventory/cars/sales")
def car_sales(session: Annotated[SessionResult, Depends(require_capability(VIEW_SALES))], db: Db):
    sales = crud.list_sales(db)
    return {
        "totalSales": len(sales),
        "revenue": sum(s.price for s in sales),
        "sales": [_sale_out(s) for s in sales],
    }


@router.put("/inventory/cars/update/{car_id}")
def update_car(car_id: int, payload: schemas.CarUpdate, session: Annotated[SessionResult, Depends(require_capability(MANAGE_INVENTORY))], db: Db):
    if not payload.model_dump(exclude_none=True):
        raise HTTPException(status_code=400, detail="At least one field (brand, model, bodyType...) must be provided for a car update.")
    try:
        changed = services.update_car_data(db, car_id, payload, actor_id=session.subject.id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if not changed:
        return {"message": "No changes made"}
    return {"message": f"Car with id '{car_id}' updated successfully"}


@router.delete("/inventory/cars/delete/{car_id}")
def delete_car(car_id: int, session: Annotated[SessionResult, Depends(require_capability(MANAGE_INVENTORY))], db: Db):
    try:
        services.remove_car(db, car_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"message": f"Car with id '{car_id}' deleted successfully"}
