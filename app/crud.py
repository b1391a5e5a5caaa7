# app/crud.py
"""Database operations for users, cars and sales.

Catalog reads (`find_cars`, `count_unsold`) are restricted to unsold cars
unless told otherwise. Nothing here catches database errors; they propagate
to the caller.
"""
from sqlalchemy import select, update, func
from .models import User, Car, Sale
from sqlalchemy.orm import Session
from typing import Dict, Any, List, Optional

# users

def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.execute(select(User).where(User.email == email)).scalar_one_or_none()

def find_users(db: Session, *conditions) -> List[User]:
    return list(db.execute(select(User).where(*conditions).order_by(User.id)).scalars())

def count_users(db: Session) -> int:
    return db.execute(select(func.count(User.id))).scalar_one()

def create_user(db: Session, data: Dict[str, Any]) -> User:
    obj = User(**data)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj

def update_user(db: Session, user: User, updates: Dict[str, Any]) -> User:
    for k, v in updates.items():
        setattr(user, k, v)
    db.commit()
    db.refresh(user)
    return user

def delete_user(db: Session, user: User):
    db.delete(user)
    db.commit()

# cars

def get_car(db: Session, car_id: int) -> Optional[Car]:
    return db.get(Car, car_id)

def find_cars(db: Session, *conditions, unsold_only: bool = True) -> List[Car]:
    stmt = select(Car).where(*conditions)
    if unsold_only:
        stmt = stmt.where(Car.sold.is_(False))
    return list(db.execute(stmt.order_by(Car.id)).scalars())

def count_unsold(db: Session) -> int:
    return db.execute(select(func.count(Car.id)).where(Car.sold.is_(False))).scalar_one()

def count_cars(db: Session) -> int:
    return db.execute(select(func.count(Car.id))).scalar_one()

def create_car(db: Session, data: Dict[str, Any]) -> Car:
    obj = Car(**data)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj

def create_cars(db: Session, items: List[Dict[str, Any]]) -> int:
    db.add_all([Car(**it) for it in items])
    db.commit()
    return len(items)

def update_car(db: Session, car: Car, updates: Dict[str, Any]) -> Car:
    for k, v in updates.items():
        setattr(car, k, v)
    db.commit()
    db.refresh(car)
    return car

def delete_car(db: Session, car: Car):
    db.delete(car)
    db.commit()

# sales

def record_sale(db: Session, car: Car, buyer: User) -> Optional[Sale]:
    """Mark `car` sold and add its ledger entry in one transaction.

    Returns None when the car was already sold; the conditional UPDATE makes
    sure only one purchase can flip the flag.
    """
    result = db.execute(
        update(Car)
        .where(Car.id == car.id, Car.sold.is_(False))
        .values(sold=True)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        return None
    sale = Sale(car_id=car.id, user_id=buyer.id, price=car.price)
    db.add(sale)
    db.commit()
    db.refresh(sale)
    db.refresh(car)
    return sale

def list_sales(db: Session, user_id: Optional[int] = None) -> List[Sale]:
    stmt = select(Sale)
    if user_id is not None:
        stmt = stmt.where(Sale.user_id == user_id)
    return list(db.execute(stmt.order_by(Sale.id.desc())).scalars())
