# app/models.py
"""SQLAlchemy ORM models for persisted entities.

`User` holds accounts of every role, `Car` is an inventory record and `Sale`
is one entry of the purchase ledger.
"""
from sqlalchemy import Column, Integer, Text, Numeric, Boolean, TIMESTAMP, ForeignKey, func, Index
from sqlalchemy.orm import relationship
from .db import Base

class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, unique=True, index=True)
    password = Column(Text, nullable=False)
    role = Column(Text, nullable=False, default="user")
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    purchases = relationship("Sale", back_populates="buyer", passive_deletes=True)

class Car(Base):
    __tablename__ = "cars"
    id = Column(Integer, primary_key=True, index=True)
    brand = Column(Text, nullable=False)
    model = Column(Text, nullable=False)
    body_type = Column(Text, nullable=False)
    transmission = Column(Text, nullable=False)
    price = Column(Numeric(asdecimal=False), nullable=False)
    horse_power = Column(Integer, nullable=False)
    fuel_type = Column(Text, nullable=False)
    mileage = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    img_url = Column(Text, nullable=False)
    sold = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())
    updated_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

class Sale(Base):
    __tablename__ = "sales"
    id = Column(Integer, primary_key=True, index=True)
    car_id = Column(Integer, ForeignKey("cars.id", ondelete="SET NULL"), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    price = Column(Numeric(asdecimal=False), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    car = relationship("Car")
    buyer = relationship("User", back_populates="purchases")

Index("idx_cars_sold", Car.sold)
Index("idx_cars_price", Car.price)
Index("idx_cars_year", Car.year)
