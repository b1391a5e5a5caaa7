# app/schemas.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

Transmission = Literal["manual", "automatic"]
FuelType = Literal["petrol", "diesel", "electric", "hybrid"]
BodyType = Literal["SUV", "Hatchback", "Saloon", "Coupe", "Convertible", "Van", "Pick-up", "Chassis Cab"]

MIN_YEAR = 1886


def _check_year(value):
    if value is not None and not MIN_YEAR <= value <= datetime.now().year:
        raise ValueError(f"'year' must be between {MIN_YEAR} and the current year")
    return value


def _check_url(value):
    if value is not None and not value.startswith(("http://", "https://")):
        raise ValueError("'imgUrl' must start with 'http://' or 'https://'")
    return value


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)


class AdminCreate(UserCreate):
    admin: bool = False


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    role: str

    model_config = ConfigDict(from_attributes=True)


class CarCreate(BaseModel):
    brand: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    bodyType: BodyType
    transmission: Transmission
    price: float = Field(..., ge=0)
    horsePower: int = Field(..., ge=0)
    fuelType: FuelType
    mileage: int = Field(..., ge=0)
    year: int
    imgUrl: str

    @field_validator("year")
    @classmethod
    def valid_year(cls, value):
        return _check_year(value)

    @field_validator("imgUrl")
    @classmethod
    def valid_img_url(cls, value):
        return _check_url(value)


class CarUpdate(BaseModel):
    brand: Optional[str] = Field(None, min_length=1)
    model: Optional[str] = Field(None, min_length=1)
    bodyType: Optional[BodyType] = None
    transmission: Optional[Transmission] = None
    price: Optional[float] = Field(None, ge=0)
    horsePower: Optional[int] = Field(None, ge=0)
    fuelType: Optional[FuelType] = None
    mileage: Optional[int] = Field(None, ge=0)
    year: Optional[int] = None
    imgUrl: Optional[str] = None
    sold: Optional[bool] = None

    @field_validator("year")
    @classmethod
    def valid_year(cls, value):
        return _check_year(value)

    @field_validator("imgUrl")
    @classmethod
    def valid_img_url(cls, value):
        return _check_url(value)


# request field name -> Car column
CAR_COLUMNS = {
    "brand": "brand",
    "model": "model",
    "bodyType": "body_type",
    "transmission": "transmission",
    "price": "price",
    "horsePower": "horse_power",
    "fuelType": "fuel_type",
    "mileage": "mileage",
    "year": "year",
    "imgUrl": "img_url",
    "sold": "sold",
}


class CarOut(BaseModel):
    """Privileged view of an inventory record."""
    id: int
    brand: str
    model: str
    body_type: str = Field(serialization_alias="bodyType")
    transmission: str
    price: float
    horse_power: int = Field(serialization_alias="horsePower")
    fuel_type: str = Field(serialization_alias="fuelType")
    mileage: int
    year: int
    img_url: str = Field(serialization_alias="imgUrl")
    sold: bool
    created_at: Optional[datetime] = Field(None, serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(None, serialization_alias="updatedAt")
    updated_by: Optional[int] = Field(None, serialization_alias="updatedBy")

    model_config = ConfigDict(from_attributes=True)


class CarPublic(BaseModel):
    """Public view: no sale flag, timestamps or actor references."""
    id: str
    brand: str
    model: str
    bodyType: str
    transmission: str
    price: float
    horsePower: int
    fuelType: str
    mileage: int
    year: int
    imgUrl: str


class SaleOut(BaseModel):
    id: int
    carId: Optional[int]
    userId: Optional[int]
    price: float
    createdAt: Optional[datetime]
    car: Optional[CarPublic] = None
