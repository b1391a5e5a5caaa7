# app/inventory.py
"""Car search pipeline.

Searching happens in two phases. `resolve_candidates` runs one query per
selected field and concatenates the results, so a car can appear several
times or match only some of the fields. `reconcile` then checks every
candidate against all selected fields at once and keeps the cars that pass
every one of them.

A filter value outside its field's domain (unknown body type, negative price,
year before 1886, ...) matches nothing; it is never an error.
"""
import math
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.orm import Session

from . import crud
from .models import Car
from .schemas import MIN_YEAR
from .utils import logger

QUERY_FIELDS = ("brand", "model", "bodyType", "transmission", "fuelType", "price", "mileage", "year")

BODY_TYPES = ("SUV", "Hatchback", "Saloon", "Coupe", "Convertible", "Van", "Pick-up", "Chassis Cab")
TRANSMISSIONS = ("manual", "automatic")
FUEL_TYPES = ("petrol", "diesel", "electric", "hybrid")

_BODY_TYPES_LOWER = {b.lower(): b for b in BODY_TYPES}


def select_fields(query: Mapping[str, Any]) -> List[str]:
    """Recognized filter fields present in `query` with a non-empty value, in QUERY_FIELDS order."""
    return [f for f in QUERY_FIELDS if query.get(f)]


def _number(raw) -> Optional[float]:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def parse_filter(field: str, raw) -> Optional[Any]:
    """Normalize a raw query value for `field`, or None when it can match nothing."""
    if raw is None or raw == "":
        return None
    if field in ("brand", "model"):
        return str(raw).lower()
    if field == "bodyType":
        return _BODY_TYPES_LOWER.get(str(raw).lower())
    if field == "transmission":
        return raw if raw in TRANSMISSIONS else None
    if field == "fuelType":
        return raw if raw in FUEL_TYPES else None
    if field == "year":
        try:
            year = int(raw)
        except (TypeError, ValueError):
            return None
        return year if MIN_YEAR <= year <= datetime.now().year else None
    if field in ("price", "mileage"):
        value = _number(raw)
        return value if value is not None and value >= 0 else None
    raise ValueError(f"unknown filter field {field!r}")


def field_condition(field: str, value):
    """SQL condition for an already parsed filter value."""
    if field == "brand":
        return Car.brand.icontains(value, autoescape=True)
    if field == "model":
        return Car.model.icontains(value, autoescape=True)
    if field == "bodyType":
        return Car.body_type == value
    if field == "transmission":
        return Car.transmission == value
    if field == "fuelType":
        return Car.fuel_type == value
    if field == "year":
        return Car.year <= value
    if field == "price":
        return Car.price <= value
    if field == "mileage":
        return Car.mileage <= value
    raise ValueError(f"unknown filter field {field!r}")


def field_matches(car: Car, field: str, value) -> bool:
    """In-memory twin of `field_condition`."""
    if field == "brand":
        return value in (car.brand or "").lower()
    if field == "model":
        return value in (car.model or "").lower()
    if field == "bodyType":
        return (car.body_type or "").lower() == value.lower()
    if field == "transmission":
        return car.transmission == value
    if field == "fuelType":
        return car.fuel_type == value
    if field == "year":
        return car.year is not None and car.year <= value
    if field == "price":
        return car.price is not None and car.price <= value
    if field == "mileage":
        return car.mileage is not None and car.mileage <= value
    raise ValueError(f"unknown filter field {field!r}")


def resolve_candidates(db: Session, fields: List[str], query: Mapping[str, Any]) -> List[Car]:
    candidates: List[Car] = []
    for field in fields:
        value = parse_filter(field, query.get(field))
        if value is None:
            logger.debug("Filter %s=%r matches nothing", field, query.get(field))
            continue
        candidates.extend(crud.find_cars(db, field_condition(field, value)))
    return candidates


def format_public(car: Car) -> Dict[str, Any]:
    return {
        "id": str(car.id),
        "brand": car.brand,
        "model": car.model,
        "bodyType": car.body_type,
        "transmission": car.transmission,
        "price": car.price,
        "horsePower": car.horse_power,
        "fuelType": car.fuel_type,
        "mileage": car.mileage,
        "year": car.year,
        "imgUrl": car.img_url,
    }


def reconcile(candidates: List[Car], fields: List[str], query: Mapping[str, Any]) -> Dict[str, list]:
    parsed = {f: parse_filter(f, query.get(f)) for f in fields}
    filtered: List[Car] = []
    seen = set()
    for car in candidates:
        if car.id in seen:
            continue
        if all(parsed[f] is not None and field_matches(car, f, parsed[f]) for f in fields):
            seen.add(car.id)
            filtered.append(car)
    return {"filtered": filtered, "formatted": [format_public(c) for c in filtered]}
