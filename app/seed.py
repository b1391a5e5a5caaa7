# app/seed.py
"""Load the starter inventory from JSON into an empty cars table."""
import json
from pathlib import Path
from typing import Dict, List

from sqlalchemy.orm import Session

from . import crud
from .schemas import CAR_COLUMNS, CarCreate
from .utils import logger

DEFAULT_INVENTORY = Path(__file__).resolve().parent.parent / "data" / "cars_inventory.json"


def read_inventory(path=DEFAULT_INVENTORY) -> List[Dict]:
    with open(path, "r", encoding="utf-8") as fh:
        items = json.load(fh)
    rows = []
    for item in items:
        car = CarCreate.model_validate(item)
        rows.append({CAR_COLUMNS[k]: v for k, v in car.model_dump().items()} | {"sold": False, "updated_by": None})
    return rows


def seed_inventory(db: Session, path=DEFAULT_INVENTORY, force: bool = False) -> int:
    """Insert the cars in `path` unless the table already holds cars (or `force`)."""
    if not force and crud.count_cars(db):
        logger.info("Inventory already present, skipping seed")
        return 0
    count = crud.create_cars(db, read_inventory(path))
    logger.info("Seeded %d cars from %s", count, path)
    return count
