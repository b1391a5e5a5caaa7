# tests/test_crud.py
from app import crud, schemas, services
from app.models import Car
from app.seed import seed_inventory


def test_create_and_get_car(db, car_factory):
    car = car_factory(brand="Test Car", price=1000)
    obj = crud.get_car(db, car.id)
    assert obj is not None
    assert obj.brand == "Test Car"
    assert obj.sold is False


def test_find_cars_skips_sold_by_default(db, car_factory):
    car_factory(brand="Kept")
    car_factory(brand="Gone", sold=True)
    assert [c.brand for c in crud.find_cars(db)] == ["Kept"]
    assert len(crud.find_cars(db, unsold_only=False)) == 2
    assert crud.count_unsold(db) == 1


def test_find_cars_with_condition(db, car_factory):
    car_factory(price=10000)
    car_factory(price=50000)
    cheap = crud.find_cars(db, Car.price <= 20000)
    assert [c.price for c in cheap] == [10000]


def test_record_sale_only_once(db, car_factory):
    car = car_factory(price=15000)
    buyer = services.register_account(db, schemas.UserCreate(name="B", email="b@example.com", password="secret123"))

    sale = crud.record_sale(db, car, buyer)
    assert sale is not None
    assert sale.price == 15000
    assert crud.get_car(db, car.id).sold is True

    assert crud.record_sale(db, car, buyer) is None
    assert len(crud.list_sales(db)) == 1
    assert len(crud.list_sales(db, user_id=buyer.id)) == 1


def test_seed_inventory_only_fills_empty_table(db):
    assert seed_inventory(db) == 12
    assert crud.count_cars(db) == 12
    assert seed_inventory(db) == 0
    assert crud.count_cars(db) == 12
