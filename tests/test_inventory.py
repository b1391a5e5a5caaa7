# tests/test_inventory.py
from datetime import datetime

import pytest

from app import services
from app.inventory import select_fields, parse_filter, resolve_candidates, reconcile, field_matches, QUERY_FIELDS


def test_select_fields_keeps_known_non_empty_in_fixed_order():
    query = {"year": "2020", "color": "red", "brand": "benz", "model": "", "price": None}
    assert select_fields(query) == ["brand", "year"]


def test_select_fields_is_idempotent():
    query = {"mileage": "1000", "fuelType": "diesel", "brand": "bmw"}
    assert select_fields(query) == select_fields(query) == ["brand", "fuelType", "mileage"]


def test_select_fields_does_not_type_check():
    assert select_fields({"price": "cheap"}) == ["price"]


@pytest.mark.parametrize("field, raw, expected", [
    ("brand", "BeNz", "benz"),
    ("bodyType", "suv", "SUV"),
    ("bodyType", "chassis cab", "Chassis Cab"),
    ("bodyType", "Minivan", None),
    ("transmission", "manual", "manual"),
    ("transmission", "Manual", None),
    ("fuelType", "gas", None),
    ("year", "1885", None),
    ("year", str(datetime.now().year + 1), None),
    ("year", "twenty", None),
    ("price", "-1", None),
    ("price", "abc", None),
    ("price", "nan", None),
    ("mileage", "0", 0),
])
def test_parse_filter(field, raw, expected):
    assert parse_filter(field, raw) == expected


def test_resolve_candidates_is_union_with_duplicates(db, car_factory):
    benz = car_factory(brand="Mercedes-Benz", model="C-Class", year=2020)
    car_factory(brand="BMW", year=2021)
    candidates = resolve_candidates(db, ["brand", "year"], {"brand": "benz", "year": "2020"})
    assert [c.id for c in candidates] == [benz.id, benz.id]


def test_resolve_candidates_skips_sold_and_invalid(db, car_factory):
    car_factory(brand="Benz", sold=True)
    car_factory(brand="Benz", body_type="Van")
    assert resolve_candidates(db, ["brand"], {"brand": "benz"})[0].body_type == "Van"
    assert resolve_candidates(db, ["bodyType"], {"bodyType": "Minivan"}) == []


def test_benz_year_scenario(db, car_factory):
    benz_2020 = car_factory(brand="Benz", year=2020)
    car_factory(brand="Benz", year=2021)
    query = {"brand": "benz", "year": "2020"}
    fields = select_fields(query)
    result = reconcile(resolve_candidates(db, fields, query), fields, query)
    assert [c.id for c in result["filtered"]] == [benz_2020.id]
    assert result["formatted"][0]["id"] == str(benz_2020.id)


def test_year_includes_older_cars(db, car_factory):
    older = car_factory(brand="Benz", year=2015)
    exact = car_factory(brand="Benz", year=2020)
    car_factory(brand="Benz", year=2021)
    result = services.search_inventory(db, {"year": "2020"})
    assert [c.id for c in result["filtered"]] == [exact.id, older.id]


def test_model_is_case_insensitive_substring(db, car_factory):
    gti = car_factory(brand="Volkswagen", model="Golf GTI")
    car_factory(brand="Volkswagen", model="Polo")
    query = {"model": "GOLF"}
    result = reconcile(resolve_candidates(db, ["model"], query), ["model"], query)
    assert result["filtered"] == [gti]


def test_transmission_and_mileage_combine(db, car_factory):
    match = car_factory(transmission="manual", mileage=100)
    car_factory(transmission="automatic", mileage=100)
    car_factory(transmission="manual", mileage=50000)
    query = {"transmission": "manual", "mileage": "100"}
    fields = select_fields(query)
    candidates = resolve_candidates(db, fields, query)
    assert [c.id for c in candidates].count(match.id) == 2
    result = reconcile(candidates, fields, query)
    assert result["filtered"] == [match]


def test_invalid_enum_empties_and_result(db, car_factory):
    car_factory(brand="Benz", body_type="SUV")
    query = {"brand": "benz", "bodyType": "Minivan"}
    fields = select_fields(query)
    result = reconcile(resolve_candidates(db, fields, query), fields, query)
    assert result == {"filtered": [], "formatted": []}


def test_reconcile_is_and_of_every_field(db, car_factory):
    cars = [
        car_factory(brand="Ford", fuel_type="diesel", price=10000, mileage=5000),
        car_factory(brand="Ford", fuel_type="petrol", price=10000, mileage=5000),
        car_factory(brand="Ford", fuel_type="diesel", price=90000, mileage=5000),
        car_factory(brand="Audi", fuel_type="diesel", price=10000, mileage=5000),
    ]
    query = {"brand": "ford", "fuelType": "diesel", "price": "20000"}
    fields = select_fields(query)
    parsed = {f: parse_filter(f, query[f]) for f in fields}

    result = reconcile(cars + cars, fields, query)

    expected = [c for c in cars if all(field_matches(c, f, parsed[f]) for f in fields)]
    assert result["filtered"] == expected == [cars[0]]


def test_reconcile_formats_public_view(db, car_factory):
    car = car_factory(brand="Tesla", model="Model 3", body_type="Saloon", fuel_type="electric")
    formatted = reconcile([car], [], {})["formatted"][0]
    assert formatted["id"] == str(car.id)
    assert formatted["bodyType"] == "Saloon"
    assert formatted["horsePower"] == car.horse_power
    for hidden in ("sold", "createdAt", "updatedAt", "updatedBy"):
        assert hidden not in formatted


def test_body_type_match_ignores_case(db, car_factory):
    car = car_factory(body_type="Pick-up")
    query = {"bodyType": "PICK-UP"}
    result = reconcile(resolve_candidates(db, ["bodyType"], query), ["bodyType"], query)
    assert result["filtered"] == [car]


def test_search_inventory_without_filters_lists_unsold_newest_first(db, car_factory):
    first = car_factory()
    second = car_factory()
    car_factory(sold=True)
    result = services.search_inventory(db, {"page": "1"})
    assert [c.id for c in result["filtered"]] == [second.id, first.id]
    assert [c["id"] for c in result["formatted"]] == [str(second.id), str(first.id)]


def test_query_fields_cover_every_filter():
    assert set(QUERY_FIELDS) == {"brand", "model", "bodyType", "transmission", "fuelType", "price", "mileage", "year"}
