from datetime import date

import pytest

from app.models.car import ElectricCar
from scripts.import_data import import_csv, parse_date, parse_row

CSV_CONTENT = """Brand,Model,AccelSec,TopSpeed_KmH,Range_Km,Efficiency_WhKm,FastCharge_KmH,RapidCharge,PowerTrain,PlugType,BodyStyle,Segment,Seats,PriceEuro,Date
Tesla ,Model 3 Long Range Dual Motor ,4.6,233,450,161,940,Yes,AWD,Type 2 CCS,Sedan,D,5,55480,8/24/16
Renault ,Twizy ,11.3,80,80,73,-,No,RWD,Type 2,Cabrio,A,2,8000,8/24/16
"""


def test_parse_date_two_digit_year():
    assert parse_date("8/24/16") == date(2016, 8, 24)
    assert parse_date("12/01/2021") == date(2021, 12, 1)


def test_parse_row_trims_and_converts():
    row = {
        "Brand": "Tesla ", "Model": " Model Y ", "AccelSec": "5.1", "TopSpeed_KmH": "217",
        "Range_Km": "425", "Efficiency_WhKm": "171", "FastCharge_KmH": "-", "RapidCharge": "Yes",
        "PowerTrain": "AWD", "PlugType": "Type 2 CCS", "BodyStyle": "SUV", "Segment": "D",
        "Seats": "7", "PriceEuro": "58620", "Date": "8/24/16",
    }
    values = parse_row(row)

    assert values["brand"] == "Tesla"
    assert values["model"] == "Model Y"
    assert values["accel_sec"] == 5.1
    assert values["fast_charge_kmh"] is None
    assert values["seats"] == 7
    assert values["price_euro"] == 58620.0


def test_import_csv(tmp_path, session_factory, db):
    path = tmp_path / "cars.csv"
    path.write_text(CSV_CONTENT, encoding="utf-8")

    assert import_csv(str(path), session_factory) == 2

    cars = db.query(ElectricCar).order_by(ElectricCar.id).all()
    assert [c.brand for c in cars] == ["Tesla", "Renault"]
    assert cars[1].fast_charge_kmh is None
    assert cars[0].date == date(2016, 8, 24)


def test_import_csv_rejects_bad_dates(tmp_path, session_factory, db):
    path = tmp_path / "cars.csv"
    path.write_text(CSV_CONTENT.replace("8/24/16", "2016-08-24"), encoding="utf-8")

    with pytest.raises(ValueError):
        import_csv(str(path), session_factory)
    assert db.query(ElectricCar).count() == 0
