from datetime import date

import pytest
from fastapi.testclient import TestClient

from app.database import Base, create_db_engine, create_session_factory
from app.models.car import ElectricCar
from app.models.favorite import Favorite  # noqa: F401
from main import create_app


# ---------------------------------------------------------------------------
# Sample rows reused across tests
# ---------------------------------------------------------------------------

SAMPLE_CARS = [
    dict(
        brand="Tesla", model="Model 3 Long Range Dual Motor", accel_sec=4.6, top_speed_kmh=233,
        range_km=450, efficiency_whkm=161, fast_charge_kmh=940, rapid_charge="Yes",
        power_train="AWD", plug_type="Type 2 CCS", body_style="Sedan", segment="D",
        seats=5, price_euro=55480, date=date(2016, 8, 24),
    ),
    dict(
        brand="Volkswagen", model="ID.3 Pure", accel_sec=10.0, top_speed_kmh=160,
        range_km=270, efficiency_whkm=167, fast_charge_kmh=250, rapid_charge="Yes",
        power_train="RWD", plug_type="Type 2 CCS", body_style="Hatchback", segment="C",
        seats=5, price_euro=30000, date=date(2016, 8, 24),
    ),
    dict(
        brand="Polestar", model="2", accel_sec=4.7, top_speed_kmh=210,
        range_km=400, efficiency_whkm=181, fast_charge_kmh=620, rapid_charge="Yes",
        power_train="AWD", plug_type="Type 2 CCS", body_style="Liftback", segment="D",
        seats=5, price_euro=56440, date=date(2016, 8, 24),
    ),
    dict(
        brand="Renault", model="Twizy", accel_sec=None, top_speed_kmh=80,
        range_km=80, efficiency_whkm=73, fast_charge_kmh=None, rapid_charge="No",
        power_train="RWD", plug_type="Type 2", body_style="", segment="A",
        seats=2, price_euro=None, date=date(2016, 8, 24),
    ),
]


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def app(engine):
    return create_app(engine=engine)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def seed_cars(session_factory):
    """Insert SAMPLE_CARS and return their ids in insertion order."""
    session = session_factory()
    try:
        cars = [ElectricCar(**values) for values in SAMPLE_CARS]
        session.add_all(cars)
        session.commit()
        return [car.id for car in cars]
    finally:
        session.close()
