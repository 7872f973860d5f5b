from sqlalchemy import Column, Date, Float, Integer, String

from app.database import Base


class ElectricCar(Base):
    """One electric vehicle model variant, as loaded by the bulk import."""
    __tablename__ = "electric_cars"

    id = Column(Integer, primary_key=True, index=True)
    brand = Column(String(100), index=True)
    model = Column(String(255), index=True)
    accel_sec = Column(Float)
    top_speed_kmh = Column(Integer)
    range_km = Column(Integer)
    efficiency_whkm = Column(Integer)
    fast_charge_kmh = Column(Integer, nullable=True)
    rapid_charge = Column(String(10))
    power_train = Column(String(10))
    plug_type = Column(String(50))
    body_style = Column(String(50))
    segment = Column(String(10))
    seats = Column(Integer)
    price_euro = Column(Float)
    date = Column(Date)

    def __repr__(self):
        return f"<ElectricCar(id={self.id}, brand='{self.brand}', model='{self.model}')>"


# Column names in table order; also the only names a filter may reference
CAR_COLUMNS = tuple(column.name for column in ElectricCar.__table__.columns)
