from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import backref, relationship

from app.config import DEFAULT_USER_ID
from app.database import Base


class Favorite(Base):
    """A user's bookmark on a car. Removed together with the car."""
    __tablename__ = "favorites"

    id = Column(Integer, primary_key=True)
    car_id = Column(Integer, ForeignKey("electric_cars.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(255), nullable=False, default=DEFAULT_USER_ID)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    car = relationship(
        "ElectricCar",
        backref=backref("favorites", cascade="all, delete-orphan"),
    )

    __table_args__ = (
        UniqueConstraint("car_id", "user_id", name="unique_favorite"),
    )

    def __repr__(self):
        return f"<Favorite(car_id={self.car_id}, user_id='{self.user_id}')>"
