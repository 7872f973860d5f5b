from datetime import datetime
from typing import List

from pydantic import BaseModel

from app.schemas.car import ElectricCarOut


class FavoriteCarOut(ElectricCarOut):
    favorited_at: datetime


class FavoriteListResponse(BaseModel):
    success: bool = True
    count: int
    data: List[FavoriteCarOut]


class FavoriteStatusResponse(BaseModel):
    success: bool = True
    isFavorite: bool
