import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ElectricCarOut(BaseModel):
    """A single electric car row as returned by the API."""
    model_config = ConfigDict(from_attributes=True, protected_namespaces=())

    id: int
    brand: Optional[str] = None
    model: Optional[str] = None
    accel_sec: Optional[float] = Field(default=None, description="0-100 km/h in seconds")
    top_speed_kmh: Optional[int] = None
    range_km: Optional[int] = None
    efficiency_whkm: Optional[int] = None
    fast_charge_kmh: Optional[int] = None
    rapid_charge: Optional[str] = None
    power_train: Optional[str] = Field(default=None, description="e.g. 'AWD', 'RWD', 'FWD'")
    plug_type: Optional[str] = None
    body_style: Optional[str] = None
    segment: Optional[str] = None
    seats: Optional[int] = None
    price_euro: Optional[float] = None
    date: Optional[datetime.date] = Field(default=None, description="Date of the data snapshot")


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int
    hasNext: bool
    hasPrev: bool


class CarPageResponse(BaseModel):
    success: bool = True
    data: List[ElectricCarOut]
    pagination: Pagination


class CarResponse(BaseModel):
    success: bool = True
    data: ElectricCarOut


class CarCollectionResponse(BaseModel):
    """Search and filter results."""
    success: bool = True
    count: int
    data: List[ElectricCarOut]


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: Optional[str] = None


class FilterDescriptor(BaseModel):
    """One advanced-filter condition, e.g. ``price_euro lessThan 50000``."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    field: str = Field(..., description="Column name, e.g. 'brand'")
    operator: Optional[str] = Field(default=None,
                                    description="contains, equals, startsWith, endsWith, isEmpty, "
                                                "greaterThan, lessThan, greaterThanOrEqual, lessThanOrEqual. "
                                                "Missing or unknown operators drop the condition")
    value: Optional[str] = Field(default=None, description="Ignored by isEmpty")


class FilterRequest(BaseModel):
    filters: Optional[List[FilterDescriptor]] = None
