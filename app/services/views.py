"""
Grid and compare-view logic that runs on rows already fetched by the client.

Nothing here talks to the database: quick filters narrow a loaded page, the
toolbar decides which advanced filters are worth sending, and the compare
view loads a handful of cars and marks the best value per attribute.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from app.services.client import ClientError, ElectricCarsClient

MIN_COMPARE = 2
MAX_COMPARE = 4

Car = Dict[str, Any]


class CompareError(Exception):
    pass


def _below(field: str, limit: float) -> Callable[[Car], bool]:
    def predicate(car: Car) -> bool:
        value = car.get(field)
        return value is not None and value < limit
    return predicate


def _above(field: str, limit: float) -> Callable[[Car], bool]:
    def predicate(car: Car) -> bool:
        value = car.get(field)
        return value is not None and value > limit
    return predicate


@dataclass(frozen=True)
class QuickFilter:
    label: str
    predicate: Callable[[Car], bool]


QUICK_FILTERS: Dict[str, QuickFilter] = {
    "affordable": QuickFilter("Affordable (< €40k)", _below("price_euro", 40000)),
    "long_range": QuickFilter("Long Range (> 400km)", _above("range_km", 400)),
    "fast": QuickFilter("Fast (0-100 < 5s)", _below("accel_sec", 5)),
    "best_value": QuickFilter(
        "Best Value (< €50k, > 350km)",
        lambda car: _below("price_euro", 50000)(car) and _above("range_km", 350)(car),
    ),
}


def apply_quick_filter(name: str, cars: Iterable[Car]) -> List[Car]:
    try:
        quick_filter = QUICK_FILTERS[name]
    except KeyError:
        raise ValueError(f"Unknown quick filter: {name}") from None
    return [car for car in cars if quick_filter.predicate(car)]


def submittable_filters(filters: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Drop conditions the user left blank; isEmpty needs no value."""
    kept = []
    for f in filters:
        value = f.get("value")
        if f.get("operator") == "isEmpty" or (value is not None and str(value).strip() != ""):
            kept.append(f)
    return kept


def validate_selection(ids: Sequence[int]) -> None:
    if len(ids) < MIN_COMPARE:
        raise CompareError(f"Please select at least {MIN_COMPARE} cars to compare")
    if len(ids) > MAX_COMPARE:
        raise CompareError(f"You can compare maximum {MAX_COMPARE} cars at a time")


async def load_comparison(client: ElectricCarsClient, ids: Sequence[int]) -> List[Car]:
    """
    Fetch every selected car concurrently.

    The comparison is all or nothing: if any one fetch fails, no cars are
    returned and ``CompareError`` is raised. Fetches still in flight at that
    point are cancelled and awaited before returning.
    """
    if not ids:
        raise CompareError("No cars selected for comparison")

    tasks = [asyncio.ensure_future(client.get_by_id(car_id)) for car_id in ids]
    try:
        responses = await asyncio.gather(*tasks)
    except ClientError as e:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise CompareError("Failed to fetch car details") from e
    return [response["data"] for response in responses]


@dataclass(frozen=True)
class ComparisonRow:
    label: str
    field: str
    type: str = "text"
    unit: str = ""
    highlight: Optional[str] = None  # "min" or "max"


COMPARISON_ROWS = [
    ComparisonRow("Brand", "brand"),
    ComparisonRow("Model", "model"),
    ComparisonRow("Body Style", "body_style"),
    ComparisonRow("Segment", "segment"),
    ComparisonRow("Seats", "seats", "number"),
    ComparisonRow("Price (EUR)", "price_euro", "currency"),
    ComparisonRow("Acceleration (0-100 km/h)", "accel_sec", "number", unit="s", highlight="min"),
    ComparisonRow("Top Speed (km/h)", "top_speed_kmh", "number", highlight="max"),
    ComparisonRow("Range (km)", "range_km", "number", highlight="max"),
    ComparisonRow("Efficiency (Wh/km)", "efficiency_whkm", "number", highlight="min"),
    ComparisonRow("Fast Charge Speed (km/h)", "fast_charge_kmh", "number", highlight="max"),
    ComparisonRow("Power Train", "power_train"),
    ComparisonRow("Plug Type", "plug_type"),
    ComparisonRow("Rapid Charge", "rapid_charge", "boolean"),
]


def find_best_value(row: ComparisonRow, cars: Sequence[Car]):
    values = [car.get(row.field) for car in cars if car.get(row.field) is not None]
    if not values:
        return None
    if row.highlight == "max":
        return max(values)
    if row.highlight == "min":
        return min(values)
    return None


def build_comparison(cars: Sequence[Car]) -> List[Dict[str, Any]]:
    """One entry per comparison row: the cars' values and the best of them."""
    return [
        {
            "label": row.label,
            "field": row.field,
            "type": row.type,
            "unit": row.unit,
            "values": [car.get(row.field) for car in cars],
            "best": find_best_value(row, cars),
        }
        for row in COMPARISON_ROWS
    ]
