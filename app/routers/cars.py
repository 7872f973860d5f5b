import math
from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import NotFoundError, StoreError, ValidationError
from app.models.car import ElectricCar
from app.schemas.car import (
    CarCollectionResponse,
    CarPageResponse,
    CarResponse,
    ElectricCarOut,
    ErrorResponse,
    FilterRequest,
    MessageResponse,
    Pagination,
)
from app.services.export import car_to_row, rows_to_csv, rows_to_xlsx
from app.services.filters import translate_filters
from app.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 50

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def parse_positive_int(raw: Optional[str], default: int) -> int:
    """Lenient query-string int: anything unparsable or below 1 means default."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    total_pages = math.ceil(total / limit)
    return Pagination(
        page=page,
        limit=limit,
        total=total,
        totalPages=total_pages,
        hasNext=page < total_pages,
        hasPrev=page > 1,
    )


def search_cars_in_db(db: Session, term: str):
    """Substring match on brand, model, body style, segment and power train."""
    pattern = f"%{term}%"
    return (
        db.query(ElectricCar)
        .filter(
            or_(
                ElectricCar.brand.like(pattern),
                ElectricCar.model.like(pattern),
                ElectricCar.body_style.like(pattern),
                ElectricCar.segment.like(pattern),
                ElectricCar.power_train.like(pattern),
            )
        )
        .order_by(ElectricCar.id)
        .all()
    )


@router.get("/electric-cars", response_model=CarPageResponse, responses=ERROR_RESPONSES)
def list_cars(page: Optional[str] = None, limit: Optional[str] = None, db: Session = Depends(get_db)):
    """List electric cars, one page at a time, ordered by id."""
    page_number = parse_positive_int(page, DEFAULT_PAGE)
    page_size = parse_positive_int(limit, DEFAULT_LIMIT)
    offset = (page_number - 1) * page_size

    try:
        # Both statements run inside the session's single transaction
        total = db.query(func.count(ElectricCar.id)).scalar()
        cars = (
            db.query(ElectricCar)
            .order_by(ElectricCar.id)
            .limit(page_size)
            .offset(offset)
            .all()
        )
    except (SQLAlchemyError, OverflowError) as e:
        # sqlite3 refuses a LIMIT or OFFSET beyond a signed 64-bit integer
        logger.error("Error fetching electric cars", exc_info=True)
        raise StoreError("Error fetching data", e) from e

    return CarPageResponse(
        data=[ElectricCarOut.model_validate(c) for c in cars],
        pagination=build_pagination(page_number, page_size, total),
    )


@router.get("/electric-cars/search/query", response_model=CarCollectionResponse, responses=ERROR_RESPONSES)
def search_cars(q: Optional[str] = None, db: Session = Depends(get_db)):
    """Free-text search across the descriptive columns."""
    if not q:
        raise ValidationError("Search query is required")

    try:
        cars = search_cars_in_db(db, q)
    except SQLAlchemyError as e:
        logger.error("Error searching electric cars", exc_info=True)
        raise StoreError("Error searching data", e) from e

    return CarCollectionResponse(
        count=len(cars),
        data=[ElectricCarOut.model_validate(c) for c in cars],
    )


@router.post("/electric-cars/filter", response_model=CarCollectionResponse, responses=ERROR_RESPONSES)
def filter_cars(payload: Optional[FilterRequest] = None, db: Session = Depends(get_db)):
    """
    Filter with advanced conditions.

    Conditions are ANDed; unknown operators are ignored, unknown fields are
    rejected with 400.
    """
    if payload is None or not payload.filters:
        raise ValidationError("Filters array is required")

    clause = translate_filters(payload.filters)

    try:
        query = db.query(ElectricCar)
        if clause:
            query = query.filter(clause.to_text())
        cars = query.order_by(ElectricCar.id).all()
    except SQLAlchemyError as e:
        logger.error(f"Error filtering electric cars with: {clause.sql}", exc_info=True)
        raise StoreError("Error filtering data", e) from e

    return CarCollectionResponse(
        count=len(cars),
        data=[ElectricCarOut.model_validate(c) for c in cars],
    )


def _all_rows(db: Session):
    try:
        return [car_to_row(c) for c in db.query(ElectricCar).order_by(ElectricCar.id).all()]
    except SQLAlchemyError as e:
        logger.error("Error exporting electric cars", exc_info=True)
        raise StoreError("Error exporting data", e) from e


@router.get("/electric-cars/export/csv", tags=["Export"], response_class=Response)
def export_csv(db: Session = Depends(get_db)):
    """Download the whole table as CSV."""
    content = rows_to_csv(_all_rows(db))
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=electric_cars.csv"},
    )


@router.get("/electric-cars/export/excel", tags=["Export"], response_class=Response)
def export_excel(db: Session = Depends(get_db)):
    """Download the whole table as an Excel workbook."""
    content = rows_to_xlsx(_all_rows(db))
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=electric_cars.xlsx"},
    )


@router.get("/electric-cars/{car_id}", response_model=CarResponse, responses=ERROR_RESPONSES)
def get_car(car_id: int, db: Session = Depends(get_db)):
    """Get a single car by ID."""
    try:
        car = db.query(ElectricCar).filter(ElectricCar.id == car_id).first()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching electric car {car_id}", exc_info=True)
        raise StoreError("Error fetching data", e) from e

    if not car:
        raise NotFoundError("Electric car not found")
    return CarResponse(data=ElectricCarOut.model_validate(car))


@router.delete("/electric-cars/{car_id}", response_model=MessageResponse, responses=ERROR_RESPONSES)
def delete_car(car_id: int, db: Session = Depends(get_db)):
    """Delete a car; its favorites go with it."""
    try:
        car = db.query(ElectricCar).filter(ElectricCar.id == car_id).first()
        if not car:
            raise NotFoundError("Electric car not found")
        db.delete(car)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting electric car {car_id}", exc_info=True)
        raise StoreError("Error deleting data", e) from e

    logger.info(f"Electric car {car_id} deleted")
    return MessageResponse(message="Electric car deleted successfully")
