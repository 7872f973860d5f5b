from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import ConflictError, NotFoundError, StoreError
from app.models.car import ElectricCar
from app.models.favorite import Favorite
from app.schemas.car import ElectricCarOut, ErrorResponse, MessageResponse
from app.schemas.favorite import FavoriteCarOut, FavoriteListResponse, FavoriteStatusResponse
from app.services.identity import get_current_user
from app.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def find_favorite(db: Session, car_id: int, user_id: str):
    return (
        db.query(Favorite)
        .filter(Favorite.car_id == car_id, Favorite.user_id == user_id)
        .first()
    )


@router.get("/favorites", response_model=FavoriteListResponse, responses=ERROR_RESPONSES)
def list_favorites(user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    """All cars the user has favorited, most recent first."""
    try:
        rows = (
            db.query(ElectricCar, Favorite.created_at)
            .join(Favorite, Favorite.car_id == ElectricCar.id)
            .filter(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error fetching favorites for {user_id}", exc_info=True)
        raise StoreError("Error fetching favorites", e) from e

    data = [
        FavoriteCarOut(**ElectricCarOut.model_validate(car).model_dump(), favorited_at=created_at)
        for car, created_at in rows
    ]
    return FavoriteListResponse(count=len(data), data=data)


@router.get("/favorites/check/{car_id}", response_model=FavoriteStatusResponse, responses=ERROR_RESPONSES)
def check_favorite(car_id: int, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        favorite = find_favorite(db, car_id, user_id)
    except SQLAlchemyError as e:
        logger.error(f"Error checking favorite {car_id} for {user_id}", exc_info=True)
        raise StoreError("Error checking favorite status", e) from e

    return FavoriteStatusResponse(isFavorite=favorite is not None)


@router.post(
    "/favorites/{car_id}",
    status_code=201,
    response_model=MessageResponse,
    responses=ERROR_RESPONSES,
)
def add_favorite(car_id: int, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    """Add a car to the user's favorites. Adding the same car twice is a conflict."""
    try:
        if find_favorite(db, car_id, user_id):
            raise ConflictError("Car is already in favorites")
        if db.query(ElectricCar.id).filter(ElectricCar.id == car_id).first() is None:
            raise NotFoundError("Electric car not found")

        db.add(Favorite(car_id=car_id, user_id=user_id))
        db.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent insert of the same pair
        db.rollback()
        raise ConflictError("Car is already in favorites") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error adding favorite {car_id} for {user_id}", exc_info=True)
        raise StoreError("Error adding favorite", e) from e

    logger.info(f"Car {car_id} favorited by {user_id}")
    return MessageResponse(message="Car added to favorites successfully")


@router.delete("/favorites/{car_id}", response_model=MessageResponse, responses=ERROR_RESPONSES)
def remove_favorite(car_id: int, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        deleted = (
            db.query(Favorite)
            .filter(Favorite.car_id == car_id, Favorite.user_id == user_id)
            .delete(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error removing favorite {car_id} for {user_id}", exc_info=True)
        raise StoreError("Error removing favorite", e) from e

    if deleted == 0:
        raise NotFoundError("Favorite not found")
    return MessageResponse(message="Car removed from favorites successfully")
