"""
Bulk-load the electric car dataset from CSV.

Usage:
    python -m scripts.import_data path/to/ElectricCarData.csv [--database-url URL]
"""

import argparse
import csv
from datetime import date
from typing import Dict, Optional

from sqlalchemy import func
from sqlalchemy.orm import sessionmaker

from app.config import DATABASE_URL
from app.database import create_db_engine, create_session_factory, init_db
from app.models.car import ElectricCar
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _to_int(raw: Optional[str]) -> Optional[int]:
    try:
        return int(float(raw.strip()))
    except (AttributeError, ValueError):
        return None


def _to_float(raw: Optional[str]) -> Optional[float]:
    try:
        return float(raw.strip())
    except (AttributeError, ValueError):
        return None


def parse_date(raw: str) -> date:
    """'8/24/16' -> date(2016, 8, 24). Two-digit years are 20xx."""
    month, day, year = (int(part) for part in raw.strip().split("/"))
    if year < 100:
        year += 2000
    return date(year, month, day)


def parse_row(row: Dict[str, str]) -> Dict:
    """Map one dataset row to ElectricCar column values."""
    return {
        "brand": row["Brand"].strip(),
        "model": row["Model"].strip(),
        "accel_sec": _to_float(row.get("AccelSec")),
        "top_speed_kmh": _to_int(row.get("TopSpeed_KmH")),
        "range_km": _to_int(row.get("Range_Km")),
        "efficiency_whkm": _to_int(row.get("Efficiency_WhKm")),
        "fast_charge_kmh": _to_int(row.get("FastCharge_KmH")),
        "rapid_charge": row.get("RapidCharge"),
        "power_train": row.get("PowerTrain"),
        "plug_type": row.get("PlugType"),
        "body_style": row.get("BodyStyle"),
        "segment": row.get("Segment"),
        "seats": _to_int(row.get("Seats")),
        "price_euro": _to_float(row.get("PriceEuro")),
        "date": parse_date(row["Date"]),
    }


def import_csv(csv_path: str, session_factory: sessionmaker) -> int:
    """Insert every row of the CSV file. Returns the number of rows imported."""
    with open(csv_path, newline="", encoding="utf-8-sig") as f:
        rows = [parse_row(row) for row in csv.DictReader(f)]

    logger.info(f"Total records to import: {len(rows)}")

    db = session_factory()
    try:
        db.add_all(ElectricCar(**values) for values in rows)
        db.commit()
        total = db.query(func.count(ElectricCar.id)).scalar()
    except Exception:
        db.rollback()
        logger.error("Error importing data", exc_info=True)
        raise
    finally:
        db.close()

    logger.info(f"Successfully imported {len(rows)} records, {total} in database")
    return len(rows)


def main():
    parser = argparse.ArgumentParser(description="Import electric car data from CSV")
    parser.add_argument("csv_path")
    parser.add_argument("--database-url", default=DATABASE_URL)
    args = parser.parse_args()

    engine = create_db_engine(args.database_url)
    try:
        init_db(engine)
        import_csv(args.csv_path, create_session_factory(engine))
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()
