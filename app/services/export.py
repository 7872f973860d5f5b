"""CSV and Excel serialization of electric car rows."""

import csv
import io
from typing import Any, Dict, List, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from app.models.car import CAR_COLUMNS, ElectricCar

SHEET_TITLE = "Electric Cars"
HEADER_FILL = "FF667EEA"
COLUMN_WIDTH = 15


def car_to_row(car: ElectricCar) -> Dict[str, Any]:
    """Map a car to a plain dict keyed by column name, in table order."""
    return {column: getattr(car, column) for column in CAR_COLUMNS}


def humanize_header(column: str) -> str:
    """'price_euro' -> 'Price euro'"""
    return column[:1].upper() + column[1:].replace("_", " ")


def rows_to_csv(rows: Sequence[Dict[str, Any]]) -> str:
    """
    Serialize rows to CSV text with a header of column names.

    An empty row list produces an empty document.
    """
    if not rows:
        return ""

    fields = list(rows[0].keys())
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=fields, lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow({key: _csv_value(row.get(key)) for key in fields})
    return buffer.getvalue()


def _csv_value(value: Any) -> Any:
    if value is None:
        return ""
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def rows_to_xlsx(rows: Sequence[Dict[str, Any]]) -> bytes:
    """
    Serialize rows to an .xlsx workbook with a single styled sheet.

    The header row is bold with a solid fill; an empty row list still yields a
    valid workbook with an empty sheet.
    """
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_TITLE

    if rows:
        keys: List[str] = list(rows[0].keys())
        sheet.append([humanize_header(key) for key in keys])
        for row in rows:
            sheet.append([row.get(key) for key in keys])

        fill = PatternFill(fill_type="solid", fgColor=HEADER_FILL)
        for cell in sheet[1]:
            cell.font = Font(bold=True)
            cell.fill = fill

        for index in range(1, len(keys) + 1):
            sheet.column_dimensions[get_column_letter(index)].width = COLUMN_WIDTH

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
