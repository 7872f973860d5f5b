"""
Advanced filter translation.

Turns the grid's ``{field, operator, value}`` conditions into one SQL
predicate with positional ``?`` placeholders, ANDed together in input order.

Operators map to a fragment template and a function shaping the bound value:

    contains            field LIKE ?       %value%
    equals              field = ?          value
    startsWith          field LIKE ?       value%
    endsWith            field LIKE ?       %value
    isEmpty             (field IS NULL OR field = '')   (nothing bound)
    greaterThan         field > ?          value
    lessThan            field < ?          value
    greaterThanOrEqual  field >= ?         value
    lessThanOrEqual     field <= ?         value

Unknown operators are skipped without error. Field names end up in the SQL
text, so every field is checked against the allow-list first.
"""

import itertools
import re
from dataclasses import dataclass, field as dataclass_field
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import text
from sqlalchemy.sql.elements import TextClause

from app.errors import ValidationError
from app.models.car import CAR_COLUMNS
from app.schemas.car import FilterDescriptor

OPERATORS: Dict[str, Tuple[str, Optional[Callable[[str], str]]]] = {
    "contains": ("{field} LIKE ?", lambda value: f"%{value}%"),
    "equals": ("{field} = ?", lambda value: value),
    "startsWith": ("{field} LIKE ?", lambda value: f"{value}%"),
    "endsWith": ("{field} LIKE ?", lambda value: f"%{value}"),
    "isEmpty": ("({field} IS NULL OR {field} = '')", None),
    "greaterThan": ("{field} > ?", lambda value: value),
    "lessThan": ("{field} < ?", lambda value: value),
    "greaterThanOrEqual": ("{field} >= ?", lambda value: value),
    "lessThanOrEqual": ("{field} <= ?", lambda value: value),
}

FILTERABLE_FIELDS = frozenset(CAR_COLUMNS)

_PLACEHOLDER = re.compile(r"\?")


@dataclass(frozen=True)
class FilterClause:
    """A translated predicate and its values, in placeholder order."""
    sql: str
    params: List[str] = dataclass_field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.sql)

    def bind_params(self) -> Dict[str, str]:
        return {f"p{index}": value for index, value in enumerate(self.params)}

    def to_text(self) -> TextClause:
        """Render as a SQLAlchemy ``text()`` clause with ``:p0, :p1, ...`` binds."""
        counter = itertools.count()
        sql = _PLACEHOLDER.sub(lambda _: f":p{next(counter)}", self.sql)
        return text(sql).bindparams(**self.bind_params())


def translate_filters(
    filters: Iterable[FilterDescriptor],
    allowed_fields: frozenset = FILTERABLE_FIELDS,
) -> FilterClause:
    """
    Build the predicate for a list of filter descriptors.

    Args:
        filters: Descriptors in the order the user added them.
        allowed_fields: Column names a descriptor may reference.

    Returns:
        FilterClause: Fragments joined with ``AND`` plus one parameter per
        fragment that has a placeholder. Empty when every operator was unknown.

    Raises:
        ValidationError: A descriptor names a field outside ``allowed_fields``.
    """
    fragments: List[str] = []
    params: List[str] = []

    for descriptor in filters:
        if descriptor.field not in allowed_fields:
            raise ValidationError(f"Invalid filter field: {descriptor.field}")

        entry = OPERATORS.get(descriptor.operator)
        if entry is None:
            continue

        template, shape_value = entry
        fragments.append(template.format(field=descriptor.field))
        if shape_value is not None:
            params.append(shape_value(descriptor.value if descriptor.value is not None else ""))

    return FilterClause(sql=" AND ".join(fragments), params=params)
