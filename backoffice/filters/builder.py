"""
Dynamic filter composition for list endpoints.

WHAT: FilterExpressionBuilder turns a bounded list of {field, value}
criteria into one SQLAlchemy predicate plus the ordered values it binds.

WHY: Tickets, employees, accommodations and notification targeting all
accept the same `filters=<json array>` convention. Each endpoint supplies
a whitelist (field name -> column or preset); the builder does the rest.

HOW:
- Direct equality: field maps to a column, fragment is `column = :filter_N`
- Preset: field maps to a Preset, the value is a token expanded to bounds
- Unknown fields, unknown tokens and blank values are skipped
- Fragments are ANDed in input order
- Every bound parameter is named from a running index owned by the builder;
  build() takes the starting index and returns the next free one, so
  several expressions can share one statement without name clashes
"""

import json
import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Sequence, Union

from sqlalchemy import and_, bindparam, DateTime
from sqlalchemy.sql.elements import ColumnElement

from backoffice.core.config import settings
from backoffice.core.exceptions import FilterCriteriaError
from backoffice.filters.presets import Bounds, Preset


logger = logging.getLogger(__name__)


FieldSpec = Union[Preset, Any]


class FilterExpression(NamedTuple):
    """Result of one build() call."""

    clause: Optional[ColumnElement]
    params: List[Any]
    next_index: int


def parse_filters_param(raw: Optional[str]) -> List[Dict[str, Any]]:
    """
    Decode the `filters` query parameter.

    WHY: The parameter is free text from the client; anything that is not a
    JSON array of objects is treated as "no filters" rather than an error,
    matching the permissive skipping the builder does per criterion.

    Args:
        raw: JSON-encoded array of {field, value} objects

    Returns:
        List of criterion dicts (possibly empty)
    """
    if not raw:
        return []

    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError):
        logger.debug("Ignoring malformed filters parameter")
        return []

    if not isinstance(decoded, list):
        return []

    return [item for item in decoded if isinstance(item, dict)]


def _criterion_parts(criterion: Any) -> tuple[Any, Any]:
    if isinstance(criterion, Mapping):
        return criterion.get("field"), criterion.get("value")
    return getattr(criterion, "field", None), getattr(criterion, "value", None)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


class FilterExpressionBuilder:
    """
    Builds parameterized predicates from filter criteria.

    Example:
        builder = FilterExpressionBuilder(TICKET_FILTER_FIELDS)
        expr = builder.build([{"field": "status", "value": "new"}])
        query = query.where(expr.clause)  # when expr.clause is not None
    """

    def __init__(
        self,
        field_map: Mapping[str, FieldSpec],
        max_criteria: Optional[int] = None,
        today: Optional[date] = None,
    ):
        """
        Args:
            field_map: Whitelist of criterion field -> column or Preset
            max_criteria: Upper bound on criteria count (defaults to settings)
            today: Reference day for presets (defaults to the current date)
        """
        self.field_map = field_map
        self.max_criteria = (
            max_criteria if max_criteria is not None else settings.FILTER_MAX_CRITERIA
        )
        self._today = today
        self._index = 1
        self._params: List[Any] = []

    @property
    def today(self) -> date:
        return self._today or date.today()

    def build(
        self,
        criteria: Optional[Sequence[Any]],
        start_index: int = 1,
    ) -> FilterExpression:
        """
        Compose criteria into one ANDed predicate.

        Args:
            criteria: Ordered {field, value} items (dicts or objects)
            start_index: First parameter index this call may use

        Returns:
            FilterExpression(clause, params, next_index); clause is None
            when no criterion applied

        Raises:
            FilterCriteriaError: If more criteria than max_criteria are given
        """
        criteria = list(criteria or [])
        if len(criteria) > self.max_criteria:
            raise FilterCriteriaError(
                message=f"At most {self.max_criteria} filter criteria are allowed",
                received=len(criteria),
            )

        self._index = start_index
        self._params = []
        fragments: List[ColumnElement] = []
        today = self.today

        for criterion in criteria:
            field, value = _criterion_parts(criterion)
            if not isinstance(field, str) or _is_blank(value):
                continue

            target = self.field_map.get(field)
            if target is None:
                continue

            if isinstance(target, Preset):
                fragment = self._preset_fragment(target, today, str(value).strip())
            else:
                fragment = self._equality_fragment(target, value)

            if fragment is not None:
                fragments.append(fragment)

        clause = and_(*fragments) if fragments else None
        return FilterExpression(clause, list(self._params), self._index)

    # =========================================================================
    # Fragments
    # =========================================================================

    def _bind(self, value: Any, column: Any) -> Any:
        name = f"filter_{self._index}"
        self._index += 1
        self._params.append(value)
        return bindparam(name, value, type_=column.type)

    def _equality_fragment(self, column: Any, value: Any) -> Optional[ColumnElement]:
        coerced = self._coerce(column, value)
        if coerced is None:
            return None
        return column == self._bind(coerced, column)

    def _preset_fragment(
        self, preset: Preset, today: date, token: str
    ) -> Optional[ColumnElement]:
        bounds = preset.bounds(today, token)
        if bounds is None:
            return None
        return self._range_fragment(preset.column, bounds)

    def _range_fragment(self, column: Any, bounds: Bounds) -> Optional[ColumnElement]:
        """
        Translate bounds into comparisons.

        On timestamp columns an inclusive upper day becomes `< day + 1` so
        the whole last day matches.
        """
        is_timestamp = isinstance(column.type, DateTime)
        conditions: List[ColumnElement] = []

        if bounds.lower is not None:
            lower: Any = bounds.lower
            if is_timestamp:
                lower = datetime.combine(lower, datetime.min.time())
                if not bounds.lower_inclusive:
                    lower = lower + timedelta(days=1)
                conditions.append(column >= self._bind(lower, column))
            elif bounds.lower_inclusive:
                conditions.append(column >= self._bind(lower, column))
            else:
                conditions.append(column > self._bind(lower, column))

        if bounds.upper is not None:
            upper: Any = bounds.upper
            if is_timestamp:
                upper = datetime.combine(upper, datetime.min.time())
                if bounds.upper_inclusive:
                    upper = upper + timedelta(days=1)
                conditions.append(column < self._bind(upper, column))
            elif bounds.upper_inclusive:
                conditions.append(column <= self._bind(upper, column))
            else:
                conditions.append(column < self._bind(upper, column))

        if not conditions:
            return None
        return and_(*conditions)

    @staticmethod
    def _coerce(column: Any, value: Any) -> Any:
        """Convert a JSON value to the column's Python type, or None if impossible."""
        try:
            python_type = column.type.python_type
        except NotImplementedError:
            return value

        if python_type is int:
            if isinstance(value, bool):
                return None
            try:
                return int(str(value).strip())
            except ValueError:
                return None
        if python_type is str:
            return str(value).strip()
        return value
