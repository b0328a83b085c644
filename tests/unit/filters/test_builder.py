"""
Tests for FilterExpressionBuilder and the filters query parameter.

WHY: Every list endpoint compiles caller criteria through the builder, so
it must:
1. Ignore unknown fields, unknown tokens and blank values
2. Bind every value (never inline it) under a running parameter index
3. Enforce the criteria cap
"""

from datetime import date, datetime, timedelta

import pytest

from backoffice.core.exceptions import FilterCriteriaError
from backoffice.dao.employee import EMPLOYEE_FILTER_FIELDS
from backoffice.dao.ticket import TICKET_FILTER_FIELDS
from backoffice.filters import FilterExpressionBuilder, parse_filters_param
from backoffice.schemas.common import FilterCriterion


TODAY = date(2024, 6, 15)


def _builder(field_map=EMPLOYEE_FILTER_FIELDS, **kwargs) -> FilterExpressionBuilder:
    return FilterExpressionBuilder(field_map, today=TODAY, **kwargs)


class TestBuild:
    """Tests for build()."""

    def test_no_criteria(self):
        expr = _builder().build([])

        assert expr.clause is None
        assert expr.params == []
        assert expr.next_index == 1

    def test_equality_criterion_is_bound(self):
        expr = _builder().build([{"field": "gender", "value": "female"}])

        assert expr.params == ["female"]
        assert expr.next_index == 2
        assert str(expr.clause) == "employees.gender = :filter_1"

    def test_unknown_field_and_blank_values_are_skipped(self):
        expr = _builder().build(
            [
                {"field": "salary", "value": "1000"},
                {"field": "gender", "value": ""},
                {"field": "workplace", "value": "   "},
                {"field": "position", "value": None},
                {"value": "orphan"},
            ]
        )

        assert expr.clause is None
        assert expr.params == []

    def test_unknown_preset_token_is_skipped(self):
        expr = _builder().build([{"field": "visa_expiry", "value": "45days"}])

        assert expr.clause is None

    def test_start_index_continues_numbering(self):
        """
        Parameter names continue from start_index.

        WHY: Query-parameter filters and caller criteria share one
        statement, so their bind names must not collide.
        """
        expr = _builder().build([{"field": "gender", "value": "male"}], start_index=5)

        assert "filter_5" in str(expr.clause)
        assert expr.next_index == 6

    def test_preset_binds_both_bounds(self):
        expr = _builder().build([{"field": "visa_expiry", "value": "30days"}])

        assert expr.params == [TODAY, TODAY + timedelta(days=30)]
        assert expr.next_index == 3
        sql = str(expr.clause)
        assert "employees.visa_expiry >= :filter_1" in sql
        assert "employees.visa_expiry < :filter_2" in sql

    def test_fragments_are_anded_in_input_order(self):
        expr = _builder().build(
            [
                {"field": "birth_year", "value": "25_35"},
                {"field": "gender", "value": "female"},
            ]
        )

        assert expr.params == [date(1989, 6, 15), date(1999, 6, 15), "female"]
        assert " AND " in str(expr.clause)

    def test_timestamp_upper_bound_covers_whole_last_day(self):
        expr = _builder(TICKET_FILTER_FIELDS).build([{"field": "date_range", "value": "this_month"}])

        assert expr.params == [datetime(2024, 6, 1), datetime(2024, 7, 1)]
        assert "tickets.created_at < :filter_2" in str(expr.clause)

    def test_integer_field_coerces_or_skips(self):
        builder = _builder(TICKET_FILTER_FIELDS)

        assert builder.build([{"field": "contractor", "value": "7"}]).params == [7]
        assert builder.build([{"field": "contractor", "value": "seven"}]).clause is None

    def test_accepts_schema_objects(self):
        expr = _builder().build([FilterCriterion(field="workplace", value="Site A")])

        assert expr.params == ["Site A"]


class TestCriteriaLimit:
    """Tests for the maximum criteria count."""

    def test_ten_criteria_allowed(self):
        criteria = [{"field": "gender", "value": "female"}] * 10

        expr = _builder().build(criteria)

        assert len(expr.params) == 10

    def test_eleven_criteria_rejected(self):
        criteria = [{"field": "gender", "value": "female"}] * 11

        with pytest.raises(FilterCriteriaError) as exc_info:
            _builder().build(criteria)

        assert exc_info.value.status_code == 400
        assert exc_info.value.context["received"] == 11

    def test_custom_limit(self):
        with pytest.raises(FilterCriteriaError):
            _builder(max_criteria=1).build(
                [{"field": "gender", "value": "a"}, {"field": "gender", "value": "b"}]
            )


class TestParseFiltersParam:
    """Tests for decoding the filters query parameter."""

    @pytest.mark.parametrize("raw", [None, "", "not json", "{\"field\": \"x\"}", "42"])
    def test_malformed_input_yields_no_filters(self, raw):
        assert parse_filters_param(raw) == []

    def test_non_object_items_dropped(self):
        raw = '[{"field": "status", "value": "new"}, 3, "x"]'

        assert parse_filters_param(raw) == [{"field": "status", "value": "new"}]
