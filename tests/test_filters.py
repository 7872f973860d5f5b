import pytest

from app.errors import ValidationError
from app.schemas.car import FilterDescriptor
from app.services.filters import OPERATORS, FilterClause, translate_filters


def f(field, operator, value=None):
    return FilterDescriptor(field=field, operator=operator, value=value)


# ---------------------------------------------------------------------------
# Operator table
# ---------------------------------------------------------------------------

class TestOperators:

    @pytest.mark.parametrize(
        "operator, value, expected_sql, expected_param",
        [
            ("contains", "Tesla", "brand LIKE ?", "%Tesla%"),
            ("equals", "Tesla", "brand = ?", "Tesla"),
            ("startsWith", "Te", "brand LIKE ?", "Te%"),
            ("endsWith", "sla", "brand LIKE ?", "%sla"),
        ],
    )
    def test_string_operators(self, operator, value, expected_sql, expected_param):
        clause = translate_filters([f("brand", operator, value)])
        assert clause.sql == expected_sql
        assert clause.params == [expected_param]

    @pytest.mark.parametrize(
        "operator, symbol",
        [
            ("greaterThan", ">"),
            ("lessThan", "<"),
            ("greaterThanOrEqual", ">="),
            ("lessThanOrEqual", "<="),
        ],
    )
    def test_comparisons_pass_value_through_as_string(self, operator, symbol):
        clause = translate_filters([f("range_km", operator, "400")])
        assert clause.sql == f"range_km {symbol} ?"
        assert clause.params == ["400"]

    def test_numeric_json_value_is_bound_as_string(self):
        descriptor = FilterDescriptor(field="price_euro", operator="lessThan", value=50000)
        clause = translate_filters([descriptor])
        assert clause.params == ["50000"]

    def test_is_empty_binds_nothing_even_with_a_value(self):
        clause = translate_filters([f("body_style", "isEmpty", "ignored")])
        assert clause.sql == "(body_style IS NULL OR body_style = '')"
        assert clause.params == []

    def test_unknown_operator_is_dropped_silently(self):
        clause = translate_filters([f("brand", "soundsLike", "Tesla")])
        assert clause.sql == ""
        assert clause.params == []
        assert not clause

    def test_missing_operator_is_dropped_silently(self):
        clause = translate_filters([FilterDescriptor(field="brand", value="Tesla"), f("model", "equals", "Leaf")])
        assert clause.sql == "model = ?"
        assert clause.params == ["Leaf"]

    def test_operator_table_is_closed(self):
        assert set(OPERATORS) == {
            "contains", "equals", "startsWith", "endsWith", "isEmpty",
            "greaterThan", "lessThan", "greaterThanOrEqual", "lessThanOrEqual",
        }


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------

class TestComposition:

    def test_fragments_and_params_keep_input_order(self):
        clause = translate_filters([
            f("price_euro", "lessThan", "50000"),
            f("brand", "contains", "Tesla"),
        ])
        assert clause.sql == "price_euro < ? AND brand LIKE ?"
        assert clause.params == ["50000", "%Tesla%"]

    def test_param_count_matches_recognized_non_empty_descriptors(self):
        filters = [
            f("brand", "contains", "a"),
            f("segment", "isEmpty"),
            f("model", "bogus", "x"),
            f("seats", "greaterThanOrEqual", "5"),
            f("plug_type", "endsWith", "CCS"),
        ]
        clause = translate_filters(filters)
        assert len(clause.params) == 3
        assert clause.sql.count("?") == 3
        assert clause.sql == (
            "brand LIKE ? AND (segment IS NULL OR segment = '') "
            "AND seats >= ? AND plug_type LIKE ?"
        )

    def test_unknown_operator_between_known_ones(self):
        clause = translate_filters([
            f("brand", "equals", "BMW"),
            f("brand", "nope", "x"),
            f("range_km", "greaterThan", "300"),
        ])
        assert clause.sql == "brand = ? AND range_km > ?"
        assert clause.params == ["BMW", "300"]

    def test_missing_value_binds_empty_string(self):
        clause = translate_filters([f("brand", "contains")])
        assert clause.params == ["%%"]


# ---------------------------------------------------------------------------
# Field allow-list
# ---------------------------------------------------------------------------

class TestFieldAllowList:

    def test_unknown_field_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            translate_filters([f("brand; DROP TABLE electric_cars; --", "equals", "x")])
        assert exc_info.value.status_code == 400
        assert "Invalid filter field" in exc_info.value.message

    def test_unknown_field_rejected_even_with_unknown_operator(self):
        with pytest.raises(ValidationError):
            translate_filters([f("not_a_column", "bogus", "x")])

    def test_custom_allow_list(self):
        clause = translate_filters([f("brand", "equals", "Kia")], allowed_fields=frozenset({"brand"}))
        assert clause.params == ["Kia"]
        with pytest.raises(ValidationError):
            translate_filters([f("model", "equals", "EV6")], allowed_fields=frozenset({"brand"}))


# ---------------------------------------------------------------------------
# SQLAlchemy rendering
# ---------------------------------------------------------------------------

class TestToText:

    def test_placeholders_become_numbered_binds(self):
        clause = FilterClause("price_euro < ? AND brand LIKE ?", ["50000", "%Tesla%"])
        rendered = clause.to_text()
        assert str(rendered) == "price_euro < :p0 AND brand LIKE :p1"
        assert clause.bind_params() == {"p0": "50000", "p1": "%Tesla%"}

    def test_is_empty_renders_without_binds(self):
        clause = translate_filters([f("segment", "isEmpty")])
        assert str(clause.to_text()) == "(segment IS NULL OR segment = '')"
