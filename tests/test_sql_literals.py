from decimal import Decimal

import pytest

from portfolio.db.base import QueryError
from portfolio.db.sql import escape_literal, render_sql


class TestEscapeLiteral:
    def test_quotes_are_doubled(self):
        assert escape_literal("Back'end") == "'Back''end'"
        assert escape_literal("''") == "''''''"

    def test_scalars(self):
        assert escape_literal(None) == "NULL"
        assert escape_literal(True) == "1"
        assert escape_literal(False) == "0"
        assert escape_literal(42) == "42"
        assert escape_literal(2.5) == "2.5"
        assert escape_literal(Decimal("9.99")) == "9.99"

    def test_bytes_render_as_blob(self):
        assert escape_literal(b"\x00\xff") == "X'00ff'"

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_float_rejected(self, value):
        with pytest.raises(QueryError):
            escape_literal(value)


class TestRenderSql:
    def test_substitutes_in_order(self):
        sql = render_sql(
            "SELECT * FROM skills WHERE category = ? AND proficiency > ?",
            ("Back'end", 80),
        )
        assert sql == "SELECT * FROM skills WHERE category = 'Back''end' AND proficiency > 80"

    def test_no_parameters(self):
        assert render_sql("SELECT 1") == "SELECT 1"

    def test_question_mark_inside_literal_is_kept(self):
        sql = render_sql("SELECT 'why?' AS q, name FROM skills WHERE id = ?", [3])
        assert sql == "SELECT 'why?' AS q, name FROM skills WHERE id = 3"

    def test_rendered_value_containing_placeholder_is_not_reexpanded(self):
        sql = render_sql("INSERT INTO skills (name, icon) VALUES (?, ?)", ["C?", None])
        assert sql == "INSERT INTO skills (name, icon) VALUES ('C?', NULL)"

    def test_too_few_parameters(self):
        with pytest.raises(QueryError, match="Not enough"):
            render_sql("SELECT * FROM skills WHERE id = ? AND name = ?", [1])

    def test_too_many_parameters(self):
        with pytest.raises(QueryError, match="Too many"):
            render_sql("SELECT * FROM skills WHERE id = ?", [1, 2])

    def test_injection_attempt_stays_inside_literal(self):
        sql = render_sql("SELECT * FROM profile WHERE name = ?", ["x'; DROP TABLE profile; --"])
        assert sql == "SELECT * FROM profile WHERE name = 'x''; DROP TABLE profile; --'"
