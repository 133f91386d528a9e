"""집계 함수 추출 테스트."""

import pytest


def _extract(sql: str):
    from koron.query.aggregation import extract_aggregation
    from koron.query.destructured_query import DestructuredQuery
    from koron.query.dialect import parse_statements
    from koron.query.support import FromClauseIdentifier
    from koron.query.table import TableIdentWithAlias

    query = DestructuredQuery.destructure(parse_statements(sql))
    table = TableIdentWithAlias.extract(query)
    from_ident = FromClauseIdentifier.of(table.table, table.alias)
    return extract_aggregation(from_ident, query.projection)


def _rejection(sql: str, error_type=None) -> str:
    from koron.core.errors import UnsupportedError

    with pytest.raises(error_type or UnsupportedError) as exc_info:
        _extract(sql)
    return exc_info.value.message


class TestExtractAggregation:
    """집계 추출 테스트."""

    def test_all_functions_any_case(self):
        """따옴표 없는 함수 이름은 대소문자와 무관하게 인식되어야 한다."""
        from koron.core.models import KoronFunction

        cases = {
            "SUM": KoronFunction.SUM,
            "Count": KoronFunction.COUNT,
            "aVg": KoronFunction.AVERAGE,
            "median": KoronFunction.MEDIAN,
            "VARIANCE": KoronFunction.VARIANCE,
            "StdDev": KoronFunction.STANDARD_DEVIATION,
        }

        for name, function in cases.items():
            aggregation = _extract(f"SELECT {name}(x) FROM t")
            assert aggregation.function is function
            assert aggregation.column == "x"

    def test_quoted_lowercase_name_is_accepted(self):
        """소문자로 따옴표 처리된 함수 이름은 인식되어야 한다."""
        from koron.core.models import KoronFunction

        aggregation = _extract('SELECT "sum"(x) FROM t')

        assert aggregation.function is KoronFunction.SUM

    def test_alias_is_folded(self):
        """SELECT 항목의 별칭은 case folding 되어야 한다."""
        aggregation = _extract("SELECT SUM(x) AS Total FROM t")

        assert aggregation.alias == "total"

    def test_quoted_column_is_preserved(self):
        """따옴표로 감싼 컬럼 이름은 그대로 유지되어야 한다."""
        aggregation = _extract('SELECT SUM("Income") FROM t')

        assert aggregation.column == "Income"

    def test_parens_are_ignored(self):
        """함수와 인자를 감싼 괄호는 결과에 영향이 없어야 한다."""
        aggregation = _extract("SELECT ((SUM(((x))))) FROM t")

        assert aggregation.column == "x"

    def test_qualified_column_through_alias(self):
        """별칭으로 한정된 컬럼을 추출해야 한다."""
        aggregation = _extract("SELECT SUM(a.x) FROM t AS a")

        assert aggregation.column == "x"


class TestProjectionRejection:
    """SELECT 절 형태 거부 테스트."""

    MULTIPLE_AGGREGATIONS = (
        "the SELECT clause must contain exactly one aggregation / analytic function. "
        "Nothing else is accepted."
    )

    def test_reject_two_aggregations(self):
        """집계가 두 개면 거부해야 한다."""
        assert _rejection("SELECT SUM(x), COUNT(x) FROM t") == self.MULTIPLE_AGGREGATIONS

    def test_reject_plain_column(self):
        """함수가 아닌 컬럼은 거부해야 한다."""
        assert _rejection("SELECT x FROM t") == self.MULTIPLE_AGGREGATIONS

    def test_reject_wildcard(self):
        """와일드카드는 거부해야 한다."""
        assert _rejection("SELECT * FROM t") == self.MULTIPLE_AGGREGATIONS

    def test_reject_arithmetic_on_aggregation(self):
        """집계에 대한 산술 연산은 거부해야 한다."""
        assert _rejection("SELECT SUM(x) + 1 FROM t") == self.MULTIPLE_AGGREGATIONS


class TestFunctionRejection:
    """함수 수식어와 이름 거부 테스트."""

    def test_reject_window(self):
        """OVER 절은 거부해야 한다."""
        assert _rejection("SELECT SUM(x) OVER () FROM t") == "window functions (OVER)."

    def test_reject_distinct_argument(self):
        """DISTINCT 인자는 거부해야 한다."""
        assert _rejection("SELECT COUNT(DISTINCT x) FROM t") == "DISTINCT."

    def test_reject_filter(self):
        """FILTER 절은 거부해야 한다."""
        assert _rejection("SELECT SUM(x) FILTER (WHERE x > 1) FROM t") == "FILTER."

    def test_reject_null_treatment(self):
        """IGNORE NULLS / RESPECT NULLS는 거부해야 한다."""
        assert _rejection("SELECT SUM(x) IGNORE NULLS FROM t") == "IGNORE NULLS."
        assert _rejection("SELECT SUM(x) RESPECT NULLS FROM t") == "RESPECT NULLS."

    def test_window_reported_before_distinct(self):
        """OVER가 DISTINCT보다 먼저 보고되어야 한다."""
        assert _rejection("SELECT COUNT(DISTINCT x) OVER () FROM t") == (
            "window functions (OVER)."
        )

    def test_reject_unknown_function(self):
        """지원하지 않는 함수는 작성된 이름으로 거부해야 한다."""
        assert _rejection("SELECT MAX(x) FROM t") == "unrecognized or unsupported function: MAX."

    def test_reject_quoted_mismatched_case(self):
        """대소문자가 다른 따옴표 함수 이름은 거부해야 한다."""
        assert _rejection('SELECT "SUM"(x) FROM t') == (
            'unrecognized or unsupported function: "SUM".'
        )


class TestArgumentRejection:
    """함수 인자 거부 테스트."""

    def test_reject_two_arguments(self):
        """인자가 두 개면 MalformedQueryError여야 한다."""
        from koron.core.errors import MalformedQueryError

        message = _rejection("SELECT SUM(x, y) FROM t", MalformedQueryError)

        assert message == "the SUM function takes exactly 1 argument, but 2 are provided."

    def test_reject_no_argument(self):
        """인자가 없으면 MalformedQueryError여야 한다."""
        from koron.core.errors import MalformedQueryError

        message = _rejection("SELECT count() FROM t", MalformedQueryError)

        assert message == "the count function takes exactly 1 argument, but 0 are provided."

    def test_reject_expression_argument(self):
        """컬럼이 아닌 인자는 거부해야 한다."""
        assert _rejection("SELECT AVG(x + 1) FROM t") == (
            "only a column name is supported as the argument of the AVG function."
        )

    def test_reject_wildcard_argument(self):
        """COUNT(*)는 컬럼 인자가 아니므로 거부해야 한다."""
        assert _rejection("SELECT COUNT(*) FROM t") == (
            "only a column name is supported as the argument of the COUNT function."
        )

    def test_reject_positional_parameter_argument(self):
        """$1 인자는 컬럼이 아니므로 거부해야 한다."""
        assert _rejection("SELECT SUM($1) FROM t") == (
            "only a column name is supported as the argument of the SUM function."
        )

    def test_reject_literal_and_star_arguments(self):
        """상수, *, t.* 인자는 거부해야 한다."""
        for argument in ("1", "*", "t.*", "$$abc$$", "+x"):
            assert _rejection(f"SELECT SUM({argument}) FROM t") == (
                "only a column name is supported as the argument of the SUM function."
            )

    def test_reject_column_of_other_table(self):
        """FROM 절과 다른 테이블의 컬럼은 MalformedQueryError여야 한다."""
        from koron.core.errors import MalformedQueryError

        message = _rejection("SELECT SUM(u.x) FROM t", MalformedQueryError)

        assert message == (
            "the u.x column is not part of the table that's listed in the FROM clause (t)."
        )
