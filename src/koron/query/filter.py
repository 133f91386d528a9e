"""WHERE 절에서 단일 컬럼 필터를 추출."""

from sqlglot import exp

from koron.core.errors import UnsupportedError
from koron.core.models import CompareOp, Comparison, Filter
from koron.query.comparison import (
    ComparisonOperand,
    analyze_comparison_operands,
    compare_op_from_binary,
    compare_op_from_predicate,
    is_binary_operator_supported,
    operator_name,
    predicate_operand,
)
from koron.query.dialect import UnaryPlus, display
from koron.query.support import FromClauseIdentifier, remove_outer_parens

# 원문 텍스트를 그대로 값으로 쓰는 문자열 리터럴 변형
STRING_LITERALS = (
    exp.National,
    exp.HexString,
    exp.ByteString,
    exp.BitString,
    exp.RawString,
    exp.UnicodeString,
)


class FilterExtractor:
    """WHERE 절을 `column OP value` 형태의 Filter로 정규화한다."""

    def __init__(self, from_clause_identifier: FromClauseIdentifier) -> None:
        self._from_clause_identifier = from_clause_identifier

    def extract(self, selection: exp.Expression) -> Filter:
        """WHERE 절 표현식에서 Filter를 추출.

        Args:
            selection: WHERE 절 표현식

        Returns:
            추출된 Filter

        Raises:
            UnsupportedError: 단일 비교 또는 단항 술어가 아닌 경우
            MalformedQueryError: 컬럼 한정자가 FROM 절과 맞지 않는 경우
        """
        selection = remove_outer_parens(selection)

        predicate = compare_op_from_predicate(selection)
        if predicate is not None:
            return self._extract_unary_comparison(selection, predicate)
        if isinstance(selection, exp.Binary) and not isinstance(
            selection, (exp.Connector, exp.Is)
        ):
            return self._extract_binary_comparison(selection)

        raise UnsupportedError(
            f"unsupported expression in the WHERE clause: {display(selection)}."
        )

    def _extract_binary_comparison(self, binary_expr: exp.Binary) -> Filter:
        # LEFT OP RIGHT 중 한쪽은 컬럼, 다른 쪽은 상수여야 한다
        if not is_binary_operator_supported(binary_expr):
            raise UnsupportedError(f"the {operator_name(binary_expr)} operator.")

        left = ComparisonOperand.from_expression(self._from_clause_identifier, binary_expr.left)
        right = ComparisonOperand.from_expression(
            self._from_clause_identifier, binary_expr.right
        )
        column, value, reverse = analyze_comparison_operands(binary_expr, left, right)

        op = compare_op_from_binary(binary_expr, reverse)
        return Filter(column=column, comparison=Comparison(op, extract_constant_value(value)))

    def _extract_unary_comparison(
        self, predicate_expr: exp.Expression, op: CompareOp
    ) -> Filter:
        operand = ComparisonOperand.from_expression(
            self._from_clause_identifier, predicate_operand(predicate_expr)
        )
        if not operand.is_column:
            raise UnsupportedError(f"{display(predicate_expr)}. Column must be specified.")
        return Filter(column=operand.column, comparison=Comparison(op))


def extract_constant_value(expr: exp.Expression) -> str:
    """상수 표현식을 리터럴 텍스트로 변환.

    Args:
        expr: 괄호가 제거된 값 표현식

    Returns:
        값의 텍스트 (`-1`, `2021-04-02`, `true`, `Null` 등)

    Raises:
        UnsupportedError: 리터럴이 아닌 경우 (`?`, `$1` 같은 placeholder 포함)
    """
    if isinstance(expr, (exp.Neg, UnaryPlus)):
        # 부호는 숫자에만 붙을 수 있고, + 는 값에서 버린다
        number = expr.this
        if isinstance(number, exp.Literal) and not number.is_string:
            sign = "-" if isinstance(expr, exp.Neg) else ""
            return f"{sign}{number.this}"
        raise UnsupportedError(f"Expected a value, got {display(expr)}")
    if isinstance(expr, exp.Literal):
        return expr.this
    if isinstance(expr, STRING_LITERALS):
        return expr.this
    if isinstance(expr, exp.Boolean):
        return "true" if expr.this else "false"
    if isinstance(expr, exp.Null):
        return "Null"
    raise UnsupportedError(f"Expected a value, got {display(expr)}")
