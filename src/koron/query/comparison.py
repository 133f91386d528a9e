"""WHERE 절 비교 연산자와 피연산자 분류."""

from dataclasses import dataclass
from typing import Optional

from sqlglot import exp

from koron.core.errors import UnsupportedError
from koron.core.models import CompareOp
from koron.query.dialect import display
from koron.query.support import (
    FromClauseIdentifier,
    column_name_parts,
    extract_qualified_column,
    remove_outer_parens,
)

# 지원하는 이항 비교 연산자
BINARY_OPERATORS: dict[type, CompareOp] = {
    exp.LT: CompareOp.LT,
    exp.LTE: CompareOp.LT_EQ,
    exp.GT: CompareOp.GT,
    exp.GTE: CompareOp.GT_EQ,
    exp.EQ: CompareOp.EQ,
    exp.NEQ: CompareOp.NOT_EQ,
}

# 에러 메시지에 쓰이는 연산자 표기
OPERATOR_SYMBOLS: dict[type, str] = {
    exp.Add: "+",
    exp.Sub: "-",
    exp.Mul: "*",
    exp.Div: "/",
    exp.Mod: "%",
    exp.DPipe: "||",
    exp.BitwiseAnd: "&",
    exp.BitwiseOr: "|",
    exp.BitwiseXor: "^",
    exp.BitwiseLeftShift: "<<",
    exp.BitwiseRightShift: ">>",
    exp.NullSafeEQ: "<=>",
    exp.NullSafeNEQ: "IS DISTINCT FROM",
    exp.Like: "LIKE",
    exp.ILike: "ILIKE",
    exp.SimilarTo: "SIMILAR TO",
    exp.Glob: "GLOB",
    exp.Is: "IS",
}


def is_binary_operator_supported(node: exp.Expression) -> bool:
    return type(node) in BINARY_OPERATORS


def operator_name(node: exp.Expression) -> str:
    """이항 연산 노드의 연산자 표기."""
    symbol = OPERATOR_SYMBOLS.get(type(node))
    return symbol if symbol is not None else node.key.upper()


def compare_op_from_binary(node: exp.Expression, reverse: bool) -> CompareOp:
    """이항 비교 노드를 CompareOp로 변환.

    Args:
        node: 비교 노드
        reverse: 컬럼이 오른쪽에 있어 좌우를 바꿔야 하는지 여부

    Raises:
        UnsupportedError: 지원하지 않는 연산자인 경우
    """
    op = BINARY_OPERATORS.get(type(node))
    if op is None:
        raise UnsupportedError(f"the {operator_name(node)} operator.")
    return op.mirrored() if reverse else op


def compare_op_from_predicate(node: exp.Expression) -> Optional[CompareOp]:
    """`IS [NOT] NULL|TRUE|FALSE` 술어를 CompareOp로 변환 (아니면 None)."""
    negated = isinstance(node, exp.Not)
    if negated:
        node = node.this
    if not isinstance(node, exp.Is):
        return None

    target = node.expression
    if isinstance(target, exp.Null):
        return CompareOp.IS_NOT_NULL if negated else CompareOp.IS_NULL
    if isinstance(target, exp.Boolean):
        if target.this:
            return CompareOp.IS_NOT_TRUE if negated else CompareOp.IS_TRUE
        return CompareOp.IS_NOT_FALSE if negated else CompareOp.IS_FALSE
    return None


def predicate_operand(node: exp.Expression) -> exp.Expression:
    """단항 술어가 적용되는 피연산자."""
    if isinstance(node, exp.Not):
        node = node.this
    return node.this


@dataclass
class ComparisonOperand:
    """비교 피연산자: 컬럼 또는 그 외 (상수 등 불투명한 표현식)."""

    column: Optional[str] = None
    other: Optional[exp.Expression] = None

    @property
    def is_column(self) -> bool:
        return self.column is not None

    @classmethod
    def from_expression(
        cls, from_clause_identifier: FromClauseIdentifier, expr: exp.Expression
    ) -> "ComparisonOperand":
        expr = remove_outer_parens(expr)
        name_parts = column_name_parts(expr)
        if name_parts is None:
            return cls(other=expr)
        return cls(column=extract_qualified_column(from_clause_identifier, expr, name_parts))


def analyze_comparison_operands(
    binary_expr: exp.Expression,
    left: ComparisonOperand,
    right: ComparisonOperand,
) -> tuple[str, exp.Expression, bool]:
    """컬럼과 값 피연산자를 구분한다.

    Returns:
        (컬럼 이름, 값 표현식, 좌우 반전 여부)

    Raises:
        UnsupportedError: 컬럼과 상수의 비교가 아닌 경우
    """
    if left.is_column and not right.is_column:
        return left.column, right.other, False
    if right.is_column and not left.is_column:
        # 컬럼을 왼쪽에 둔다
        return right.column, left.other, True
    raise UnsupportedError(
        f"{display(binary_expr)}. Only comparisons between a column and a constant are supported."
    )
