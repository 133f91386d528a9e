"""SELECT 절에서 집계/분석 함수를 추출."""

from typing import Optional

from sqlglot import exp

from koron.core.errors import MalformedQueryError, UnsupportedError
from koron.core.models import Aggregation, KoronFunction
from koron.query.dialect import display
from koron.query.support import (
    FromClauseIdentifier,
    case_fold_identifier,
    column_name_parts,
    extract_qualified_column,
    remove_outer_parens,
)

MULTIPLE_AGGREGATIONS = (
    "the SELECT clause must contain exactly one aggregation / analytic function. "
    "Nothing else is accepted."
)

# 함수 호출을 감싸는 수식어 노드
WRAPPER_MODIFIERS: dict[type, str] = {
    exp.Window: "over",
    exp.Filter: "filter",
    exp.WithinGroup: "order",
    exp.IgnoreNulls: "ignore_nulls",
    exp.RespectNulls: "respect_nulls",
}

# 함수 인자 자리에 나타나는 수식어 노드
ARGUMENT_MODIFIERS: dict[type, str] = {
    exp.Distinct: "distinct",
    exp.Order: "order",
    exp.IgnoreNulls: "ignore_nulls",
    exp.RespectNulls: "respect_nulls",
}

# 검사 순서대로 나열한 수식어별 거부 사유
MODIFIER_REASONS: list[tuple[str, str]] = [
    ("over", "window functions (OVER)."),
    ("distinct", "DISTINCT."),
    ("order", "ORDER BY."),
    ("filter", "FILTER."),
    ("ignore_nulls", "IGNORE NULLS."),
    ("respect_nulls", "RESPECT NULLS."),
]

NAMED_ARGUMENTS = (exp.Kwarg, exp.PropertyEQ)


def extract_aggregation(
    from_clause_identifier: FromClauseIdentifier,
    projection: list[exp.Expression],
) -> Aggregation:
    """SELECT 절에서 `function(column) [AS alias]`를 추출한다.

    Args:
        from_clause_identifier: 컬럼 한정자를 검사할 FROM 절 식별자
        projection: SELECT 절 항목 리스트

    Returns:
        추출된 Aggregation

    Raises:
        UnsupportedError: 단일 지원 함수 호출이 아닌 경우
        MalformedQueryError: 인자 개수가 틀리거나 컬럼이 FROM 절과 맞지 않는 경우
    """
    if len(projection) != 1:
        raise UnsupportedError(MULTIPLE_AGGREGATIONS)

    expr, alias = projection[0], None
    if isinstance(expr, exp.Alias):
        alias = case_fold_identifier(expr.args["alias"])
        expr = expr.this

    function, modifiers = _peel_modifiers(remove_outer_parens(expr))
    if not _is_function_call(function):
        raise UnsupportedError(MULTIPLE_AGGREGATIONS)
    if isinstance(function, exp.Anonymous):
        modifiers.update(
            ARGUMENT_MODIFIERS[type(arg)]
            for arg in function.expressions
            if type(arg) in ARGUMENT_MODIFIERS
        )

    for modifier, reason in MODIFIER_REASONS:
        if modifier in modifiers:
            raise UnsupportedError(reason)

    koron_function, name = _validate_function_name(function)
    column = _extract_only_column_argument(from_clause_identifier, name, function.expressions)
    return Aggregation(function=koron_function, column=column, alias=alias)


def _peel_modifiers(expr: exp.Expression) -> tuple[exp.Expression, set[str]]:
    # SUM(x) FILTER (...) OVER (...) 처럼 겹겹이 감싼 수식어를 벗긴다
    modifiers: set[str] = set()
    while type(expr) in WRAPPER_MODIFIERS:
        modifiers.add(WRAPPER_MODIFIERS[type(expr)])
        expr = remove_outer_parens(expr.this)
    return expr, modifiers


def _is_function_call(expr: exp.Expression) -> bool:
    if isinstance(expr, exp.Dot):
        return _is_function_call(expr.expression)
    return isinstance(expr, exp.Func) and not isinstance(expr, (exp.Binary, exp.Unary))


def _written_name(function: exp.Expression) -> tuple[str, Optional[str]]:
    """함수의 작성된 이름과 (한정자 없는 이름이면) case folding 된 이름."""
    if isinstance(function, exp.Dot):
        qualified, _ = _written_name(function.expression)
        return f"{display(function.this)}.{qualified}", None
    if isinstance(function, exp.Anonymous):
        name = function.this
        if isinstance(name, exp.Identifier):
            return display(name), case_fold_identifier(name)
        return name, name.lower()
    # CAST, EXTRACT 등 전용 구문으로 파싱되는 함수
    return function.sql_name(), None


def _validate_function_name(function: exp.Expression) -> tuple[KoronFunction, str]:
    written, folded = _written_name(function)
    koron_function = KoronFunction.from_name(folded) if folded is not None else None
    if koron_function is None:
        raise UnsupportedError(f"unrecognized or unsupported function: {written}.")
    return koron_function, written


def _extract_only_column_argument(
    from_clause_identifier: FromClauseIdentifier,
    function_name: str,
    args: list[exp.Expression],
) -> str:
    # 현재는 단일 컬럼을 받는 함수만 지원한다
    if len(args) != 1:
        verb = "is" if len(args) == 1 else "are"
        raise MalformedQueryError(
            f"the {function_name} function takes exactly 1 argument, "
            f"but {len(args)} {verb} provided."
        )

    arg = args[0]
    if isinstance(arg, NAMED_ARGUMENTS):
        raise UnsupportedError(f"named function arguments (such as {display(arg)}).")

    arg = remove_outer_parens(arg)
    name_parts = column_name_parts(arg)
    if name_parts is None:
        raise UnsupportedError(
            f"only a column name is supported as the argument of the {function_name} function."
        )
    return extract_qualified_column(from_clause_identifier, arg, name_parts)
