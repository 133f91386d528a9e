"""쿼리 구조 분해 - 지원하지 않는 절을 거부하고 SELECT를 꺼낸다."""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from sqlglot import exp

from koron.core.errors import UnsupportedError
from koron.query.dialect import display

SINGLE_SELECT_ONLY = "statements different from single SELECT statement."

# 거부 사유: 고정 문자열 또는 절의 값으로 메시지를 만드는 함수
Reason = Union[str, Callable[[Any], str]]


def _limit_reason(limit: exp.Expression) -> str:
    # sqlglot은 TOP / LIMIT / FETCH / LIMIT BY를 모두 "limit" 자리에 둔다
    if isinstance(limit, exp.Fetch):
        return "FETCH."
    if limit.meta.get("top"):
        return "TOP."
    if limit.expressions:
        limit_by = ", ".join(display(e) for e in limit.expressions)
        return f"limit by clauses (i.e., {limit_by})."
    return "LIMIT."


def _locks_reason(locks: list[exp.Expression]) -> str:
    clauses = ", ".join(
        "FOR UPDATE" if lock.args.get("update") else "FOR SHARE" for lock in locks
    )
    return f"locking clauses (i.e., {clauses})."


def _group_reason(group: exp.Expression) -> str:
    if group.args.get("all"):
        return "GROUP BY ALL."
    return "GROUP BY."


# 쿼리 수준 절 (SELECT, 괄호로 감싼 쿼리, 집합 연산에 공통)
QUERY_GUARDS: list[tuple[str, Reason]] = [
    ("with", "CTEs (i.e., WITH clause)."),
    ("order", "ORDER BY."),
    ("limit", _limit_reason),
    ("offset", "OFFSET."),
    ("locks", _locks_reason),
    ("options", "FOR clause."),
    ("settings", "SETTINGS."),
    ("format", "FORMAT."),
]

# SELECT 수준 절
SELECT_GUARDS: list[tuple[str, Reason]] = [
    ("distinct", "DISTINCT."),
    ("kind", lambda kind: f"SELECT AS {kind}."),
    ("hint", "optimizer hints."),
    ("into", "SELECT INTO."),
    ("laterals", "LATERAL VIEW."),
    ("match", "MATCH_RECOGNIZE."),
    ("connect", "CONNECT BY."),
    ("prewhere", "PREWHERE."),
    ("group", _group_reason),
    ("cluster", "CLUSTER BY."),
    ("distribute", "DISTRIBUTE BY."),
    ("sort", "SORT BY."),
    ("having", "HAVING."),
    ("qualify", "QUALIFY."),
    ("windows", "named windows (i.e., WINDOW w AS (PARTITION BY .. ORDER BY ..))."),
    ("sample", "TABLESAMPLE."),
]

SET_OPERATIONS = (exp.Union, exp.Intersect, exp.Except)


def is_set(value: Any) -> bool:
    """구문 트리의 인자 자리가 채워져 있는지 여부."""
    if isinstance(value, list):
        return len(value) > 0
    return value is not None and value is not False


def check_guards(node: exp.Expression, guards: list[tuple[str, Reason]]) -> None:
    """노드의 인자를 순서대로 검사해 처음 채워진 절을 거부한다.

    Raises:
        UnsupportedError: 거부 대상 절이 있는 경우
    """
    for key, reason in guards:
        value = node.args.get(key)
        if is_set(value):
            raise UnsupportedError(reason if isinstance(reason, str) else reason(value))


def _set_operation_name(node: exp.Expression) -> str:
    name = type(node).__name__.upper()
    if isinstance(node, exp.Union) and not node.args.get("distinct"):
        name += " ALL"
    return name


@dataclass
class DestructuredQuery:
    """검증을 통과한 SELECT의 절들 (원본 노드 참조)."""

    select: exp.Select
    projection: list[exp.Expression]
    from_: Optional[exp.From]
    selection: Optional[exp.Expression]

    @classmethod
    def destructure(cls, statements: list[exp.Expression]) -> "DestructuredQuery":
        """문장 리스트를 단일 SELECT의 절들로 분해한다.

        Args:
            statements: 파싱된 문장 리스트

        Returns:
            분해된 쿼리

        Raises:
            UnsupportedError: 단일 SELECT가 아니거나 지원하지 않는 절이 있는 경우
        """
        if len(statements) != 1:
            raise UnsupportedError(SINGLE_SELECT_ONLY)
        return cls._destructure_query(statements[0])

    @classmethod
    def _destructure_query(cls, node: exp.Expression) -> "DestructuredQuery":
        if isinstance(node, exp.Subquery):
            # (SELECT ...) 중첩은 쿼리가 아닌 본문이 나올 때까지 벗긴다
            check_guards(node, QUERY_GUARDS)
            return cls._destructure_query(node.this)
        if isinstance(node, exp.Paren):
            return cls._destructure_query(node.this)
        if isinstance(node, SET_OPERATIONS):
            check_guards(node, QUERY_GUARDS)
            raise UnsupportedError(f"set operations (i.e., {_set_operation_name(node)}).")
        if isinstance(node, exp.Values):
            raise UnsupportedError("VALUES.")
        if isinstance(node, exp.Table):
            raise UnsupportedError("TABLE (i.e., SELECT * FROM table_name).")
        if not isinstance(node, exp.Select):
            raise UnsupportedError(SINGLE_SELECT_ONLY)
        return cls._destructure_select(node)

    @classmethod
    def _destructure_select(cls, select: exp.Select) -> "DestructuredQuery":
        check_guards(select, QUERY_GUARDS)
        check_guards(select, SELECT_GUARDS)

        where = select.args.get("where")
        return cls(
            select=select,
            projection=list(select.expressions),
            from_=select.args.get("from"),
            selection=where.this if where is not None else None,
        )
