"""FROM 절에서 단일 테이블과 별칭을 추출."""

from dataclasses import dataclass
from typing import Optional

from sqlglot import exp

from koron.core.errors import InternalError, UnsupportedError
from koron.core.models import TableIdentity
from koron.query.destructured_query import DestructuredQuery, Reason, check_guards
from koron.query.dialect import display
from koron.query.support import case_fold_identifier

MULTIPLE_TABLES = (
    "the FROM clause has multiple tables (no JOINs, subqueries or functions allowed)."
)

# SELECT에 붙는 추가 관계 (조인, PIVOT)
SELECT_RELATION_GUARDS: list[tuple[str, Reason]] = [
    ("joins", MULTIPLE_TABLES),
    ("pivots", MULTIPLE_TABLES),
]

# 테이블 참조에 붙을 수 있는 수식어
TABLE_GUARDS: list[tuple[str, Reason]] = [
    ("joins", MULTIPLE_TABLES),
    ("laterals", MULTIPLE_TABLES),
    ("pivots", MULTIPLE_TABLES),
    ("rows_from", MULTIPLE_TABLES),
    ("hints", "table hints (WITH in FROM clauses)."),
    ("version", "version qualifier."),
    ("system_time", "version qualifier."),
    ("when", "version qualifier."),
    ("changes", "CHANGES."),
    ("partition", "table partitions."),
    ("sample", "TABLESAMPLE."),
    ("ordinality", "WITH ORDINALITY."),
    ("only", "ONLY."),
]


def _dotted_parts(node: exp.Expression) -> list[exp.Expression]:
    if isinstance(node, exp.Dot):
        return _dotted_parts(node.this) + _dotted_parts(node.expression)
    return [node]


def table_name_parts(table: exp.Table) -> list[exp.Expression]:
    """테이블 이름 조각을 catalog, db, table 순서로 반환."""
    parts: list[exp.Expression] = []
    for key in ("catalog", "db", "this"):
        part = table.args.get(key)
        if isinstance(part, exp.Expression):
            parts.extend(_dotted_parts(part))
    return parts


def table_identity_from_parts(parts: list[exp.Identifier]) -> TableIdentity:
    """이름 조각으로 TableIdentity를 만든다.

    Raises:
        InternalError: 이름 조각이 없거나 3개를 넘는 경우
    """
    names = [case_fold_identifier(part) for part in parts]
    if not names:
        raise InternalError("found empty table name in query AST.")
    if len(names) == 1:
        return TableIdentity(table=names[0])
    if len(names) == 2:
        return TableIdentity(schema=names[0], table=names[1])
    if len(names) == 3:
        return TableIdentity(db=names[0], schema=names[1], table=names[2])
    raise InternalError(
        "found too many ident in table name (i.e., "
        f"{'.'.join(display(part) for part in parts)}) in query AST."
    )


@dataclass(frozen=True)
class TableIdentWithAlias:
    """FROM 절의 테이블 식별자와 별칭."""

    table: TableIdentity
    alias: Optional[str] = None

    @classmethod
    def extract(cls, query: DestructuredQuery) -> "TableIdentWithAlias":
        """FROM 절이 단일 테이블만 가리키는지 검사하고 식별자를 추출한다.

        Args:
            query: 분해된 쿼리

        Returns:
            테이블 식별자와 (있다면) case folding 된 별칭

        Raises:
            UnsupportedError: 여러 테이블, 조인, 서브쿼리, 함수 등
            InternalError: 테이블 이름 조각 수가 문법상 불가능한 경우
        """
        from_ = query.from_
        if from_ is None or from_.expressions:
            raise UnsupportedError(MULTIPLE_TABLES)
        check_guards(query.select, SELECT_RELATION_GUARDS)

        relation = from_.this
        if not isinstance(relation, exp.Table):
            raise UnsupportedError(MULTIPLE_TABLES)

        parts = table_name_parts(relation)
        if not all(isinstance(part, exp.Identifier) for part in parts):
            # FROM f('arg') 와 같은 테이블 함수
            raise UnsupportedError(MULTIPLE_TABLES)
        check_guards(relation, TABLE_GUARDS)

        table = table_identity_from_parts(parts)
        return cls(table=table, alias=cls._extract_alias(relation))

    @staticmethod
    def _extract_alias(relation: exp.Table) -> Optional[str]:
        alias = relation.args.get("alias")
        if alias is None:
            return None
        if alias.args.get("columns"):
            raise UnsupportedError(
                f"table aliases with columns (such as {display(alias)})."
            )
        name = alias.this
        return case_fold_identifier(name) if isinstance(name, exp.Identifier) else None
