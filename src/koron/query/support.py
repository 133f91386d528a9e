"""식별자/표현식 처리 공통 함수."""

from dataclasses import dataclass
from typing import Optional

from sqlglot import exp

from koron.core.errors import InternalError, MalformedQueryError
from koron.core.models import TableIdentity
from koron.query.dialect import display


def case_fold_identifier(ident: exp.Identifier) -> str:
    """식별자를 case folding 한다.

    PostgreSQL과 같이 따옴표 없는 식별자는 소문자로, 따옴표로 감싼 식별자는
    그대로 둔다.
    """
    if ident.args.get("quoted"):
        return ident.this
    return ident.this.lower()


def remove_outer_parens(expr: exp.Expression) -> exp.Expression:
    """바깥쪽 괄호를 재귀적으로 제거 (`(((x)))` -> `x`)."""
    while isinstance(expr, exp.Paren):
        expr = expr.this
    return expr


def column_name_parts(expr: exp.Expression) -> Optional[list[exp.Identifier]]:
    """컬럼 참조의 이름 조각을 왼쪽부터 반환.

    `db.schema.table.column` 보다 긴 참조는 sqlglot이 `exp.Dot`으로 감싸므로
    함께 펼친다. 컬럼 참조가 아니면 (`*`, `t.*`, 함수 등) None.

    Args:
        expr: 괄호가 제거된 표현식

    Returns:
        식별자 리스트 또는 None
    """
    if isinstance(expr, exp.Column):
        parts = [
            expr.args[key]
            for key in ("catalog", "db", "table", "this")
            if expr.args.get(key) is not None
        ]
    elif isinstance(expr, exp.Dot):
        left = column_name_parts(expr.this)
        if left is None:
            return None
        parts = [*left, expr.expression]
    else:
        return None

    if not all(isinstance(part, exp.Identifier) for part in parts):
        return None
    return parts


@dataclass(frozen=True)
class FromClauseIdentifier:
    """컬럼 한정자(qualifier)를 검사할 FROM 절 식별자.

    별칭이 있으면 별칭 문자열이, 없으면 테이블 식별자 자체가 기준이 된다.
    """

    base: Optional[TableIdentity] = None
    alias: Optional[str] = None

    @classmethod
    def of(cls, table: TableIdentity, alias: Optional[str]) -> "FromClauseIdentifier":
        if alias is not None:
            return cls(alias=alias)
        return cls(base=table)

    def matches(
        self,
        db: Optional[exp.Identifier],
        schema: Optional[exp.Identifier],
        table: exp.Identifier,
    ) -> bool:
        """컬럼 한정자가 FROM 절의 테이블을 가리키는지 확인한다.

        기대 식별자에 없는 db/schema와 한정자에 없는 db/schema는 모두
        와일드카드로 취급한다.
        """
        if self.alias is not None:
            # 별칭은 스키마로 한정될 수 없다
            return schema is None and case_fold_identifier(table) == self.alias

        expected = self.base
        db_matches = (
            expected.db is None or db is None or case_fold_identifier(db) == expected.db
        )
        schema_matches = (
            expected.schema is None
            or schema is None
            or case_fold_identifier(schema) == expected.schema
        )
        table_matches = case_fold_identifier(table) == expected.table
        return db_matches and schema_matches and table_matches

    def __str__(self) -> str:
        return self.alias if self.alias is not None else str(self.base)


def extract_qualified_column(
    from_clause_identifier: FromClauseIdentifier,
    reference: exp.Expression,
    name_parts: list[exp.Identifier],
) -> str:
    """컬럼 이름을 추출하고 한정자가 FROM 절과 일치하는지 검사한다.

    Args:
        from_clause_identifier: FROM 절 식별자
        reference: 원본 컬럼 참조 (에러 메시지용)
        name_parts: 왼쪽부터의 이름 조각

    Returns:
        case folding 된 컬럼 이름

    Raises:
        InternalError: 이름 조각이 비었거나 4개를 넘는 경우
        MalformedQueryError: 한정자가 FROM 절과 맞지 않는 경우
    """
    if not name_parts:
        raise InternalError("found empty column name in query AST.")
    if len(name_parts) > 4:
        raise InternalError(
            f"found too many ident in column name (i.e., {display(reference)})."
        )

    *qualifier, column = name_parts
    if qualifier:
        table = qualifier[-1]
        schema = qualifier[-2] if len(qualifier) >= 2 else None
        db = qualifier[-3] if len(qualifier) >= 3 else None
        if not from_clause_identifier.matches(db, schema, table):
            raise MalformedQueryError(
                f"the {display(reference)} column is not part of the table "
                f"that's listed in the FROM clause ({from_clause_identifier})."
            )

    return case_fold_identifier(column)
