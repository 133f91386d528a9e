"""추출된 메타데이터로 데이터 추출/집계 쿼리를 재생성."""

from typing import Optional

from sqlglot import exp

from koron.core.models import Aggregation, Filter, KoronFunction, TableIdentity
from koron.query.dialect import to_sql


def _quote(name: str, quote_style: Optional[str]) -> str:
    quote = quote_style or ""
    return f"{quote}{name}{quote}"


def create_data_extraction_query(
    aggregation: Aggregation,
    table: TableIdentity,
    filter: Optional[Filter],
    quote_style: Optional[str] = None,
) -> str:
    """집계를 직접 계산하는 데 필요한 원시 값을 조회하는 쿼리를 만든다.

    필터 컬럼은 집계 컬럼과 다를 때만 추가로 조회한다.

    Args:
        aggregation: 추출된 집계
        table: FROM 절 테이블 식별자
        filter: 추출된 필터 (없으면 None)
        quote_style: 식별자를 감쌀 따옴표 문자

    Returns:
        `SELECT column[, filter_column] FROM table`
    """
    columns = [aggregation.column]
    if filter is not None and filter.column != aggregation.column:
        columns.append(filter.column)

    projection = ", ".join(_quote(column, quote_style) for column in columns)
    return f"SELECT {projection} FROM {table.to_sql(quote_style)}"


def create_data_aggregation_query(
    aggregation: Aggregation,
    projection_item: exp.Expression,
    from_: exp.From,
    selection: Optional[exp.Expression],
) -> Optional[str]:
    """데이터 소스가 집계를 직접 계산하도록 원본 절로 쿼리를 다시 만든다.

    결과는 데이터 소스의 타입과 무관하게 텍스트로 받도록 CAST 한다.
    원본 노드는 복사해서 쓰므로 입력 트리는 바뀌지 않는다.

    Args:
        aggregation: 추출된 집계
        projection_item: 원본 SELECT 항목 (별칭 포함)
        from_: 원본 FROM 절
        selection: 원본 WHERE 표현식 (없으면 None)

    Returns:
        `SELECT CAST(expr AS TEXT) [AS alias] FROM ... [WHERE ...]`,
        MEDIAN은 데이터 소스에서 계산하지 않으므로 None
    """
    if aggregation.function is KoronFunction.MEDIAN:
        return None

    if isinstance(projection_item, exp.Alias):
        expression, alias = projection_item.this, projection_item.args["alias"]
    else:
        expression, alias = projection_item, None

    projected: exp.Expression = exp.Cast(
        this=expression.copy(), to=exp.DataType.build("text")
    )
    if alias is not None:
        projected = exp.Alias(this=projected, alias=alias.copy())

    select = exp.Select(expressions=[projected])
    select.set("from", from_.copy())
    if selection is not None:
        select.set("where", exp.Where(this=selection.copy()))
    return to_sql(select)
