"""Core 데이터 모델 정의."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


@dataclass(frozen=True)
class TableIdentity:
    """FROM 절에서 추출한 테이블 식별자.

    모든 이름은 식별자 규칙에 따라 case folding 된 상태다.
    """

    table: str
    schema: Optional[str] = None
    db: Optional[str] = None

    @property
    def parts(self) -> list[str]:
        """존재하는 이름만 db, schema, table 순서로 반환."""
        return [part for part in (self.db, self.schema, self.table) if part is not None]

    def to_sql(self, quote_style: Optional[str] = None) -> str:
        """쿼리 재생성에 쓰이는 정규화된 테이블 이름.

        Args:
            quote_style: 식별자를 감쌀 따옴표 문자 (None이면 따옴표 없음)

        Returns:
            점으로 연결된 테이블 이름
        """
        quote = quote_style or ""
        return ".".join(f"{quote}{part}{quote}" for part in self.parts)

    def to_dict(self) -> dict[str, Optional[str]]:
        return {"db": self.db, "schema": self.schema, "table": self.table}

    def __str__(self) -> str:
        return ".".join(self.parts)


class KoronFunction(Enum):
    """지원하는 집계/분석 함수."""

    SUM = "Sum"
    COUNT = "Count"
    AVERAGE = "Average"
    MEDIAN = "Median"
    VARIANCE = "Variance"
    STANDARD_DEVIATION = "Standard Deviation"

    @classmethod
    def from_name(cls, name: str) -> Optional["KoronFunction"]:
        """case folding 된 SQL 함수 이름으로 함수를 찾는다."""
        return FUNCTION_NAMES.get(name)

    def __str__(self) -> str:
        return self.value


# SQL 함수 이름 -> 함수 (이 표에 없는 이름은 모두 거부된다)
FUNCTION_NAMES: dict[str, KoronFunction] = {
    "sum": KoronFunction.SUM,
    "count": KoronFunction.COUNT,
    "avg": KoronFunction.AVERAGE,
    "median": KoronFunction.MEDIAN,
    "variance": KoronFunction.VARIANCE,
    "stddev": KoronFunction.STANDARD_DEVIATION,
}


@dataclass(frozen=True)
class Aggregation:
    """SELECT 절의 `function(column) [AS alias]`."""

    function: KoronFunction
    column: str
    alias: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "function": self.function.name,
            "column": self.column,
            "alias": self.alias,
        }


class CompareOp(Enum):
    """컬럼 값과 상수의 비교 연산."""

    LT = "Less than"
    LT_EQ = "Less than or equal"
    GT = "Greater than"
    GT_EQ = "Greater than or equal"
    EQ = "Equal"
    NOT_EQ = "Not equal"
    IS_NULL = "Is null"
    IS_NOT_NULL = "Is not null"
    IS_TRUE = "Is true"
    IS_NOT_TRUE = "Is not true"
    IS_FALSE = "Is false"
    IS_NOT_FALSE = "Is not false"

    @property
    def takes_value(self) -> bool:
        """비교 대상 값이 필요한 연산인지 여부."""
        return self in _VALUED_OPS

    def mirrored(self) -> "CompareOp":
        """피연산자 좌우를 바꿨을 때의 연산 (`1 < c` -> `c > 1`)."""
        return _MIRRORED.get(self, self)

    def __str__(self) -> str:
        return self.value


_VALUED_OPS = frozenset(
    {
        CompareOp.LT,
        CompareOp.LT_EQ,
        CompareOp.GT,
        CompareOp.GT_EQ,
        CompareOp.EQ,
        CompareOp.NOT_EQ,
    }
)

_MIRRORED = {
    CompareOp.LT: CompareOp.GT,
    CompareOp.GT: CompareOp.LT,
    CompareOp.LT_EQ: CompareOp.GT_EQ,
    CompareOp.GT_EQ: CompareOp.LT_EQ,
}


@dataclass(frozen=True)
class Comparison:
    """비교 연산과 (필요한 경우) 리터럴 값의 텍스트."""

    op: CompareOp
    value: Optional[str] = None

    def __post_init__(self) -> None:
        if self.op.takes_value and self.value is None:
            raise ValueError(f"{self.op.name} requires a value")
        if not self.op.takes_value and self.value is not None:
            raise ValueError(f"{self.op.name} does not take a value")

    def to_dict(self) -> dict[str, Optional[str]]:
        return {"op": self.op.name, "value": self.value}


@dataclass(frozen=True)
class Filter:
    """WHERE 절에서 추출한 단일 컬럼 필터."""

    column: str
    comparison: Comparison

    def to_dict(self) -> dict[str, Any]:
        return {"column": self.column, "comparison": self.comparison.to_dict()}


@dataclass(frozen=True)
class QueryMetadata:
    """쿼리에서 추출한 메타데이터와 재생성된 쿼리."""

    aggregation: Aggregation
    table: TableIdentity
    filter: Optional[Filter]
    data_extraction_query: str
    data_aggregation_query: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """JSON 직렬화 가능한 딕셔너리로 변환.

        Returns:
            메타데이터 딕셔너리
        """
        return {
            "aggregation": self.aggregation.to_dict(),
            "table": self.table.to_dict(),
            "filter": self.filter.to_dict() if self.filter else None,
            "data_extraction_query": self.data_extraction_query,
            "data_aggregation_query": self.data_aggregation_query,
        }
