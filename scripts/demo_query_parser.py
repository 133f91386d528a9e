#!/usr/bin/env python
"""쿼리 파서 데모 스크립트.

SQL 쿼리에서 집계/테이블/필터 메타데이터를 추출하고 재생성된 쿼리를 출력합니다.

사용법:
    python scripts/demo_query_parser.py                          # 샘플 쿼리 실행
    python scripts/demo_query_parser.py "SELECT SUM(x) FROM t"   # 지정한 쿼리 실행
    python scripts/demo_query_parser.py --quote-style '"'        # 식별자 따옴표 지정
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# 프로젝트 루트 경로 추가
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from koron.core.config import Settings
from koron.core.errors import ParseError
from koron.query.query_metadata import QueryParser

console = Console()

SAMPLE_QUERIES = [
    "SELECT SUM(income) FROM taxpayers WHERE age >= 21",
    "SELECT avg(t.price) AS avg_price FROM shop.items AS t WHERE 10 < t.price",
    "SELECT MEDIAN(score) FROM exams WHERE passed IS TRUE",
    "SELECT COUNT(id) FROM users GROUP BY country",
    "SELECT SUM(a) FROM t1 JOIN t2 ON t1.id = t2.id",
    "SELECT SUM(x) FROM t WHERE x > y",
    "SELECT SUM(x, y) FROM t",
]


def print_result(parser: QueryParser, sql: str, quote_style: Optional[str]) -> bool:
    """쿼리 하나를 파싱하고 결과를 출력합니다."""
    table = Table(show_header=False, box=None)
    table.add_column("항목", style="cyan")
    table.add_column("값")
    table.add_row("쿼리", sql)

    try:
        metadata = parser.parse(sql, quote_style)
    except ParseError as e:
        table.add_row("결과", f"[red]❌ {e}[/red]")
        console.print(Panel(table, border_style="red"))
        return False

    aggregation = metadata.aggregation
    table.add_row("결과", "[green]✅ 지원[/green]")
    table.add_row("집계", f"{aggregation.function}({aggregation.column})")
    if aggregation.alias is not None:
        table.add_row("별칭", aggregation.alias)
    table.add_row("테이블", str(metadata.table))
    if metadata.filter is not None:
        comparison = metadata.filter.comparison
        value = f" {comparison.value}" if comparison.value is not None else ""
        table.add_row("필터", f"{metadata.filter.column} [{comparison.op}]{value}")
    table.add_row("추출 쿼리", metadata.data_extraction_query)
    table.add_row("집계 쿼리", metadata.data_aggregation_query or "-")
    console.print(Panel(table, border_style="green"))
    return True


def main():
    """메인 함수."""
    parser = argparse.ArgumentParser(
        description="SQL 쿼리 메타데이터 추출 데모"
    )
    parser.add_argument(
        "queries",
        nargs="*",
        help="파싱할 SQL 쿼리 (생략 시 샘플 쿼리 사용)",
    )
    parser.add_argument(
        "--quote-style",
        type=str,
        default=None,
        help="재생성 쿼리의 식별자 따옴표 문자 (기본값: 설정값)",
    )

    args = parser.parse_args()

    settings = Settings()
    logging.basicConfig(level=settings.log_level.upper())

    query_parser = QueryParser(settings)
    queries = args.queries or SAMPLE_QUERIES

    accepted = sum(print_result(query_parser, sql, args.quote_style) for sql in queries)
    console.print(f"\n지원 쿼리: {accepted}/{len(queries)}건")


if __name__ == "__main__":
    main()
