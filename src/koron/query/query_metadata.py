"""쿼리 메타데이터 추출 파이프라인."""

import logging
from typing import Optional

from sqlglot.errors import SqlglotError

from koron.core.config import Settings
from koron.core.errors import InternalError, MalformedQueryError, ParseError
from koron.core.models import QueryMetadata
from koron.query.aggregation import extract_aggregation
from koron.query.destructured_query import DestructuredQuery
from koron.query.dialect import parse_statements
from koron.query.filter import FilterExtractor
from koron.query.regenerate import create_data_aggregation_query, create_data_extraction_query
from koron.query.support import FromClauseIdentifier
from koron.query.table import TableIdentWithAlias

logger = logging.getLogger(__name__)


class QueryParser:
    """SQL 쿼리를 검증하고 QueryMetadata를 추출한다.

    파싱 -> 구조 분해 -> 테이블 -> 집계 -> 필터 -> 쿼리 재생성 순서로 진행하며,
    처음 만난 위반 사항에서 즉시 실패한다.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        """파서 초기화.

        Args:
            settings: 애플리케이션 설정 (None이면 환경 변수에서 로드)
        """
        self._settings = settings or Settings()

    def parse(self, sql: str, quote_style: Optional[str] = None) -> QueryMetadata:
        """SQL 쿼리에서 메타데이터를 추출.

        Args:
            sql: SQL 쿼리 문자열
            quote_style: 재생성 쿼리의 식별자 따옴표 문자 (None이면 설정값 사용)

        Returns:
            추출된 메타데이터와 재생성된 쿼리

        Raises:
            MalformedQueryError: 구문 오류 또는 구조적 오류
            UnsupportedError: 지원하지 않는 SQL 기능
            InternalError: 발생할 수 없는 구문 트리 형태
        """
        if quote_style is None:
            quote_style = self._settings.quote_style

        try:
            metadata = self._parse(sql, quote_style)
        except InternalError:
            logger.error("Internal error while parsing query: %s", sql, exc_info=True)
            raise
        except ParseError as e:
            logger.info("Rejected query (%s): %s", e.kind.value, e.message)
            raise

        logger.debug(
            "Accepted query: extraction=%s aggregation=%s",
            metadata.data_extraction_query,
            metadata.data_aggregation_query,
        )
        return metadata

    def _parse(self, sql: str, quote_style: Optional[str]) -> QueryMetadata:
        try:
            statements = parse_statements(sql)
        except SqlglotError as e:
            raise MalformedQueryError(f"sql parser error: {e}") from e

        query = DestructuredQuery.destructure(statements)
        table_with_alias = TableIdentWithAlias.extract(query)
        from_clause_identifier = FromClauseIdentifier.of(
            table_with_alias.table, table_with_alias.alias
        )

        aggregation = extract_aggregation(from_clause_identifier, query.projection)
        filter = None
        if query.selection is not None:
            filter = FilterExtractor(from_clause_identifier).extract(query.selection)

        return QueryMetadata(
            aggregation=aggregation,
            table=table_with_alias.table,
            filter=filter,
            data_extraction_query=create_data_extraction_query(
                aggregation, table_with_alias.table, filter, quote_style
            ),
            data_aggregation_query=create_data_aggregation_query(
                aggregation, query.projection[0], query.from_, query.selection
            ),
        )


def parse(sql: str, quote_style: Optional[str] = None) -> QueryMetadata:
    """기본 설정으로 SQL 쿼리에서 메타데이터를 추출."""
    return QueryParser().parse(sql, quote_style)
