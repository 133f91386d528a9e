"""단일 테이블 분석 쿼리 파서."""

from koron.core.errors import (
    ErrorKind,
    InternalError,
    MalformedQueryError,
    ParseError,
    UnsupportedError,
)
from koron.core.models import QueryMetadata
from koron.query.query_metadata import QueryParser, parse

__version__ = "0.1.0"

__all__ = [
    "ErrorKind",
    "InternalError",
    "MalformedQueryError",
    "ParseError",
    "QueryMetadata",
    "QueryParser",
    "UnsupportedError",
    "parse",
]
