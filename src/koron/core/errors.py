"""쿼리 파싱 에러 정의."""

from enum import Enum


class ErrorKind(Enum):
    """파싱 에러 종류."""

    MALFORMED_QUERY = "malformed query"
    UNSUPPORTED = "statement not supported"
    INTERNAL = "internal"


class ParseError(Exception):
    """쿼리 파싱 에러의 기반 클래스.

    모든 에러는 사용자에게 그대로 노출할 수 있는 메시지를 가진다.
    """

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParseError):
            return NotImplemented
        return (self.kind, self.message) == (other.kind, other.message)

    def __hash__(self) -> int:
        return hash((self.kind, self.message))


class MalformedQueryError(ParseError):
    """구문 오류, 인자 개수 오류, FROM 절과 맞지 않는 컬럼 등."""

    kind = ErrorKind.MALFORMED_QUERY


class UnsupportedError(ParseError):
    """의도적으로 지원하지 않는 SQL 기능을 사용한 경우."""

    kind = ErrorKind.UNSUPPORTED


class InternalError(ParseError):
    """파서 문법상 발생할 수 없는 AST 형태를 만난 경우."""

    kind = ErrorKind.INTERNAL
