"""쿼리 분석에 사용하는 sqlglot 방언.

sqlglot 기본 방언과 같은 문법을 사용하되, 함수 호출을 sqlglot의 내장 함수
클래스로 변환하지 않고 작성된 이름 그대로 `exp.Anonymous`로 남긴다.
함수 이름은 작성된 형태(대소문자, 따옴표)로 검사되고 재생성된다.

기본 방언이 모르는 구문 중 거부 메시지를 정확히 내야 하는 것들
(`SELECT TOP`, `FOR XML`, `PARTITION (p)`, `FOR SYSTEM_TIME`)과
`$1` 위치 파라미터, `$$...$$` / `X'..'` / `B'..'` / `E'..'` 문자열,
단항 `+` 부호도 구문 트리에 그대로 남도록 파싱한다.
"""

from typing import Optional

import sqlglot
from sqlglot import exp, generator, parser, tokens
from sqlglot.dialects.dialect import Dialect
from sqlglot.tokens import TokenType


class UnaryPlus(exp.Unary):
    """단항 `+` 부호 (sqlglot 기본 파서는 버린다)."""


class KoronDialect(Dialect):
    """함수 이름을 보존하는 범용 SQL 방언."""

    class Tokenizer(tokens.Tokenizer):
        BIT_STRINGS = [("b'", "'"), ("B'", "'")]
        HEX_STRINGS = [("x'", "'"), ("X'", "'")]
        BYTE_STRINGS = [("e'", "'"), ("E'", "'")]
        HEREDOC_STRINGS = ["$"]

        # $1 처럼 태그가 식별자가 아니면 위치 파라미터로 토큰화한다
        HEREDOC_TAG_IS_IDENTIFIER = True
        HEREDOC_STRING_ALTERNATIVE = TokenType.PARAMETER

        KEYWORDS = {
            **tokens.Tokenizer.KEYWORDS,
            "TOP": TokenType.TOP,
            "FOR SYSTEM_TIME": TokenType.TIMESTAMP_SNAPSHOT,
        }

        SINGLE_TOKENS = {
            **tokens.Tokenizer.SINGLE_TOKENS,
            "$": TokenType.HEREDOC_STRING,
        }

        VAR_SINGLE_TOKENS = {"$"}

    class Parser(parser.Parser):
        FUNCTIONS: dict = {}

        SUPPORTS_PARTITION_SELECTION = True

        # FOR 다음에 오면 잠금 절이 아닌 T-SQL FOR 절로 본다
        FOR_CLAUSE_MODES = {"XML", "JSON", "BROWSE"}

        UNARY_PARSERS = {
            **parser.Parser.UNARY_PARSERS,
            TokenType.PLUS: lambda self: self.expression(UnaryPlus, this=self._parse_unary()),
        }

        QUERY_MODIFIER_PARSERS = {
            **parser.Parser.QUERY_MODIFIER_PARSERS,
            TokenType.FOR: lambda self: self._parse_for_clause(),
        }

        def _parse_limit(self, this=None, top=False, **kwargs):
            limit = super()._parse_limit(this, top=top, **kwargs)
            # SELECT TOP n 은 LIMIT과 같은 노드로 파싱되므로 표시해 둔다
            if top and limit is not None:
                limit.meta["top"] = True
            return limit

        def _parse_for_clause(self):
            if not self._next or self._next.text.upper() not in self.FOR_CLAUSE_MODES:
                return "locks", self._parse_locks()

            # FOR XML PATH('r'), ROOT('x') 처럼 쿼리 끝까지 이어지는 절
            start = self._curr
            depth = 0
            while self._curr:
                if self._curr.token_type == TokenType.L_PAREN:
                    depth += 1
                elif self._curr.token_type == TokenType.R_PAREN:
                    if depth == 0:
                        break
                    depth -= 1
                self._advance()

            return "options", [exp.var(self._find_sql(start, self._prev))]

        def _parse_parameter(self):
            prefix = self._prev.text[:1]
            parameter = super()._parse_parameter()
            parameter.meta["prefix"] = prefix
            return parameter

    class Generator(generator.Generator):
        def parameter_sql(self, expression: exp.Parameter) -> str:
            prefix = expression.meta.get("prefix") or self.PARAMETER_TOKEN
            return f"{prefix}{self.sql(expression, 'this')}"

        def rawstring_sql(self, expression: exp.RawString) -> str:
            if "$$" in expression.this:
                return super().rawstring_sql(expression)
            return f"$${expression.this}$$"

        def unaryplus_sql(self, expression: UnaryPlus) -> str:
            return f"+{self.sql(expression, 'this')}"


def parse_statements(sql: str) -> list[exp.Expression]:
    """SQL 텍스트를 문장 단위 구문 트리로 파싱.

    Args:
        sql: SQL 문자열

    Returns:
        문장별 구문 트리 리스트 (빈 문장은 제외)

    Raises:
        sqlglot.errors.SqlglotError: 토큰화 또는 구문 분석 실패 시
    """
    return [
        statement
        for statement in sqlglot.parse(sql, read=KoronDialect)
        if statement is not None
    ]


def to_sql(expression: exp.Expression, pretty: bool = False) -> str:
    """구문 트리를 SQL 텍스트로 변환 (함수 이름은 작성된 그대로)."""
    return expression.sql(dialect=KoronDialect, normalize_functions=False, pretty=pretty)


def display(expression: Optional[exp.Expression]) -> str:
    """에러 메시지용 표현식 텍스트."""
    return to_sql(expression) if expression is not None else ""
