"""애플리케이션 설정 모듈."""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """애플리케이션 설정."""

    # 재생성 쿼리의 식별자 따옴표 문자 (예: PostgreSQL '"', MySQL '`')
    quote_style: Optional[str] = None

    # 데모 스크립트 로그 레벨
    log_level: str = "WARNING"

    model_config = {
        "env_prefix": "KORON_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @field_validator("quote_style")
    @classmethod
    def _single_character(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and len(value) != 1:
            raise ValueError("quote_style must be a single character")
        return value
