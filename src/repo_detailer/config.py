"""설정 관리 모듈."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """애플리케이션 설정."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # GitHub
    github_api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API 주소",
    )
    github_token: str | None = Field(
        default=None,
        description="저장된 토큰이 없을 때 사용할 Personal Access Token",
    )
    request_timeout: float = Field(
        default=10.0,
        gt=0,
        description="HTTP 요청 타임아웃 (초)",
    )
    contributors_per_page: int = Field(
        default=30,
        ge=1,
        le=100,
        description="기여자 조회 개수",
    )

    # 작업 기록
    history_limit: int = Field(
        default=10,
        ge=1,
        description="보관할 최근 작업 수",
    )
    default_template: str = Field(
        default="comprehensive",
        description="기본 템플릿 ID",
    )

    # 로컬 상태 저장소
    state_file: Path = Field(
        default=Path.home() / ".repo-detailer" / "state.json",
        description="로컬 상태 파일 경로",
    )

    # Supabase (설정되면 로컬 파일 대신 사용)
    supabase_url: str | None = Field(default=None, description="Supabase URL")
    supabase_key: str | None = Field(default=None, description="Supabase anon key")
    supabase_table: str = Field(
        default="detailer_state",
        description="키-값 상태 테이블 이름",
    )

    # Slack
    slack_webhook_url: str | None = Field(default=None, description="Slack Webhook URL")

    log_level: str = Field(default="INFO", description="로그 레벨")


settings = Settings()
