"""키-값 저장소 프로토콜 정의."""

from typing import Protocol

TOKEN_KEY = "github_token"
JOBS_KEY = "recent_jobs"
TEMPLATES_KEY = "custom_templates"
SETTINGS_KEY = "user_settings"


class KeyValueStore(Protocol):
    """문자열 키-값 저장소 프로토콜."""

    def get(self, key: str) -> str | None:
        """값을 읽는다. 없으면 None."""
        ...

    def set(self, key: str, value: str) -> None:
        """값을 저장한다."""
        ...

    def delete(self, key: str) -> None:
        """값을 삭제한다. 없는 키는 무시한다."""
        ...
