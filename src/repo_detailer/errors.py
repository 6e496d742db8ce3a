"""파이프라인 예외 정의."""

from datetime import datetime


class DetailerError(Exception):
    """모든 파이프라인 예외의 기반 클래스."""


class ValidationError(DetailerError):
    """네트워크 호출 전에 잡히는 입력 오류 (URL, 토큰 형식 등)."""


class RemoteError(DetailerError):
    """원격 API 호출 실패."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthError(RemoteError):
    """토큰 인증과 비인증 재시도가 모두 401/403으로 실패했다."""


class NotFoundError(RemoteError):
    """저장소 또는 리소스가 존재하지 않는다 (404)."""


class RateLimitError(RemoteError):
    """GitHub API 호출 한도를 초과했다."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        reset_at: datetime | None = None,
    ) -> None:
        super().__init__(message, status_code)
        self.reset_at = reset_at


class NetworkError(RemoteError):
    """전송 계층 실패, 타임아웃, 해석할 수 없는 응답."""


class TemplateError(DetailerError):
    """템플릿이 없거나 유효하지 않다."""


class TemplateNotFoundError(TemplateError):
    """요청한 템플릿 ID가 등록되어 있지 않다."""


class PersistenceError(DetailerError):
    """상태 저장소 읽기/쓰기 실패."""


class JobStateError(DetailerError):
    """종료된 작업에 대한 상태 전이 시도."""
