"""자격 증명, 토큰 검증, 인증 재시도 전략 모듈."""

import hashlib
import re
from typing import NamedTuple

from repo_detailer.errors import ValidationError
from repo_detailer.models import AuthMode, RepositoryIdentity

TOKEN_PREFIXES = ("ghp_", "github_pat_")
MIN_TOKEN_LENGTH = 20

_REPO_URL_PATTERN = re.compile(
    r"^https?://(?:www\.)?github\.com/([^/\s]+)/([^/\s?#]+)(?:[/?#].*)?$"
)


def validate_token(token: str) -> str:
    """토큰 형식을 네트워크 호출 전에 검증한다.

    Returns:
        앞뒤 공백을 제거한 토큰

    Raises:
        ValidationError: 길이가 짧거나 알려진 접두어로 시작하지 않는 경우
    """
    cleaned = token.strip()
    if len(cleaned) < MIN_TOKEN_LENGTH:
        raise ValidationError(
            f"GitHub token is too short (expected at least {MIN_TOKEN_LENGTH} characters)"
        )
    if not cleaned.startswith(TOKEN_PREFIXES):
        raise ValidationError('GitHub token should start with "ghp_" or "github_pat_"')
    return cleaned


def parse_repo_url(url: str) -> RepositoryIdentity:
    """공개 저장소 URL에서 owner와 repo를 추출한다.

    예: https://github.com/acme/widgets/tree/main -> acme/widgets
    """
    match = _REPO_URL_PATTERN.match(url.strip())
    if not match:
        raise ValidationError(f"Invalid GitHub repository URL: {url}")

    owner, name = match.group(1), match.group(2)
    if name.endswith(".git"):
        name = name[: -len(".git")]
    if not name:
        raise ValidationError(f"Invalid GitHub repository URL: {url}")
    return RepositoryIdentity(owner=owner, name=name)


def parse_repository(target: str) -> RepositoryIdentity:
    """URL 또는 `owner/name` 문자열을 저장소 식별자로 변환한다."""
    target = target.strip()
    if target.startswith(("http://", "https://")):
        return parse_repo_url(target)

    return RepositoryIdentity.parse(target)


class Credential:
    """요청에 사용할 자격 증명 (토큰 또는 익명)."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    @classmethod
    def token(cls, value: str) -> "Credential":
        """검증된 토큰 자격 증명을 만든다."""
        return cls(validate_token(value))

    @classmethod
    def anonymous(cls) -> "Credential":
        return cls(None)

    @property
    def is_anonymous(self) -> bool:
        return self._token is None

    @property
    def auth_mode(self) -> AuthMode:
        return AuthMode.public if self._token is None else AuthMode.token

    @property
    def secret(self) -> str | None:
        return self._token

    @property
    def fingerprint(self) -> str:
        """토큰을 드러내지 않고 자격 증명을 구분하는 값. 익명이면 빈 문자열."""
        if self._token is None:
            return ""
        return hashlib.sha256(self._token.encode("utf-8")).hexdigest()[:16]

    def __repr__(self) -> str:
        if self._token is None:
            return "Credential(anonymous)"
        return f"Credential(token={self._token[:4]}…)"


class AuthAttempt(NamedTuple):
    """한 번의 요청 시도에 사용할 인증 방식과 헤더."""

    mode: AuthMode
    headers: dict[str, str]


class FallbackAuthStrategy:
    """토큰으로 먼저 시도하고 401/403이면 비인증으로 재시도하는 전략.

    성공한 시도는 고정(pin)되어, 같은 저장소의 후속 요청은 거기서부터 시작한다.
    """

    def __init__(self, credential: Credential) -> None:
        self.credential = credential
        attempts: list[AuthAttempt] = []
        if credential.secret is not None:
            attempts.append(
                AuthAttempt(
                    AuthMode.token,
                    {"Authorization": f"Bearer {credential.secret}"},
                )
            )
        attempts.append(AuthAttempt(AuthMode.public, {}))
        self._attempts = attempts
        self._start = 0

    def attempts(self) -> list[AuthAttempt]:
        """남은 시도 목록을 순서대로 반환한다."""
        return self._attempts[self._start :]

    def pin(self, attempt: AuthAttempt) -> None:
        """성공한 시도를 이후 요청의 출발점으로 고정한다."""
        self._start = self._attempts.index(attempt)

    @property
    def active_mode(self) -> AuthMode:
        return self._attempts[self._start].mode


class RequiredAuthStrategy(FallbackAuthStrategy):
    """토큰이 반드시 필요한 엔드포인트용 전략 (비인증 재시도 없음)."""

    def __init__(self, credential: Credential) -> None:
        if credential.secret is None:
            raise ValidationError("A GitHub token is required for this request")
        super().__init__(credential)
        self._attempts = self._attempts[:1]
