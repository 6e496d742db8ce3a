"""GitHub REST API 클라이언트."""

import asyncio
import logging
from collections.abc import Awaitable
from datetime import UTC, datetime
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError as PydanticValidationError

from repo_detailer.config import settings
from repo_detailer.errors import (
    AuthError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    RemoteError,
    ValidationError,
)
from repo_detailer.models import (
    ContentEntry,
    Contributor,
    OwnerInfo,
    RawRepoData,
    RepoMetadata,
    RepositoryIdentity,
    RepositorySummary,
    UserProfile,
)
from repo_detailer.sources.credentials import (
    Credential,
    FallbackAuthStrategy,
    RequiredAuthStrategy,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DENIED_STATUSES = (401, 403)


def _parse_metadata(data: dict[str, Any]) -> RepoMetadata:
    """`/repos/{owner}/{repo}` 응답을 RepoMetadata로 변환한다."""
    owner: dict[str, Any] = data.get("owner") or {}
    license_info: dict[str, Any] = data.get("license") or {}
    name = data.get("name") or ""
    owner_login = owner.get("login") or ""

    return RepoMetadata(
        id=data.get("id") or 0,
        name=name,
        full_name=data.get("full_name") or f"{owner_login}/{name}",
        description=data.get("description"),
        html_url=data.get("html_url") or "",
        language=data.get("language"),
        stars=data.get("stargazers_count") or 0,
        forks=data.get("forks_count") or 0,
        open_issues=data.get("open_issues_count") or 0,
        size=data.get("size") or 0,
        created_at=data.get("created_at"),
        updated_at=data.get("updated_at"),
        owner=OwnerInfo(
            login=owner_login,
            avatar_url=owner.get("avatar_url"),
            html_url=owner.get("html_url"),
        ),
        default_branch=data.get("default_branch") or "main",
        license=license_info.get("spdx_id"),
        topics=list(data.get("topics") or []),
    )


def _parse_languages(data: Any) -> dict[str, int]:
    """언어별 바이트 수 응답을 파싱한다."""
    if not isinstance(data, dict):
        return {}
    return {str(k): v for k, v in data.items() if isinstance(v, int)}


def _parse_contributors(data: Any) -> list[Contributor]:
    """기여자 목록을 파싱한다. 로그인이 없는 익명 기여자는 건너뛴다."""
    if not isinstance(data, list):
        return []
    contributors = []
    for item in data:
        if not isinstance(item, dict) or not item.get("login"):
            continue
        try:
            contributors.append(
                Contributor(
                    login=item["login"],
                    contributions=item.get("contributions") or 0,
                    avatar_url=item.get("avatar_url"),
                )
            )
        except PydanticValidationError as e:
            logger.warning(
                f"Skipping malformed contributor {item.get('login')!r}: "
                f"{e.error_count()} error(s)"
            )
    return contributors


def _parse_contents(data: Any) -> list[ContentEntry]:
    """최상위 항목 목록을 파싱한다 (단일 파일 응답도 허용)."""
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        return []
    entries = []
    for item in data:
        if not isinstance(item, dict) or not item.get("name"):
            continue
        try:
            entries.append(
                ContentEntry(
                    name=item["name"],
                    path=item.get("path") or item["name"],
                    type=item.get("type") or "file",
                    size=item.get("size") or 0,
                )
            )
        except PydanticValidationError as e:
            logger.warning(
                f"Skipping malformed content entry {item.get('name')!r}: "
                f"{e.error_count()} error(s)"
            )
    return entries


def _parse_summaries(items: Any) -> list[RepositorySummary]:
    """저장소 목록 응답을 요약 목록으로 변환한다. 형식이 잘못된 항목은 건너뛴다."""
    if not isinstance(items, list):
        return []
    summaries = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            summaries.append(_parse_metadata(item).to_summary())
        except PydanticValidationError as e:
            logger.warning(
                f"Skipping malformed repository {item.get('full_name')!r}: "
                f"{e.error_count()} error(s)"
            )
    return summaries


def _rate_limit_reset(response: httpx.Response) -> datetime | None:
    reset = response.headers.get("x-ratelimit-reset")
    if reset and reset.isdigit():
        return datetime.fromtimestamp(int(reset), UTC)
    return None


def _is_rate_limited(response: httpx.Response) -> bool:
    """응답이 호출 한도 초과를 나타내는지 확인한다."""
    if response.status_code == 429:
        return True
    return (
        response.status_code == 403
        and response.headers.get("x-ratelimit-remaining") == "0"
    )


class GitHubRepoClient:
    """GitHub REST API에서 저장소 데이터를 가져온다."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        contributors_per_page: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: API 주소. None이면 설정값 사용.
            timeout: HTTP 요청 타임아웃 (초). None이면 설정값 사용.
            contributors_per_page: 기여자 조회 개수. None이면 설정값 사용.
            transport: 테스트용 httpx 트랜스포트
        """
        self.base_url = (base_url or settings.github_api_url).rstrip("/")
        self.timeout = timeout or settings.request_timeout
        self.contributors_per_page = (
            contributors_per_page or settings.contributors_per_page
        )
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={
                "Accept": "application/vnd.github+json",
                "User-Agent": "repo-detailer",
            },
            transport=self.transport,
        )

    async def _request_json(
        self,
        client: httpx.AsyncClient,
        path: str,
        strategy: FallbackAuthStrategy,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """인증 전략의 시도 순서대로 요청하고 JSON 본문을 반환한다.

        204 응답은 None을 반환한다.
        """
        denied: httpx.Response | None = None

        for attempt in strategy.attempts():
            try:
                response = await client.get(path, params=params, headers=attempt.headers)
            except httpx.TimeoutException as e:
                raise NetworkError(f"Request to {path} timed out") from e
            except httpx.RequestError as e:
                raise NetworkError(f"Request to {path} failed: {e}") from e

            status = response.status_code
            if _is_rate_limited(response):
                raise RateLimitError(
                    "GitHub API rate limit exceeded. Please try again later.",
                    status_code=status,
                    reset_at=_rate_limit_reset(response),
                )
            if status in DENIED_STATUSES:
                logger.warning(f"{path} denied ({status}) with {attempt.mode.value} auth")
                denied = response
                continue
            if status == 404:
                raise NotFoundError(
                    f"Repository or resource not found: {path}", status_code=404
                )
            if status >= 400:
                raise NetworkError(f"GitHub returned {status} for {path}", status_code=status)

            strategy.pin(attempt)
            if status == 204 or not response.content:
                return None
            try:
                return response.json()
            except ValueError as e:
                raise NetworkError(f"Invalid JSON from {path}") from e

        raise AuthError(
            "Authentication failed. Check your GitHub token or repository visibility.",
            status_code=denied.status_code if denied is not None else None,
        )

    async def _settle(self, fetch: Awaitable[T], default: T, label: str) -> T:
        """하위 요청이 실패하면 기본값으로 대체한다."""
        try:
            return await fetch
        except RemoteError as e:
            logger.warning(f"Falling back to empty {label}: {e}")
            return default
        except PydanticValidationError as e:
            logger.warning(
                f"Falling back to empty {label}: malformed payload "
                f"({e.error_count()} error(s))"
            )
            return default

    async def _fetch_languages(
        self, client: httpx.AsyncClient, repo_path: str, strategy: FallbackAuthStrategy
    ) -> dict[str, int]:
        data = await self._request_json(client, f"{repo_path}/languages", strategy)
        return _parse_languages(data)

    async def _fetch_contributors(
        self, client: httpx.AsyncClient, repo_path: str, strategy: FallbackAuthStrategy
    ) -> list[Contributor]:
        data = await self._request_json(
            client,
            f"{repo_path}/contributors",
            strategy,
            params={"per_page": self.contributors_per_page},
        )
        return _parse_contributors(data)

    async def _fetch_contents(
        self,
        client: httpx.AsyncClient,
        repo_path: str,
        strategy: FallbackAuthStrategy,
        branch: str | None,
    ) -> list[ContentEntry]:
        params = {"ref": branch} if branch else None
        data = await self._request_json(
            client, f"{repo_path}/contents", strategy, params=params
        )
        return _parse_contents(data)

    async def fetch_repository(
        self,
        identity: RepositoryIdentity,
        credential: Credential,
        branch: str | None = None,
    ) -> RawRepoData:
        """저장소 메타데이터와 언어/기여자/최상위 항목을 가져온다.

        기본 메타데이터 요청이 실패하면 예외를 던지고, 하위 요청 실패는 빈 값으로 대체한다.
        """
        strategy = FallbackAuthStrategy(credential)
        repo_path = f"/repos/{identity.owner}/{identity.name}"

        async with self._client() as client:
            data = await self._request_json(client, repo_path, strategy)
            if not isinstance(data, dict):
                raise NetworkError(f"Unexpected response for {repo_path}")
            try:
                metadata = _parse_metadata(data)
            except PydanticValidationError as e:
                raise NetworkError(f"Malformed repository payload for {identity}") from e

            logger.info(
                f"Fetched {identity} with {strategy.active_mode.value} auth, "
                "loading languages/contributors/contents"
            )
            languages, contributors, contents = await asyncio.gather(
                self._settle(
                    self._fetch_languages(client, repo_path, strategy), {}, "languages"
                ),
                self._settle(
                    self._fetch_contributors(client, repo_path, strategy),
                    [],
                    "contributors",
                ),
                self._settle(
                    self._fetch_contents(client, repo_path, strategy, branch),
                    [],
                    "contents",
                ),
            )

        return RawRepoData(
            metadata=metadata,
            languages=languages,
            contributors=contributors,
            contents=contents,
        )

    async def fetch_user_repositories(
        self, credential: Credential
    ) -> list[RepositorySummary]:
        """인증된 사용자의 저장소 목록을 가져온다 (최근 갱신 순)."""
        strategy = RequiredAuthStrategy(credential)
        async with self._client() as client:
            data = await self._request_json(
                client,
                "/user/repos",
                strategy,
                params={"sort": "updated", "per_page": 100, "type": "all"},
            )
        return _parse_summaries(data)

    async def fetch_user_profile(self, credential: Credential) -> UserProfile:
        """인증된 사용자의 프로필을 가져온다."""
        strategy = RequiredAuthStrategy(credential)
        async with self._client() as client:
            data = await self._request_json(client, "/user", strategy)
        if not isinstance(data, dict) or not data.get("login"):
            raise NetworkError("Unexpected response for /user")
        return UserProfile(
            login=data["login"],
            name=data.get("name"),
            avatar_url=data.get("avatar_url"),
            html_url=data.get("html_url"),
            public_repos=data.get("public_repos") or 0,
        )

    async def search_repositories(
        self,
        query: str,
        credential: Credential | None = None,
        limit: int = 20,
    ) -> list[RepositorySummary]:
        """저장소를 검색한다 (스타 수 내림차순)."""
        if not query.strip():
            raise ValidationError("Please enter a search term")

        strategy = FallbackAuthStrategy(credential or Credential.anonymous())
        async with self._client() as client:
            data = await self._request_json(
                client,
                "/search/repositories",
                strategy,
                params={
                    "q": query.strip(),
                    "sort": "stars",
                    "order": "desc",
                    "per_page": limit,
                },
            )
        items = data.get("items", []) if isinstance(data, dict) else []
        return _parse_summaries(items)
