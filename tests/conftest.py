"""공용 테스트 픽스처."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import httpx
import pytest

from repo_detailer.analysis import AnalysisAggregator
from repo_detailer.analysis.metrics import StaticMetricsProvider
from repo_detailer.models import (
    AnalysisResult,
    ContentEntry,
    Contributor,
    RawRepoData,
    RepoMetadata,
)
from repo_detailer.sources.github import _parse_metadata

FIXED_NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC)

Route = httpx.Response | Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """항상 같은 시각을 반환하는 시계."""
    return lambda: FIXED_NOW


@pytest.fixture
def repo_payload() -> dict[str, Any]:
    """`GET /repos/acme/widgets` 응답."""
    return {
        "id": 42,
        "name": "widgets",
        "full_name": "acme/widgets",
        "description": "Widget toolkit",
        "html_url": "https://github.com/acme/widgets",
        "language": "JavaScript",
        "stargazers_count": 100,
        "forks_count": 10,
        "open_issues_count": 3,
        "size": 512,
        "created_at": "2020-01-01T00:00:00Z",
        "updated_at": "2024-05-01T00:00:00Z",
        "owner": {"login": "acme", "avatar_url": None, "html_url": None},
        "default_branch": "main",
        "license": {"spdx_id": "MIT"},
        "topics": ["ui"],
    }


@pytest.fixture
def contents_payload() -> list[dict[str, Any]]:
    return [
        {"name": "package.json", "path": "package.json", "type": "file", "size": 900},
        {"name": "README.md", "path": "README.md", "type": "file", "size": 2000},
        {"name": ".github", "path": ".github", "type": "dir", "size": 0},
    ]


@pytest.fixture
def github_routes(
    repo_payload: dict[str, Any], contents_payload: list[dict[str, Any]]
) -> dict[str, Route]:
    """acme/widgets 저장소의 정상 응답 라우트."""
    return {
        "/repos/acme/widgets": httpx.Response(200, json=repo_payload),
        "/repos/acme/widgets/languages": httpx.Response(
            200, json={"JavaScript": 800, "CSS": 200}
        ),
        "/repos/acme/widgets/contributors": httpx.Response(
            200,
            json=[
                {"login": "alice", "contributions": 50},
                {"login": "bob", "contributions": 5},
            ],
        ),
        "/repos/acme/widgets/contents": httpx.Response(200, json=contents_payload),
    }


@pytest.fixture
def make_transport() -> Callable[..., httpx.MockTransport]:
    """경로별 응답으로 MockTransport를 만드는 팩토리.

    반환된 트랜스포트의 `requests` 속성에 받은 요청이 쌓인다.
    등록되지 않은 경로는 404를 반환한다.
    """

    def factory(routes: dict[str, Route]) -> httpx.MockTransport:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            route = routes.get(request.url.path)
            if route is None:
                return httpx.Response(404, json={"message": "Not Found"})
            if isinstance(route, httpx.Response):
                return httpx.Response(
                    route.status_code, headers=route.headers, content=route.content
                )
            return route(request)

        transport = httpx.MockTransport(handler)
        transport.requests = requests  # type: ignore[attr-defined]
        return transport

    return factory


@pytest.fixture
def raw_repo(
    repo_payload: dict[str, Any], contents_payload: list[dict[str, Any]]
) -> RawRepoData:
    metadata: RepoMetadata = _parse_metadata(repo_payload)
    return RawRepoData(
        metadata=metadata,
        languages={"JavaScript": 800, "CSS": 200},
        contributors=[
            Contributor(login="alice", contributions=50),
            Contributor(login="bob", contributions=5),
        ],
        contents=[ContentEntry(**entry) for entry in contents_payload],
    )


@pytest.fixture
def analysis_result(raw_repo: RawRepoData) -> AnalysisResult:
    """고정 점수로 집계한 분석 결과."""
    return AnalysisAggregator(metrics=StaticMetricsProvider()).aggregate(raw_repo)
