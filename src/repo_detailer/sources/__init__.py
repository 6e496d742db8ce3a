"""데이터 소스 모듈."""

from repo_detailer.sources.base import RepoSource
from repo_detailer.sources.credentials import (
    Credential,
    FallbackAuthStrategy,
    parse_repo_url,
    parse_repository,
    validate_token,
)
from repo_detailer.sources.github import GitHubRepoClient

__all__ = [
    "Credential",
    "FallbackAuthStrategy",
    "GitHubRepoClient",
    "RepoSource",
    "parse_repo_url",
    "parse_repository",
    "validate_token",
]
