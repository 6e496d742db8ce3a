"""소스 프로토콜 정의."""

from typing import Protocol

from repo_detailer.models import RawRepoData, RepositoryIdentity
from repo_detailer.sources.credentials import Credential


class RepoSource(Protocol):
    """저장소 원시 데이터 소스 프로토콜."""

    async def fetch_repository(
        self,
        identity: RepositoryIdentity,
        credential: Credential,
        branch: str | None = None,
    ) -> RawRepoData:
        """저장소 데이터를 가져온다."""
        ...
