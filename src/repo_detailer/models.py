"""데이터 모델 정의."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from repo_detailer.errors import ValidationError


class AuthMode(str, Enum):
    """인증 방식."""

    token = "token"
    public = "public"


class JobStatus(str, Enum):
    """작업 상태."""

    queued = "queued"
    analyzing = "analyzing"
    completed = "completed"
    failed = "failed"

    @property
    def is_terminal(self) -> bool:
        """더 이상 전이할 수 없는 상태인지 확인한다."""
        return self in (JobStatus.completed, JobStatus.failed)


class RepositoryIdentity(BaseModel):
    """저장소 식별자 (owner/name)."""

    model_config = ConfigDict(frozen=True)

    owner: str = Field(description="저장소 소유자")
    name: str = Field(description="저장소 이름")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, value: str) -> "RepositoryIdentity":
        """`owner/name` 문자열을 식별자로 변환한다."""
        parts = value.strip().split("/")
        if len(parts) != 2 or not all(parts):
            raise ValidationError(f"Expected owner/name or a GitHub URL, got: {value!r}")
        return cls(owner=parts[0], name=parts[1])

    def __str__(self) -> str:
        return self.full_name


class OwnerInfo(BaseModel):
    """저장소 소유자 정보."""

    login: str = Field(description="소유자 로그인")
    avatar_url: str | None = Field(default=None, description="아바타 URL")
    html_url: str | None = Field(default=None, description="프로필 URL")


class RepoMetadata(BaseModel):
    """`GET /repos/{owner}/{repo}` 응답."""

    id: int = Field(default=0, description="저장소 ID")
    name: str = Field(description="저장소 이름")
    full_name: str = Field(description="저장소 전체 이름 (owner/repo)")
    description: str | None = Field(default=None, description="저장소 설명")
    html_url: str = Field(default="", description="저장소 URL")
    language: str | None = Field(default=None, description="GitHub가 보고한 주 언어")
    stars: int = Field(default=0, description="스타 수")
    forks: int = Field(default=0, description="포크 수")
    open_issues: int = Field(default=0, description="열린 이슈 수")
    size: int = Field(default=0, description="저장소 크기 (KB)")
    created_at: datetime | None = Field(default=None, description="생성 시각")
    updated_at: datetime | None = Field(default=None, description="마지막 갱신 시각")
    owner: OwnerInfo = Field(description="소유자 정보")
    default_branch: str = Field(default="main", description="기본 브랜치")
    license: str | None = Field(default=None, description="라이선스 SPDX ID")
    topics: list[str] = Field(default_factory=list, description="토픽 목록")

    def to_summary(
        self,
        language: str | None = None,
        languages: dict[str, int] | None = None,
    ) -> "RepositorySummary":
        """메타데이터를 저장소 요약으로 변환한다.

        Args:
            language: 주 언어. None이면 GitHub가 보고한 값을 쓴다.
            languages: 언어별 바이트 수
        """
        return RepositorySummary(
            id=self.id,
            name=self.name,
            full_name=self.full_name,
            description=self.description,
            url=self.html_url,
            language=language or self.language or "Unknown",
            languages=dict(languages or {}),
            stars=self.stars,
            forks=self.forks,
            issues=self.open_issues,
            created_at=self.created_at,
            updated_at=self.updated_at,
            size=self.size,
            owner=self.owner,
            license=self.license,
        )


class Contributor(BaseModel):
    """저장소 기여자."""

    login: str = Field(description="기여자 로그인")
    contributions: int = Field(default=0, description="기여 횟수")
    avatar_url: str | None = Field(default=None, description="아바타 URL")


class ContentEntry(BaseModel):
    """저장소 최상위 항목."""

    name: str = Field(description="파일 또는 디렉터리 이름")
    path: str = Field(default="", description="저장소 내 경로")
    type: str = Field(default="file", description="항목 종류 (file, dir, ...)")
    size: int = Field(default=0, description="크기 (bytes)")


class RawRepoData(BaseModel):
    """가공하지 않은 API 응답 묶음."""

    metadata: RepoMetadata = Field(description="저장소 메타데이터")
    languages: dict[str, int] = Field(
        default_factory=dict, description="언어별 바이트 수"
    )
    contributors: list[Contributor] = Field(
        default_factory=list, description="기여자 목록 (기여 순)"
    )
    contents: list[ContentEntry] = Field(
        default_factory=list, description="최상위 항목 목록"
    )


class RepositorySummary(BaseModel):
    """정규화된 저장소 요약."""

    id: int = Field(default=0, description="저장소 ID")
    name: str = Field(description="저장소 이름")
    full_name: str = Field(description="저장소 전체 이름")
    description: str | None = Field(default=None, description="저장소 설명")
    url: str = Field(default="", description="저장소 URL")
    language: str = Field(default="Unknown", description="주 언어")
    languages: dict[str, int] = Field(
        default_factory=dict, description="전체 언어 분포"
    )
    stars: int = Field(default=0, description="스타 수")
    forks: int = Field(default=0, description="포크 수")
    issues: int = Field(default=0, description="열린 이슈 수")
    created_at: datetime | None = Field(default=None, description="생성 시각")
    updated_at: datetime | None = Field(default=None, description="마지막 갱신 시각")
    size: int = Field(default=0, description="저장소 크기 (KB)")
    owner: OwnerInfo = Field(description="소유자 정보")
    license: str | None = Field(default=None, description="라이선스 SPDX ID")


class DerivedMetrics(BaseModel):
    """집계 단계에서 계산한 지표."""

    framework: str = Field(default="Unknown", description="추정 프레임워크")
    architecture: str = Field(default="Standard", description="아키텍처 레이블")
    complexity: int = Field(ge=0, le=100, description="복잡도 점수 (임시값)")
    security_score: int = Field(ge=0, le=100, description="보안 점수 (임시값)")
    performance_score: int = Field(ge=0, le=100, description="성능 점수 (임시값)")
    popularity_score: float = Field(default=0.0, description="스타/포크 가중 합")
    contributors: int = Field(default=0, description="기여자 수")
    file_count: int = Field(default=0, description="최상위 항목 수")
    has_tests: bool = Field(default=False, description="테스트 존재 여부")
    has_ci: bool = Field(default=False, description="CI 설정 존재 여부")
    has_docs: bool = Field(default=False, description="문서 존재 여부")


class AnalysisResult(BaseModel):
    """저장소 분석 결과."""

    basic: RepositorySummary = Field(description="저장소 요약")
    analysis: DerivedMetrics = Field(description="파생 지표")
    contributors: list[Contributor] = Field(
        default_factory=list, description="기여자 목록"
    )
    contents: list[ContentEntry] = Field(
        default_factory=list, description="최상위 항목 목록"
    )


class UserProfile(BaseModel):
    """인증된 사용자 프로필."""

    login: str = Field(description="로그인")
    name: str | None = Field(default=None, description="표시 이름")
    avatar_url: str | None = Field(default=None, description="아바타 URL")
    html_url: str | None = Field(default=None, description="프로필 URL")
    public_repos: int = Field(default=0, description="공개 저장소 수")


class Template(BaseModel):
    """컨텍스트 문서 템플릿."""

    id: str = Field(description="템플릿 ID")
    name: str = Field(description="템플릿 이름")
    description: str = Field(default="", description="템플릿 설명")
    icon: str = Field(default="📋", description="아이콘")
    sections: list[str] = Field(default_factory=list, description="섹션 순서")
    is_public: bool = Field(default=False, description="공개 여부")
    created: datetime | None = Field(default=None, description="생성 시각")
    version: str = Field(default="1.0.0", description="템플릿 버전")
    builtin: bool = Field(default=False, description="내장 템플릿 여부")


class TemplateExport(BaseModel):
    """템플릿 내보내기 묶음."""

    export_date: datetime = Field(description="내보낸 시각")
    templates: list[Template] = Field(default_factory=list, description="템플릿 목록")
    total_templates: int = Field(default=0, description="템플릿 수")
    version: str = Field(default="1.0", description="내보내기 형식 버전")


class AnalysisRequest(BaseModel):
    """분석 요청."""

    repository: RepositoryIdentity = Field(description="대상 저장소")
    template: str = Field(default="comprehensive", description="템플릿 ID")
    branch: str | None = Field(default=None, description="분석할 브랜치")
    custom_instructions: str = Field(default="", description="추가 지시사항")
    auth_mode: AuthMode = Field(default=AuthMode.public, description="인증 방식")


class Job(BaseModel):
    """분석 작업 기록."""

    id: str = Field(description="작업 ID")
    repository: str = Field(description="저장소 (owner/name)")
    template: str = Field(description="템플릿 ID")
    status: JobStatus = Field(default=JobStatus.queued, description="작업 상태")
    timestamp: datetime = Field(description="생성 시각")
    downloaded: bool = Field(default=False, description="결과 다운로드 여부")
    branch: str = Field(default="", description="브랜치")
    custom_instructions: str = Field(default="", description="추가 지시사항")
    auth_mode: AuthMode = Field(default=AuthMode.public, description="인증 방식")
    error: str | None = Field(default=None, description="실패 사유")
    finished_at: datetime | None = Field(default=None, description="종료 시각")


class JobHistoryExport(BaseModel):
    """작업 기록 내보내기 묶음."""

    export_date: datetime = Field(description="내보낸 시각")
    jobs: list[Job] = Field(default_factory=list, description="작업 목록")
    total_jobs: int = Field(default=0, description="작업 수")
    version: str = Field(default="1.0", description="내보내기 형식 버전")


class UserSettings(BaseModel):
    """사용자 설정 플래그."""

    notifications_enabled: bool = Field(default=True, description="작업 알림 사용")
    dark_mode: bool = Field(default=False, description="다크 모드")
    auto_save: bool = Field(default=True, description="자동 저장")
