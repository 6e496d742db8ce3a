"""분석 파이프라인 모듈.

요청 검증 -> 작업 생성 -> 원격 조회 -> 집계 -> 작업 종료 -> (요청 시) 문서 렌더링.
"""

import asyncio
import logging
from typing import NamedTuple

import httpx
from pydantic import ValidationError as PydanticValidationError

from repo_detailer.analysis import AnalysisAggregator
from repo_detailer.config import Settings, settings
from repo_detailer.errors import DetailerError, RateLimitError, ValidationError
from repo_detailer.generators import ContextGenerator
from repo_detailer.jobs import JobLedger
from repo_detailer.models import AnalysisRequest, AnalysisResult, AuthMode, Job, JobStatus
from repo_detailer.notifiers import Notifier, SlackNotifier
from repo_detailer.sources import Credential, GitHubRepoClient, RepoSource
from repo_detailer.storage import (
    JsonFileStore,
    KeyValueStore,
    PreferenceStore,
    SupabaseStore,
)
from repo_detailer.templates import TemplateRegistry

logger = logging.getLogger(__name__)

_InFlightKey = tuple[str, str, AuthMode, str]


class AnalysisOutcome(NamedTuple):
    """분석 요청 하나의 결과."""

    job: Job
    result: AnalysisResult | None
    error: Exception | None

    @property
    def succeeded(self) -> bool:
        return self.result is not None


def _failure_reason(error: Exception) -> str:
    """작업 기록에 남길 짧은 실패 사유."""
    if isinstance(error, RateLimitError) and error.reset_at is not None:
        return f"{error} (resets at {error.reset_at.isoformat(timespec='minutes')})"
    if isinstance(error, PydanticValidationError):
        return f"Malformed analysis data ({error.error_count()} error(s))"
    return str(error) or error.__class__.__name__


class AnalysisPipeline:
    """저장소 분석 요청을 처리한다."""

    def __init__(
        self,
        source: RepoSource,
        aggregator: AnalysisAggregator,
        registry: TemplateRegistry,
        generator: ContextGenerator,
        ledger: JobLedger,
        preferences: PreferenceStore,
        notifier: Notifier | None = None,
    ) -> None:
        self.source = source
        self.aggregator = aggregator
        self.registry = registry
        self.generator = generator
        self.ledger = ledger
        self.notifier = notifier
        self.preferences = preferences
        self._in_flight: dict[_InFlightKey, asyncio.Task[AnalysisResult]] = {}

    def _check_request(self, request: AnalysisRequest, credential: Credential) -> None:
        """네트워크 호출 전에 요청을 검증한다. 실패하면 작업을 만들지 않는다."""
        if request.auth_mode == AuthMode.token and credential.is_anonymous:
            raise ValidationError("Token mode requires a GitHub token")
        self.registry.resolve(request.template)

    async def _fetch_and_aggregate(
        self, request: AnalysisRequest, credential: Credential
    ) -> AnalysisResult:
        raw = await self.source.fetch_repository(
            request.repository, credential, request.branch
        )
        return self.aggregator.aggregate(raw)

    def _shared_task(
        self, request: AnalysisRequest, credential: Credential
    ) -> asyncio.Task[AnalysisResult]:
        """같은 저장소와 같은 자격 증명의 동시 요청은 하나의 조회 작업을 공유한다."""
        key: _InFlightKey = (
            request.repository.full_name.lower(),
            request.branch or "",
            credential.auth_mode,
            credential.fingerprint,
        )
        task = self._in_flight.get(key)
        if task is not None and not task.done():
            logger.info(f"Joining in-flight analysis of {request.repository}")
            return task

        task = asyncio.create_task(self._fetch_and_aggregate(request, credential))
        self._in_flight[key] = task

        def _release(finished: asyncio.Task[AnalysisResult]) -> None:
            if self._in_flight.get(key) is finished:
                del self._in_flight[key]

        task.add_done_callback(_release)
        return task

    async def _notify(self, job: Job) -> None:
        if self.notifier is None:
            return
        if not self.preferences.load_settings().notifications_enabled:
            return
        await self.notifier.notify(job)

    async def analyze(
        self, request: AnalysisRequest, credential: Credential
    ) -> AnalysisOutcome:
        """요청 하나를 작업으로 기록하고 분석 결과를 만든다.

        원격 조회나 집계가 실패하면 작업은 failed가 되고 예외는 결과에 담긴다.
        """
        self._check_request(request, credential)
        job = self.ledger.create(request)

        try:
            result = await self._shared_task(request, credential)
        except (DetailerError, PydanticValidationError) as e:
            reason = _failure_reason(e)
            logger.error(f"Analysis of {request.repository} failed: {reason}")
            failed = self.ledger.fail(job.id, reason) or job.model_copy(
                update={"status": JobStatus.failed, "error": reason}
            )
            await self._notify(failed)
            return AnalysisOutcome(failed, None, e)

        completed = self.ledger.complete(job.id) or job.model_copy(
            update={"status": JobStatus.completed}
        )
        logger.info(f"Analysis of {request.repository} completed")
        await self._notify(completed)
        return AnalysisOutcome(completed, result, None)

    def render(
        self,
        result: AnalysisResult,
        template_id: str,
        custom_instructions: str = "",
    ) -> str:
        """템플릿으로 문서를 렌더링한다. TemplateError는 작업 상태와 무관하다."""
        template = self.registry.resolve(template_id)
        return self.generator.generate(result, template, custom_instructions)

    def render_details(self, result: AnalysisResult, custom_instructions: str = "") -> str:
        return self.generator.generate_details(result, custom_instructions)

    async def run(
        self,
        request: AnalysisRequest,
        credential: Credential,
        details: bool = False,
    ) -> tuple[AnalysisOutcome, str | None]:
        """분석 후 성공하면 문서까지 렌더링한다."""
        outcome = await self.analyze(request, credential)
        if outcome.result is None:
            return outcome, None
        if details:
            document = self.render_details(outcome.result, request.custom_instructions)
        else:
            document = self.render(
                outcome.result, request.template, request.custom_instructions
            )
        return outcome, document

    async def rerun(self, job_id: str, credential: Credential) -> AnalysisOutcome:
        """기존 작업과 같은 조건으로 새 작업을 만든다."""
        request = self.ledger.rerun_request(job_id)
        return await self.analyze(request, credential)


def build_store(config: Settings = settings) -> KeyValueStore:
    """설정에 따라 Supabase 또는 로컬 JSON 파일 저장소를 고른다."""
    if config.supabase_url and config.supabase_key:
        return SupabaseStore(
            url=config.supabase_url,
            key=config.supabase_key,
            table=config.supabase_table,
        )
    return JsonFileStore(config.state_file)


def build_pipeline(
    config: Settings = settings,
    store: KeyValueStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AnalysisPipeline:
    """설정값으로 파이프라인을 구성한다.

    Args:
        config: 애플리케이션 설정
        store: 상태 저장소. None이면 설정에 따라 고른다.
        transport: 테스트용 httpx 트랜스포트 (GitHub, Slack 공용)
    """
    store = store if store is not None else build_store(config)
    notifier = (
        SlackNotifier(webhook_url=config.slack_webhook_url, transport=transport)
        if config.slack_webhook_url
        else None
    )
    return AnalysisPipeline(
        source=GitHubRepoClient(
            base_url=config.github_api_url,
            timeout=config.request_timeout,
            contributors_per_page=config.contributors_per_page,
            transport=transport,
        ),
        aggregator=AnalysisAggregator(),
        registry=TemplateRegistry(store),
        generator=ContextGenerator(),
        ledger=JobLedger(store, limit=config.history_limit),
        preferences=PreferenceStore(store),
        notifier=notifier,
    )
