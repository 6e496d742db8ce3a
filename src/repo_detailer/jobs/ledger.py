"""분석 작업 기록 모듈."""

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from repo_detailer.config import settings
from repo_detailer.errors import JobStateError, PersistenceError, ValidationError
from repo_detailer.models import (
    AnalysisRequest,
    Job,
    JobHistoryExport,
    JobStatus,
    RepositoryIdentity,
)
from repo_detailer.storage.base import JOBS_KEY, KeyValueStore

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"

_jobs_adapter = TypeAdapter(list[Job])

# 허용되는 상태 전이
_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.queued: frozenset({JobStatus.analyzing, JobStatus.failed}),
    JobStatus.analyzing: frozenset({JobStatus.completed, JobStatus.failed}),
    JobStatus.completed: frozenset(),
    JobStatus.failed: frozenset(),
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _new_job_id() -> str:
    return uuid.uuid4().hex


class JobLedger:
    """최근 분석 작업을 최신순으로, 개수 제한을 두고 보관한다.

    저장소가 유일한 원본이므로 매 연산마다 다시 읽고 쓴다.
    """

    def __init__(
        self,
        store: KeyValueStore,
        limit: int | None = None,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_job_id,
    ) -> None:
        """
        Args:
            store: 작업 기록을 보관할 키-값 저장소
            limit: 보관할 최대 작업 수. None이면 설정값 사용.
            clock: 작업 시각에 사용할 시계
            id_factory: 작업 ID 생성 함수
        """
        self.store = store
        self.limit = limit or settings.history_limit
        self.clock = clock
        self.id_factory = id_factory

    def _load(self) -> list[Job]:
        try:
            raw = self.store.get(JOBS_KEY)
        except PersistenceError as e:
            logger.warning(f"Could not read job history: {e}")
            return []
        if not raw:
            return []
        try:
            return _jobs_adapter.validate_json(raw)
        except PydanticValidationError as e:
            logger.warning(f"Ignoring corrupt job history: {e}")
            return []

    def _save(self, jobs: list[Job]) -> None:
        payload = _jobs_adapter.dump_json(jobs[: self.limit]).decode("utf-8")
        try:
            self.store.set(JOBS_KEY, payload)
        except PersistenceError as e:
            logger.error(f"Could not save job history: {e}")

    def _update(self, job_id: str, status: JobStatus, **changes: object) -> Job | None:
        """작업 상태를 전이시킨다. 없는 ID는 무시한다."""
        jobs = self._load()
        for index, job in enumerate(jobs):
            if job.id != job_id:
                continue
            if status not in _TRANSITIONS[job.status]:
                raise JobStateError(
                    f"Job {job_id} cannot move from {job.status.value} to {status.value}"
                )
            updated = job.model_copy(update={"status": status, **changes})
            jobs[index] = updated
            self._save(jobs)
            logger.info(f"Job {job_id} ({job.repository}) -> {status.value}")
            return updated

        logger.debug(f"Ignoring update for unknown job {job_id}")
        return None

    def create(self, request: AnalysisRequest) -> Job:
        """새 작업을 기록하고 분석 중 상태로 만든다.

        기록이 가득 차 있으면 가장 오래된 작업을 버린다.
        """
        job = Job(
            id=self.id_factory(),
            repository=request.repository.full_name,
            template=request.template,
            status=JobStatus.queued,
            timestamp=self.clock(),
            branch=request.branch or "",
            custom_instructions=request.custom_instructions,
            auth_mode=request.auth_mode,
        )
        jobs = self._load()
        jobs.insert(0, job)
        if len(jobs) > self.limit:
            evicted = jobs[self.limit :]
            logger.debug(f"Evicting {len(evicted)} old job(s) from history")
        self._save(jobs)
        logger.info(f"Created job {job.id} for {job.repository}")

        started = self._update(job.id, JobStatus.analyzing)
        # 저장에 실패했더라도 호출자는 작업을 계속 진행한다
        return started or job.model_copy(update={"status": JobStatus.analyzing})

    def complete(self, job_id: str) -> Job | None:
        return self._update(job_id, JobStatus.completed, finished_at=self.clock())

    def fail(self, job_id: str, reason: str) -> Job | None:
        return self._update(
            job_id, JobStatus.failed, error=reason, finished_at=self.clock()
        )

    def mark_downloaded(self, job_id: str) -> Job | None:
        """결과 문서를 내려받았음을 표시한다."""
        jobs = self._load()
        for index, job in enumerate(jobs):
            if job.id == job_id:
                jobs[index] = job.model_copy(update={"downloaded": True})
                self._save(jobs)
                return jobs[index]
        return None

    def get(self, job_id: str) -> Job | None:
        return next((job for job in self._load() if job.id == job_id), None)

    def list(self) -> list[Job]:
        """최신순 작업 목록."""
        return self._load()[: self.limit]

    def clear(self) -> bool:
        """작업 기록을 모두 지운다. 저장소 오류로 지우지 못하면 False."""
        try:
            self.store.delete(JOBS_KEY)
        except PersistenceError as e:
            logger.error(f"Could not clear job history: {e}")
            return False
        logger.info("Job history cleared")
        return True

    def export_all(self) -> JobHistoryExport:
        jobs = self.list()
        return JobHistoryExport(
            export_date=self.clock(),
            jobs=jobs,
            total_jobs=len(jobs),
            version=EXPORT_VERSION,
        )

    def rerun_request(self, job_id: str) -> AnalysisRequest:
        """기존 작업과 같은 조건의 새 분석 요청을 만든다."""
        job = self.get(job_id)
        if job is None:
            raise ValidationError(f"Unknown job: {job_id}")
        return AnalysisRequest(
            repository=RepositoryIdentity.parse(job.repository),
            template=job.template,
            branch=job.branch or None,
            custom_instructions=job.custom_instructions,
            auth_mode=job.auth_mode,
        )
