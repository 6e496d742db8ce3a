"""알림 프로토콜 정의."""

from typing import Protocol

from repo_detailer.models import Job


class Notifier(Protocol):
    """작업 상태 알림 프로토콜."""

    async def notify(self, job: Job) -> bool:
        """작업 종료를 한 번 알린다."""
        ...
