"""Slack 알림 모듈."""

import logging

import httpx

from repo_detailer.models import Job, JobStatus

logger = logging.getLogger(__name__)


class SlackNotifier:
    """Slack으로 작업 상태 알림을 전송한다."""

    def __init__(
        self,
        webhook_url: str | None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            webhook_url: Slack Incoming Webhook URL
            transport: 테스트용 httpx 트랜스포트
        """
        self.webhook_url = webhook_url
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        """Slack이 설정되었는지 확인한다."""
        return self.webhook_url is not None

    def _format_message(self, job: Job) -> str:
        """알림 메시지를 포맷한다."""
        if job.status == JobStatus.completed:
            headline = f":white_check_mark: *Analysis completed* `{job.repository}`"
        elif job.status == JobStatus.failed:
            headline = f":x: *Analysis failed* `{job.repository}`"
        else:
            headline = f"*Analysis {job.status.value}* `{job.repository}`"

        lines = [headline, f"• Template: {job.template}", f"• Mode: {job.auth_mode.value}"]
        if job.branch:
            lines.append(f"• Branch: {job.branch}")
        if job.error:
            lines.append(f"• Reason: {job.error}")
        lines.append(f"• Job: {job.id}")
        return "\n".join(lines)

    def _payload(self, job: Job) -> dict[str, object]:
        """Incoming Webhook 본문. 알림 미리보기용 `text` 와 본문 블록을 함께 보낸다."""
        message = self._format_message(job)
        return {
            "text": message.splitlines()[0],
            "blocks": [{"type": "section", "text": {"type": "mrkdwn", "text": message}}],
        }

    async def notify(self, job: Job) -> bool:
        """종료된 작업의 결과를 한 번 알린다. 진행 중인 작업은 보내지 않는다."""
        if not self.webhook_url:
            return False
        if job.status not in (JobStatus.completed, JobStatus.failed):
            logger.debug(f"Not notifying job {job.id} in state {job.status.value}")
            return False

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.post(self.webhook_url, json=self._payload(job))
        except httpx.RequestError as e:
            logger.error(f"Slack request failed for job {job.id}: {e}")
            return False

        if not response.is_success:
            logger.error(f"Slack API error for job {job.id}: {response.status_code}")
            return False
        logger.info(f"Slack notification sent for job {job.id} ({job.status.value})")
        return True
