"""작업 기록 모듈."""

from repo_detailer.jobs.ledger import JobLedger

__all__ = ["JobLedger"]
