"""알림 모듈."""

from repo_detailer.notifiers.base import Notifier
from repo_detailer.notifiers.slack import SlackNotifier

__all__ = ["Notifier", "SlackNotifier"]
