"""토큰과 사용자 설정 보관 모듈."""

import logging

from pydantic import ValidationError as PydanticValidationError

from repo_detailer.errors import PersistenceError
from repo_detailer.models import UserSettings
from repo_detailer.sources.credentials import Credential, validate_token
from repo_detailer.storage.base import SETTINGS_KEY, TOKEN_KEY, KeyValueStore

logger = logging.getLogger(__name__)


class PreferenceStore:
    """저장된 GitHub 토큰과 사용자 설정을 관리한다."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def get_token(self) -> str | None:
        try:
            return self.store.get(TOKEN_KEY)
        except PersistenceError as e:
            logger.warning(f"Could not read stored token: {e}")
            return None

    def set_token(self, token: str) -> str:
        """토큰 형식을 검증한 뒤 저장한다."""
        cleaned = validate_token(token)
        self.store.set(TOKEN_KEY, cleaned)
        logger.info("GitHub token saved")
        return cleaned

    def clear_token(self) -> None:
        self.store.delete(TOKEN_KEY)

    def credential(self, fallback_token: str | None = None) -> Credential:
        """저장된 토큰(없으면 fallback_token)으로 자격 증명을 만든다."""
        token = self.get_token() or fallback_token
        if not token:
            return Credential.anonymous()
        return Credential.token(token)

    def load_settings(self) -> UserSettings:
        """사용자 설정을 읽는다. 없거나 손상되었으면 기본값."""
        try:
            raw = self.store.get(SETTINGS_KEY)
        except PersistenceError as e:
            logger.warning(f"Could not read user settings: {e}")
            return UserSettings()
        if not raw:
            return UserSettings()
        try:
            return UserSettings.model_validate_json(raw)
        except PydanticValidationError as e:
            logger.warning(f"Ignoring corrupt user settings: {e}")
            return UserSettings()

    def save_settings(self, user_settings: UserSettings) -> None:
        self.store.set(SETTINGS_KEY, user_settings.model_dump_json())
