"""Supabase 스토리지 모듈."""

import logging

from supabase import Client, create_client

from repo_detailer.errors import PersistenceError

logger = logging.getLogger(__name__)


class SupabaseStore:
    """Supabase 키-값 테이블에 상태를 저장한다.

    테이블은 `key` (text, primary key)와 `value` (text) 컬럼을 가진다.
    """

    def __init__(
        self,
        url: str | None,
        key: str | None,
        table: str = "detailer_state",
    ) -> None:
        """
        Args:
            url: Supabase 프로젝트 URL
            key: Supabase anon key
            table: 키-값 테이블 이름
        """
        self.table = table
        self.client: Client | None = None
        if url and key:
            self.client = create_client(url, key)

    @property
    def is_configured(self) -> bool:
        """Supabase가 설정되었는지 확인한다."""
        return self.client is not None

    def _require_client(self) -> Client:
        if self.client is None:
            raise PersistenceError("Supabase is not configured")
        return self.client

    def get(self, key: str) -> str | None:
        client = self._require_client()
        try:
            response = (
                client.table(self.table)
                .select("value")
                .eq("key", key)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise PersistenceError(f"Supabase read failed for {key}: {e}") from e

        if not response.data:
            return None
        value = response.data[0].get("value")
        return str(value) if value is not None else None

    def set(self, key: str, value: str) -> None:
        client = self._require_client()
        try:
            client.table(self.table).upsert({"key": key, "value": value}).execute()
        except Exception as e:
            raise PersistenceError(f"Supabase write failed for {key}: {e}") from e
        logger.debug(f"Saved key {key} to Supabase")

    def delete(self, key: str) -> None:
        client = self._require_client()
        try:
            client.table(self.table).delete().eq("key", key).execute()
        except Exception as e:
            raise PersistenceError(f"Supabase delete failed for {key}: {e}") from e
