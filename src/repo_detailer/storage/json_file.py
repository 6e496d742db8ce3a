"""JSON 파일 저장소 모듈."""

import json
import logging
import os
from pathlib import Path

from repo_detailer.errors import PersistenceError

logger = logging.getLogger(__name__)


class JsonFileStore:
    """하나의 JSON 파일에 모든 키를 저장한다."""

    def __init__(self, path: Path) -> None:
        """
        Args:
            path: 상태 파일 경로. 없으면 첫 쓰기 때 생성한다.
        """
        self.path = path

    def _read_text(self) -> str | None:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise PersistenceError(f"Cannot read {self.path}: {e}") from e

    def _decode(self, raw: str) -> dict[str, str]:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Corrupt state file {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise PersistenceError(f"Unexpected state file layout in {self.path}")
        return {str(k): str(v) for k, v in data.items()}

    def _read(self) -> dict[str, str]:
        """파일 전체를 읽는다."""
        raw = self._read_text()
        return {} if raw is None else self._decode(raw)

    def _read_for_write(self) -> dict[str, str]:
        """쓰기 전에 현재 내용을 읽는다.

        손상된 파일은 `.corrupt` 로 옮겨 두고 빈 상태에서 다시 시작한다.
        """
        raw = self._read_text()
        if raw is None:
            return {}
        try:
            return self._decode(raw)
        except PersistenceError as e:
            backup = self.path.with_suffix(self.path.suffix + ".corrupt")
            try:
                os.replace(self.path, backup)
            except OSError as move_error:
                raise PersistenceError(
                    f"Cannot move corrupt state file {self.path}: {move_error}"
                ) from e
            logger.warning(f"{e}; moved it to {backup} and starting fresh")
            return {}

    def _write(self, data: dict[str, str]) -> None:
        """임시 파일에 쓴 뒤 교체한다."""
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            raise PersistenceError(f"Cannot write {self.path}: {e}") from e

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_for_write()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read_for_write()
        if data.pop(key, None) is not None:
            self._write(data)
            logger.debug(f"Deleted key {key} from {self.path}")
