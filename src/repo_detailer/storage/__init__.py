"""상태 저장소 모듈."""

from repo_detailer.storage.base import KeyValueStore
from repo_detailer.storage.json_file import JsonFileStore
from repo_detailer.storage.memory import MemoryStore
from repo_detailer.storage.preferences import PreferenceStore
from repo_detailer.storage.supabase import SupabaseStore

__all__ = [
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "PreferenceStore",
    "SupabaseStore",
]
