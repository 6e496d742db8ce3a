"""템플릿 레지스트리 테스트."""

import json
from collections.abc import Callable
from datetime import datetime

import pytest

from repo_detailer.errors import PersistenceError, TemplateError, TemplateNotFoundError
from repo_detailer.models import Template
from repo_detailer.storage import MemoryStore
from repo_detailer.storage.base import TEMPLATES_KEY
from repo_detailer.templates import BUILTIN_TEMPLATES, TemplateRegistry

BUILTIN_IDS = [
    "comprehensive",
    "minimal",
    "technical",
    "overview",
    "rules",
    "workflows",
    "shortcuts",
    "scaffold",
    "security",
    "performance",
    "testing",
    "onboarding",
    "api",
    "deployment",
    "ai-assistant",
]


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def registry(store: MemoryStore, fixed_clock: Callable[[], datetime]) -> TemplateRegistry:
    return TemplateRegistry(store, clock=fixed_clock)


class ReadOnlyStore(MemoryStore):
    """쓰기와 삭제가 항상 실패하는 저장소."""

    def set(self, key: str, value: str) -> None:
        raise PersistenceError("read-only")

    def delete(self, key: str) -> None:
        raise PersistenceError("read-only")


def _template(template_id: str = "team", **changes: object) -> Template:
    fields: dict[str, object] = {
        "id": template_id,
        "name": "Team Notes",
        "sections": ["Overview", "Onboarding Checklist"],
    }
    fields.update(changes)
    return Template(**fields)


class TestBuiltinTemplates:
    """내장 템플릿 테스트."""

    def test_catalog(self) -> None:
        assert list(BUILTIN_TEMPLATES) == BUILTIN_IDS

    def test_all_builtins_are_flagged(self) -> None:
        assert all(t.builtin and t.sections for t in BUILTIN_TEMPLATES.values())

    def test_minimal_sections(self) -> None:
        assert BUILTIN_TEMPLATES["minimal"].sections == ["Overview", "Languages", "Structure"]


class TestTemplateRegistry:
    """TemplateRegistry 테스트."""

    def test_list_all_starts_with_builtins(self, registry: TemplateRegistry) -> None:
        registry.upsert_custom(_template())
        ids = [t.id for t in registry.list_all()]
        assert ids == [*BUILTIN_IDS, "team"]

    def test_resolve_unknown(self, registry: TemplateRegistry) -> None:
        with pytest.raises(TemplateNotFoundError):
            registry.resolve("nope")

    def test_upsert_persists(
        self, registry: TemplateRegistry, store: MemoryStore, fixed_clock: Callable[[], datetime]
    ) -> None:
        saved = registry.upsert_custom(_template())

        assert saved.created == fixed_clock()
        assert saved.builtin is False
        stored = json.loads(store.get(TEMPLATES_KEY) or "[]")
        assert [t["id"] for t in stored] == ["team"]

    def test_upsert_keeps_created(
        self, registry: TemplateRegistry, fixed_clock: Callable[[], datetime]
    ) -> None:
        registry.upsert_custom(_template())
        updated = registry.upsert_custom(_template(name="Renamed"))
        assert updated.name == "Renamed"
        assert updated.created == fixed_clock()
        assert len(registry.list_custom()) == 1

    def test_builtin_id_is_reserved(self, registry: TemplateRegistry) -> None:
        with pytest.raises(TemplateError, match="reserved"):
            registry.upsert_custom(_template("minimal"))
        assert registry.resolve("minimal").builtin is True

    @pytest.mark.parametrize(
        "changes",
        [{"name": "  "}, {"sections": []}, {"sections": ["", "   "]}],
    )
    def test_invalid_template(
        self, registry: TemplateRegistry, changes: dict[str, object]
    ) -> None:
        with pytest.raises(TemplateError):
            registry.upsert_custom(_template(**changes))

    def test_blank_sections_are_dropped(self, registry: TemplateRegistry) -> None:
        saved = registry.upsert_custom(_template(sections=[" Overview ", ""]))
        assert saved.sections == ["Overview"]

    def test_create_custom_generates_unique_ids(self, registry: TemplateRegistry) -> None:
        first = registry.create_custom("My Template!", ["Overview"])
        second = registry.create_custom("my template", ["Structure"])
        clash = registry.create_custom("Minimal", ["Overview"])

        assert first.id == "my-template"
        assert second.id == "my-template-2"
        assert clash.id == "minimal-2"

    def test_remove_custom(self, registry: TemplateRegistry, store: MemoryStore) -> None:
        registry.upsert_custom(_template())

        assert registry.remove_custom("team") is True
        assert "team" not in [t.id for t in registry.list_all()]
        assert registry.remove_custom("team") is False
        assert TEMPLATES_KEY not in store

    def test_remove_builtin(self, registry: TemplateRegistry) -> None:
        with pytest.raises(TemplateError):
            registry.remove_custom("comprehensive")

    def test_reload_from_store(
        self, store: MemoryStore, fixed_clock: Callable[[], datetime]
    ) -> None:
        TemplateRegistry(store, clock=fixed_clock).upsert_custom(_template())
        reloaded = TemplateRegistry(store, clock=fixed_clock)
        assert reloaded.resolve("team").sections == ["Overview", "Onboarding Checklist"]

    def test_corrupt_store_is_ignored(self) -> None:
        registry = TemplateRegistry(MemoryStore({TEMPLATES_KEY: "{not json"}))
        assert registry.list_custom() == []
        assert len(registry.list_all()) == len(BUILTIN_IDS)

    def test_stored_builtin_shadow_is_skipped(self) -> None:
        payload = json.dumps(
            [{"id": "minimal", "name": "Evil", "sections": ["Overview"]}]
        )
        registry = TemplateRegistry(MemoryStore({TEMPLATES_KEY: payload}))
        assert registry.resolve("minimal").name == BUILTIN_TEMPLATES["minimal"].name
        assert registry.list_custom() == []

    def test_stored_invalid_template_is_skipped(self) -> None:
        """직접 수정된 상태 파일의 잘못된 템플릿은 불러오지 않는다."""
        payload = json.dumps(
            [
                {"id": "empty", "name": "Empty", "sections": []},
                {"id": "blank", "name": "  ", "sections": ["Overview"]},
                {"id": "team", "name": "Team Notes", "sections": [" Overview "]},
            ]
        )
        registry = TemplateRegistry(MemoryStore({TEMPLATES_KEY: payload}))
        assert [t.id for t in registry.list_custom()] == ["team"]
        assert registry.resolve("team").sections == ["Overview"]

    def test_failed_upsert_leaves_registry_unchanged(self) -> None:
        registry = TemplateRegistry(ReadOnlyStore())

        with pytest.raises(PersistenceError):
            registry.upsert_custom(_template())

        assert registry.list_custom() == []
        with pytest.raises(TemplateNotFoundError):
            registry.resolve("team")

    def test_failed_remove_keeps_template(self) -> None:
        payload = json.dumps([{"id": "team", "name": "Team Notes", "sections": ["Overview"]}])
        registry = TemplateRegistry(ReadOnlyStore({TEMPLATES_KEY: payload}))

        with pytest.raises(PersistenceError):
            registry.remove_custom("team")

        assert [t.id for t in registry.list_custom()] == ["team"]

class TestTemplateExport:
    """템플릿 내보내기/가져오기 테스트."""

    def test_export_custom_by_default(
        self, registry: TemplateRegistry, fixed_clock: Callable[[], datetime]
    ) -> None:
        registry.upsert_custom(_template())
        bundle = registry.export()

        assert bundle.export_date == fixed_clock()
        assert bundle.total_templates == 1
        assert bundle.version == "1.0"

    def test_export_selected(self, registry: TemplateRegistry) -> None:
        bundle = registry.export(["minimal", "api"])
        assert [t.id for t in bundle.templates] == ["minimal", "api"]

    def test_import_skips_builtins(
        self, registry: TemplateRegistry, fixed_clock: Callable[[], datetime]
    ) -> None:
        source = TemplateRegistry(MemoryStore(), clock=fixed_clock)
        source.upsert_custom(_template())
        bundle = source.export(["team", "minimal"])

        imported = registry.import_bundle(bundle)

        assert [t.id for t in imported] == ["team"]
        assert registry.resolve("team").name == "Team Notes"
