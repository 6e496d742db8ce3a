"""내장/사용자 템플릿 레지스트리."""

import logging
import re
from collections.abc import Callable
from datetime import UTC, datetime

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from repo_detailer.errors import PersistenceError, TemplateError, TemplateNotFoundError
from repo_detailer.models import Template, TemplateExport
from repo_detailer.storage.base import TEMPLATES_KEY, KeyValueStore
from repo_detailer.templates.catalog import BUILTIN_TEMPLATES

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"

_templates_adapter = TypeAdapter(list[Template])


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "template"


class TemplateRegistry:
    """내장 템플릿과 사용자 템플릿을 관리한다.

    사용자 템플릿만 변경 가능하며, 변경할 때마다 저장소에 기록한다.
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """
        Args:
            store: 사용자 템플릿을 보관할 키-값 저장소
            clock: 생성 시각/내보내기 시각에 사용할 시계
        """
        self.store = store
        self.clock = clock
        self._custom: dict[str, Template] = self._load()

    def _load(self) -> dict[str, Template]:
        """저장된 사용자 템플릿을 읽는다. 손상되었으면 빈 목록으로 시작한다."""
        try:
            raw = self.store.get(TEMPLATES_KEY)
        except PersistenceError as e:
            logger.warning(f"Could not read custom templates: {e}")
            return {}
        if not raw:
            return {}

        try:
            templates = _templates_adapter.validate_json(raw)
        except PydanticValidationError as e:
            logger.warning(f"Ignoring corrupt custom templates: {e}")
            return {}

        loaded: dict[str, Template] = {}
        for template in templates:
            if template.id in BUILTIN_TEMPLATES:
                logger.warning(f"Skipping stored template shadowing built-in {template.id}")
                continue
            try:
                loaded[template.id] = self._validate(template)
            except TemplateError as e:
                logger.warning(f"Skipping invalid stored template {template.id}: {e}")
        return loaded

    def _commit(self, custom: dict[str, Template]) -> None:
        """저장에 성공한 경우에만 메모리의 사용자 템플릿을 교체한다."""
        # 사용자 템플릿이 없으면 빈 목록 대신 키 자체를 지운다
        if not custom:
            self.store.delete(TEMPLATES_KEY)
        else:
            payload = _templates_adapter.dump_json(list(custom.values()))
            self.store.set(TEMPLATES_KEY, payload.decode("utf-8"))
        self._custom = custom

    @staticmethod
    def _validate(template: Template) -> Template:
        name = template.name.strip()
        if not name:
            raise TemplateError("Template name is required")
        sections = [s.strip() for s in template.sections if s and s.strip()]
        if not sections:
            raise TemplateError("Template must contain at least one section")
        return template.model_copy(
            update={"name": name, "sections": sections, "builtin": False}
        )

    def _unique_id(self, base: str) -> str:
        candidate = base
        suffix = 2
        while candidate in BUILTIN_TEMPLATES or candidate in self._custom:
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate

    def get(self, template_id: str) -> Template | None:
        return BUILTIN_TEMPLATES.get(template_id) or self._custom.get(template_id)

    def resolve(self, template_id: str) -> Template:
        """템플릿 ID를 렌더링 가능한 템플릿으로 변환한다."""
        template = self.get(template_id)
        if template is None:
            raise TemplateNotFoundError(f"Template not found: {template_id}")
        return template

    def is_builtin(self, template_id: str) -> bool:
        return template_id in BUILTIN_TEMPLATES

    def list_all(self) -> list[Template]:
        """내장 템플릿 다음에 사용자 템플릿을 추가된 순서대로 반환한다."""
        return [*BUILTIN_TEMPLATES.values(), *self._custom.values()]

    def list_custom(self) -> list[Template]:
        return list(self._custom.values())

    def upsert_custom(self, template: Template) -> Template:
        """사용자 템플릿을 추가하거나 교체한다.

        Raises:
            TemplateError: 내장 템플릿 ID와 겹치거나 이름/섹션이 비어 있는 경우
        """
        if template.id in BUILTIN_TEMPLATES:
            raise TemplateError(
                f"Template id {template.id!r} is reserved by a built-in template"
            )
        if not template.id.strip():
            raise TemplateError("Template id is required")

        validated = self._validate(template)
        existing = self._custom.get(validated.id)
        if validated.created is None:
            created = existing.created if existing else self.clock()
            validated = validated.model_copy(update={"created": created})

        self._commit({**self._custom, validated.id: validated})
        logger.info(f"{'Updated' if existing else 'Added'} custom template {validated.id}")
        return validated

    def create_custom(
        self,
        name: str,
        sections: list[str],
        description: str = "",
        icon: str = "📋",
        is_public: bool = False,
    ) -> Template:
        """이름에서 ID를 만들어 새 사용자 템플릿을 추가한다.

        ID가 겹치면 `-2`, `-3` 접미사를 붙인다.
        """
        if not name.strip():
            raise TemplateError("Template name is required")
        template = Template(
            id=self._unique_id(_slugify(name)),
            name=name,
            description=description,
            icon=icon,
            sections=sections,
            is_public=is_public,
            created=self.clock(),
            version="1.0.0",
        )
        return self.upsert_custom(template)

    def remove_custom(self, template_id: str) -> bool:
        """사용자 템플릿을 삭제한다. 없는 ID면 False."""
        if template_id in BUILTIN_TEMPLATES:
            raise TemplateError(f"Built-in template {template_id!r} cannot be deleted")
        if template_id not in self._custom:
            return False
        self._commit({k: v for k, v in self._custom.items() if k != template_id})
        logger.info(f"Removed custom template {template_id}")
        return True

    def export(self, template_ids: list[str] | None = None) -> TemplateExport:
        """템플릿을 직렬화 가능한 묶음으로 내보낸다.

        Args:
            template_ids: 내보낼 템플릿 ID 목록. None이면 사용자 템플릿 전체.
        """
        if template_ids is None:
            templates = self.list_custom()
        else:
            templates = [self.resolve(template_id) for template_id in template_ids]
        return TemplateExport(
            export_date=self.clock(),
            templates=templates,
            total_templates=len(templates),
            version=EXPORT_VERSION,
        )

    def import_bundle(self, bundle: TemplateExport) -> list[Template]:
        """내보낸 묶음의 사용자 템플릿을 가져온다. 내장 템플릿은 건너뛴다."""
        imported = []
        for template in bundle.templates:
            if template.id in BUILTIN_TEMPLATES:
                logger.info(f"Skipping built-in template {template.id} in bundle")
                continue
            imported.append(self.upsert_custom(template))
        return imported
