"""템플릿 모듈."""

from repo_detailer.templates.catalog import BUILTIN_TEMPLATES
from repo_detailer.templates.registry import TemplateRegistry

__all__ = ["BUILTIN_TEMPLATES", "TemplateRegistry"]
