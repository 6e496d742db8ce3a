"""문서 생성 모듈."""

from repo_detailer.generators.context import ContextGenerator

__all__ = ["ContextGenerator"]
