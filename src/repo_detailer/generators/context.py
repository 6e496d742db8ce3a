"""마크다운 컨텍스트 문서 생성 모듈."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from repo_detailer.generators.sections import (
    find_formatter,
    format_code_quality,
    format_languages,
    format_structure,
    language_shares,
    placeholder,
    quality_score,
    recommendations,
    setup_commands,
)
from repo_detailer.models import AnalysisResult, Template

logger = logging.getLogger(__name__)

GENERATOR_NAME = "Repository Detailer"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ContextGenerator:
    """분석 결과를 템플릿에 따라 마크다운으로 렌더링한다.

    같은 입력과 같은 시계라면 출력은 바이트 단위로 동일하다.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        """
        Args:
            clock: "Generated" 시각에 사용할 시계
        """
        self.clock = clock

    def _timestamp(self) -> str:
        return self.clock().isoformat(timespec="seconds")

    def generate(
        self,
        result: AnalysisResult,
        template: Template,
        custom_instructions: str = "",
    ) -> str:
        """템플릿의 섹션 순서대로 문서를 만든다.

        알 수 없는 섹션 이름은 실패하지 않고 안내 문구로 채운다.
        """
        lines = [f"# {template.name}", ""]
        if template.description:
            lines += [f"*{template.description}*", ""]
        lines += [
            f"**Generated:** {self._timestamp()}",
            f"**Repository:** {result.basic.full_name}",
            f"**Template:** {template.icon} {template.name}",
            "",
            "---",
            "",
        ]

        for section in template.sections:
            title = section.strip()
            if not title:
                continue
            formatter = find_formatter(title)
            if formatter is None:
                logger.debug(f"No formatter for section {title!r}, using placeholder")
                body = placeholder(title)
            else:
                body = formatter(result)
            lines += [f"## {title}", "", body, ""]

        if custom_instructions.strip():
            lines += ["## Additional Instructions", "", custom_instructions.strip(), ""]

        return "\n".join(lines).rstrip() + "\n"

    def generate_details(self, result: AnalysisResult, custom_instructions: str = "") -> str:
        """템플릿과 무관한 고정 형식의 상세 문서를 만든다."""
        basic, analysis = result.basic, result.analysis
        shares = language_shares(result)
        stack = ", ".join(name for name, _ in shares[:5]) or basic.language
        roadmap = recommendations(result) or ["Keep dependencies and documentation current"]

        lines = [
            f"# 📋 {basic.name} - Repository Analysis",
            "",
            "## 🎯 AI Context Overview",
            "",
            f"- **Repository:** {basic.full_name}",
            f"- **Owner:** {basic.owner.login or 'Unknown'}",
            f"- **Description:** {basic.description or 'No description provided'}",
            f"- **Language:** {basic.language}",
            f"- **Stars:** {basic.stars}",
            f"- **Forks:** {basic.forks}",
            "",
            "---",
            "",
            "## 🏗️ Technical Architecture",
            "",
            f"- **Primary Language:** {basic.language}",
            f"- **Framework:** {analysis.framework}",
            f"- **Architecture:** {analysis.architecture}",
            f"- **Technology Stack:** {stack}",
            "",
            "**Language Breakdown:**",
            "",
            format_languages(result),
            "",
            "---",
            "",
            "## 📊 Repository Metrics",
            "",
            f"- **Stars:** {basic.stars}",
            f"- **Forks:** {basic.forks}",
            f"- **Open Issues:** {basic.issues}",
            f"- **Contributors:** {analysis.contributors}",
            f"- **Root Entries:** {analysis.file_count}",
            f"- **Complexity Score:** {analysis.complexity}/100 (estimate)",
            f"- **Quality Score:** {quality_score(result)}/100",
            "",
            "---",
            "",
            "## 🔧 Development Setup",
            "",
            "```bash",
            *setup_commands(result),
            "```",
            "",
            "### Configuration",
            "",
            "```yaml",
            "repository:",
            f"  name: {basic.name}",
            f"  owner: {basic.owner.login or 'unknown'}",
            f"  language: {basic.language}",
            f"  framework: {analysis.framework}",
            "quality:",
            f"  tests: {str(analysis.has_tests).lower()}",
            f"  ci: {str(analysis.has_ci).lower()}",
            f"  docs: {str(analysis.has_docs).lower()}",
            "```",
            "",
            "---",
            "",
            "## 📁 Project Structure",
            "",
            format_structure(result),
            "",
            "---",
            "",
            "## ✅ Code Quality",
            "",
            format_code_quality(result),
            "",
            "---",
            "",
            "## 🔒 Security Summary",
            "",
            f"- **Security Score:** {analysis.security_score}/100 (placeholder estimate)",
            f"- **License:** {basic.license or 'Not specified'}",
            "- Review dependency updates regularly and enable automated alerts",
            "- Never commit credentials; use environment variables or a secret store",
            "",
            "## ⚡ Performance Summary",
            "",
            f"- **Performance Score:** {analysis.performance_score}/100 (placeholder estimate)",
            f"- **Repository Size:** {basic.size} KB",
            "- Profile hot paths before optimizing",
            "",
            "---",
            "",
            "## 🗺️ Roadmap",
            "",
            *(f"{i}. {item}" for i, item in enumerate(roadmap, 1)),
            "",
        ]

        if custom_instructions.strip():
            lines += ["## 📝 Additional Instructions", "", custom_instructions.strip(), ""]

        lines += ["---", "", f"*Generated by {GENERATOR_NAME} at {self._timestamp()}*"]
        return "\n".join(lines) + "\n"
