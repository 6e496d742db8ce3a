"""내장 템플릿 목록."""

from datetime import UTC, datetime

from repo_detailer.models import Template

_CATALOG_DATE = datetime(2024, 1, 1, tzinfo=UTC)

# (id, name, description, icon, sections)
_BUILTIN_SPECS: tuple[tuple[str, str, str, str, tuple[str, ...]], ...] = (
    (
        "comprehensive",
        "Comprehensive Analysis",
        "Complete project information including architecture, setup, and recommendations",
        "📚",
        (
            "Overview",
            "Technical Details",
            "Architecture",
            "Development Setup",
            "Code Quality",
            "Recommendations",
            "AI Guidelines",
        ),
    ),
    (
        "minimal",
        "Minimal Overview",
        "Essential repository data: name, owner, language, stars, and key metrics",
        "⚡",
        ("Overview", "Languages", "Structure"),
    ),
    (
        "technical",
        "Technical Specs",
        "Technical details: languages, frameworks, dependencies, and development tools",
        "🔧",
        ("Technical Details", "Languages", "Dependencies", "Structure", "Development Setup"),
    ),
    (
        "overview",
        "Quick Overview",
        "High-level summary: project facts, technology stack, and activity metrics",
        "👀",
        ("Overview", "Statistics", "Contributors"),
    ),
    (
        "rules",
        "Coding Rules",
        "Framework-specific coding rules and standards",
        "📏",
        ("Coding Rules", "Best Practices", "Code Quality"),
    ),
    (
        "workflows",
        "Development Workflows",
        "PR process, release workflow, collaboration guidelines",
        "🔄",
        ("Development Workflow", "Testing", "Deployment"),
    ),
    (
        "shortcuts",
        "Productivity Shortcuts",
        "Development commands and productivity tools",
        "⌨️",
        ("Productivity Shortcuts", "Development Setup"),
    ),
    (
        "scaffold",
        "Project Scaffolds",
        "Component templates and boilerplate code",
        "🏗️",
        ("Project Scaffolds", "Structure", "Architecture"),
    ),
    (
        "security",
        "Security Review",
        "Security posture, dependency surface, and hardening recommendations",
        "🔒",
        ("Security", "Dependencies", "Recommendations"),
    ),
    (
        "performance",
        "Performance Profile",
        "Performance summary with technical context and recommendations",
        "🚀",
        ("Performance", "Technical Details", "Recommendations"),
    ),
    (
        "testing",
        "Testing Strategy",
        "Test setup, quality signals, and the surrounding workflow",
        "🧪",
        ("Testing", "Code Quality", "Development Workflow"),
    ),
    (
        "onboarding",
        "Contributor Onboarding",
        "Everything a new contributor needs to get productive",
        "👋",
        ("Overview", "Development Setup", "Structure", "Contributors", "Development Workflow"),
    ),
    (
        "api",
        "API Reference Outline",
        "Entry points, architecture, and dependencies for API consumers",
        "🔌",
        ("API", "Architecture", "Dependencies"),
    ),
    (
        "deployment",
        "Deployment Guide",
        "Build, release, and deployment checklist",
        "📦",
        ("Deployment", "Development Setup", "Security"),
    ),
    (
        "ai-assistant",
        "AI Assistant Context",
        "Guidelines and conventions for AI coding assistants",
        "🤖",
        ("AI Guidelines", "Overview", "Coding Rules", "Architecture"),
    ),
)

BUILTIN_TEMPLATES: dict[str, Template] = {
    template_id: Template(
        id=template_id,
        name=name,
        description=description,
        icon=icon,
        sections=list(sections),
        is_public=True,
        created=_CATALOG_DATE,
        version="1.0.0",
        builtin=True,
    )
    for template_id, name, description, icon, sections in _BUILTIN_SPECS
}
