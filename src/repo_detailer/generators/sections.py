"""섹션 이름별 마크다운 본문 생성 함수."""

import re
from collections.abc import Callable
from datetime import datetime

from repo_detailer.models import AnalysisResult

SectionFormatter = Callable[[AnalysisResult], str]

# 루트 매니페스트 파일 -> 패키지 생태계
MANIFESTS: dict[str, str] = {
    "package.json": "npm",
    "requirements.txt": "pip",
    "pyproject.toml": "Python packaging (pyproject)",
    "setup.py": "setuptools",
    "pipfile": "Pipenv",
    "go.mod": "Go modules",
    "cargo.toml": "Cargo",
    "gemfile": "Bundler",
    "pom.xml": "Maven",
    "build.gradle": "Gradle",
    "composer.json": "Composer",
}

CONFIG_MARKERS = (".", "config", ".toml", ".yml", ".yaml", ".json", ".cfg", ".ini")


def _date(value: datetime | None) -> str:
    return value.date().isoformat() if value else "Unknown"


def _names(result: AnalysisResult) -> list[str]:
    return [entry.name.lower() for entry in result.contents]


def language_shares(result: AnalysisResult) -> list[tuple[str, int]]:
    """언어별 비율(%)을 바이트 수 내림차순, 이름 오름차순으로 반환한다."""
    languages = result.basic.languages
    total = sum(languages.values())
    if not total:
        return []
    ordered = sorted(languages.items(), key=lambda item: (-item[1], item[0]))
    return [(name, round(count * 100 / total)) for name, count in ordered]


def detected_manifests(result: AnalysisResult) -> list[tuple[str, str]]:
    """루트에서 발견된 (파일 이름, 생태계) 목록."""
    names = _names(result)
    return [(entry, eco) for entry, eco in MANIFESTS.items() if entry in names]


def setup_commands(result: AnalysisResult) -> list[str]:
    """클론부터 로컬 실행까지의 셸 명령 목록."""
    basic = result.basic
    url = basic.url or f"https://github.com/{basic.full_name}"
    commands = [f"git clone {url}.git", f"cd {basic.name}"]
    manifests = {name for name, _ in detected_manifests(result)}

    if "package.json" in manifests:
        commands += ["npm install", "npm run dev"]
    if "requirements.txt" in manifests:
        commands += ["python -m venv .venv", "pip install -r requirements.txt"]
    elif manifests & {"pyproject.toml", "setup.py"}:
        commands += ["python -m venv .venv", "pip install -e ."]
    if "go.mod" in manifests:
        commands += ["go build ./..."]
    if "cargo.toml" in manifests:
        commands += ["cargo build"]
    if "gemfile" in manifests:
        commands += ["bundle install"]
    if "pom.xml" in manifests:
        commands += ["mvn install"]
    if "build.gradle" in manifests:
        commands += ["./gradlew build"]
    if "composer.json" in manifests:
        commands += ["composer install"]
    return commands


def run_tests_command(result: AnalysisResult) -> str | None:
    manifests = {name for name, _ in detected_manifests(result)}
    if "package.json" in manifests:
        return "npm test"
    if manifests & {"requirements.txt", "pyproject.toml", "setup.py", "pipfile"}:
        return "pytest"
    if "go.mod" in manifests:
        return "go test ./..."
    if "cargo.toml" in manifests:
        return "cargo test"
    if "gemfile" in manifests:
        return "bundle exec rake test"
    if "pom.xml" in manifests:
        return "mvn test"
    if "build.gradle" in manifests:
        return "./gradlew test"
    return None


def quality_score(result: AnalysisResult) -> int:
    """테스트/CI/문서/라이선스 보유 여부로 계산한 0-100 점수."""
    checks = (
        result.analysis.has_tests,
        result.analysis.has_ci,
        result.analysis.has_docs,
        result.basic.license is not None,
    )
    return sum(checks) * 25


def recommendations(result: AnalysisResult) -> list[str]:
    """분석 결과에서 도출한 개선 권고 목록."""
    basic, analysis = result.basic, result.analysis
    items = []
    if not basic.description:
        items.append("Add a repository description")
    if basic.issues > 50:
        items.append(f"Consider addressing open issues ({basic.issues} open)")
    if not analysis.has_tests:
        items.append("Add an automated test suite")
    if not analysis.has_ci:
        items.append("Set up continuous integration (e.g. GitHub Actions)")
    if not analysis.has_docs:
        items.append("Add a README or a docs/ directory")
    if basic.license is None:
        items.append("Add a license file")
    if analysis.contributors <= 1:
        items.append("Add contributing guidelines to welcome new contributors")
    return items


def _bullets(items: list[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def _check(flag: bool) -> str:
    return "✅" if flag else "❌"


def format_overview(result: AnalysisResult) -> str:
    basic, analysis = result.basic, result.analysis
    lines = [
        f"**{basic.name}**",
        basic.description or "No description provided",
        "",
        f"- **Owner:** {basic.owner.login or 'Unknown'}",
        f"- **Primary Language:** {basic.language}",
        f"- **Framework:** {analysis.framework}",
        f"- **Stars:** {basic.stars} | **Forks:** {basic.forks} | **Open Issues:** {basic.issues}",
        f"- **Created:** {_date(basic.created_at)}",
        f"- **Last Updated:** {_date(basic.updated_at)}",
        f"- **Contributors:** {analysis.contributors}",
        f"- **License:** {basic.license or 'Not specified'}",
    ]
    return "\n".join(lines)


def format_languages(result: AnalysisResult) -> str:
    shares = language_shares(result)
    if not shares:
        return "No language data available."
    return _bullets([f"{name}: {pct}%" for name, pct in shares])


def format_technical_details(result: AnalysisResult) -> str:
    analysis = result.analysis
    lines = [
        "**Programming Languages:**",
        format_languages(result),
        "",
        f"- **Framework:** {analysis.framework}",
        f"- **Architecture Pattern:** {analysis.architecture}",
        f"- **Complexity Score:** {analysis.complexity}/100 (estimate)",
    ]
    return "\n".join(lines)


def format_architecture(result: AnalysisResult) -> str:
    directories = [e.name for e in result.contents if e.type == "dir"]
    files = [e.name for e in result.contents if e.type != "dir"]
    configs = [
        name for name in files if any(marker in name.lower() for marker in CONFIG_MARKERS)
    ]
    lines = [
        f"- **Architecture:** {result.analysis.architecture}",
        f"- **Root Directories:** {len(directories)}",
        f"- **Root Files:** {len(files)}",
    ]
    if directories:
        lines += ["", "**Key Directories:**", _bullets([f"`{d}/`" for d in directories])]
    if configs:
        lines += ["", "**Configuration Files:**", _bullets([f"`{c}`" for c in configs])]
    return "\n".join(lines)


def format_development_setup(result: AnalysisResult) -> str:
    commands = "\n".join(setup_commands(result))
    return f"```bash\n{commands}\n```"


def format_code_quality(result: AnalysisResult) -> str:
    analysis = result.analysis
    lines = [
        f"- {_check(analysis.has_tests)} Tests",
        f"- {_check(analysis.has_ci)} Continuous Integration",
        f"- {_check(analysis.has_docs)} Documentation",
        f"- {_check(result.basic.license is not None)} License",
        "",
        f"**Quality Score:** {quality_score(result)}/100",
    ]
    return "\n".join(lines)


def format_recommendations(result: AnalysisResult) -> str:
    items = recommendations(result)
    if not items:
        return "No outstanding recommendations. The repository covers the common baseline."
    return _bullets(items)


def format_ai_guidelines(result: AnalysisResult) -> str:
    basic, analysis = result.basic, result.analysis
    items = [
        f"Write {basic.language} code that matches the existing {analysis.framework} conventions",
        "Keep changes small and focused; follow the existing directory layout",
        "Prefer existing utilities over adding new dependencies",
    ]
    if analysis.has_tests:
        items.append("Add or update tests alongside every behavior change")
    else:
        items.append("The repository has no test suite; describe manual verification steps")
    if analysis.has_docs:
        items.append("Update the README/docs when public behavior changes")
    return _bullets(items)


_FRAMEWORK_RULES: dict[str, list[str]] = {
    "React": [
        "Use function components and hooks",
        "Keep components small and colocate their styles and tests",
    ],
    "Vue.js": ["Use single-file components", "Keep component state local where possible"],
    "Angular": ["Organize code into feature modules", "Use services for shared state"],
    "Next.js": ["Keep data fetching in server components or route handlers"],
    "Express.js": ["Keep route handlers thin; move logic into services"],
    "NestJS": ["Use modules, providers and DTOs consistently"],
    "Django": ["Keep business logic out of views", "Use migrations for every model change"],
    "Flask": ["Use blueprints to group routes", "Configure the app through an app factory"],
    "FastAPI": ["Declare request/response models with pydantic", "Use dependency injection"],
    "Ruby on Rails": ["Follow Rails naming conventions", "Keep controllers skinny"],
    "Spring Boot": ["Use constructor injection", "Keep controllers free of business logic"],
}


def format_coding_rules(result: AnalysisResult) -> str:
    framework = result.analysis.framework
    items = list(_FRAMEWORK_RULES.get(framework, []))
    items += [
        f"Follow the idiomatic style guide for {result.basic.language}",
        "Use descriptive names for files, functions and variables",
        "Run the formatter and linter before committing",
    ]
    return _bullets(items)


def format_best_practices(result: AnalysisResult) -> str:
    items = [
        "Document public interfaces",
        "Handle errors explicitly and log with context",
        "Keep secrets out of the repository",
    ]
    if result.analysis.has_ci:
        items.append("Keep the CI pipeline green before merging")
    return _bullets(items)


def format_development_workflow(result: AnalysisResult) -> str:
    items = [
        "Create a feature branch from the default branch",
        "Open a pull request with a clear description",
        "Request review from a maintainer",
    ]
    if result.analysis.has_ci:
        items.append("Wait for CI checks to pass before merging")
    if result.analysis.has_tests:
        items.append("Run the test suite locally before pushing")
    return _bullets(items)


def format_productivity_shortcuts(result: AnalysisResult) -> str:
    commands = setup_commands(result)[2:]
    tests = run_tests_command(result)
    if tests:
        commands.append(tests)
    if not commands:
        return "No ecosystem-specific commands detected."
    return "```bash\n" + "\n".join(commands) + "\n```"


def format_project_scaffolds(result: AnalysisResult) -> str:
    framework = result.analysis.framework
    items = [f"Base new modules on the existing {framework} structure"]
    if result.analysis.has_tests:
        items.append("Mirror the existing test layout for new modules")
    manifests = detected_manifests(result)
    if manifests:
        items.append(
            "Reuse the root manifests: " + ", ".join(f"`{name}`" for name, _ in manifests)
        )
    return _bullets(items)


def format_dependencies(result: AnalysisResult) -> str:
    manifests = detected_manifests(result)
    if not manifests:
        return "No dependency manifests detected at the repository root."
    return _bullets([f"`{name}` ({eco})" for name, eco in manifests])


def format_structure(result: AnalysisResult) -> str:
    if not result.contents:
        return "No repository contents available."
    items = [
        f"📁 {entry.name}/" if entry.type == "dir" else f"📄 {entry.name}"
        for entry in result.contents
    ]
    return _bullets(items)


def format_contributors(result: AnalysisResult) -> str:
    if not result.contributors:
        return "No contributor data available."
    top = [
        f"{c.login} ({c.contributions} contributions)" for c in result.contributors[:10]
    ]
    return _bullets(top) + f"\n\n**Total Contributors:** {len(result.contributors)}"


def format_statistics(result: AnalysisResult) -> str:
    basic = result.basic
    lines = [
        f"- ⭐ Stars: {basic.stars}",
        f"- 🍴 Forks: {basic.forks}",
        f"- 🐛 Open Issues: {basic.issues}",
        f"- 📦 Size: {basic.size} KB",
        f"- 📅 Created: {_date(basic.created_at)}",
        f"- 🔄 Last Updated: {_date(basic.updated_at)}",
        f"- 📈 Popularity Score: {result.analysis.popularity_score}",
    ]
    return "\n".join(lines)


def format_security(result: AnalysisResult) -> str:
    analysis = result.analysis
    lines = [
        f"- **Security Score:** {analysis.security_score}/100 (placeholder estimate)",
        f"- {_check(result.basic.license is not None)} License declared",
        f"- {_check(analysis.has_ci)} Automated checks in CI",
        f"- {_check('security.md' in _names(result))} Security policy (SECURITY.md)",
    ]
    return "\n".join(lines)


def format_performance(result: AnalysisResult) -> str:
    analysis = result.analysis
    lines = [
        f"- **Performance Score:** {analysis.performance_score}/100 (placeholder estimate)",
        f"- **Repository Size:** {result.basic.size} KB",
        f"- **Complexity Score:** {analysis.complexity}/100 (estimate)",
    ]
    return "\n".join(lines)


def format_testing(result: AnalysisResult) -> str:
    test_entries = [
        entry.name
        for entry in result.contents
        if "test" in entry.name.lower() or "spec" in entry.name.lower()
    ]
    lines = [f"- {_check(result.analysis.has_tests)} Test suite detected"]
    if test_entries:
        lines.append("- Test locations: " + ", ".join(f"`{name}`" for name in test_entries))
    command = run_tests_command(result)
    if command:
        lines.append(f"- Run tests with `{command}`")
    return "\n".join(lines)


def format_deployment(result: AnalysisResult) -> str:
    names = _names(result)
    has_docker = any("dockerfile" in name or "docker-compose" in name for name in names)
    lines = [
        f"- {_check(result.analysis.has_ci)} CI pipeline",
        f"- {_check(has_docker)} Container build (Dockerfile)",
    ]
    if not has_docker:
        lines.append("- Consider adding a Dockerfile for reproducible deployments")
    return "\n".join(lines)


def format_api(result: AnalysisResult) -> str:
    names = _names(result)
    specs = [
        entry.name
        for entry in result.contents
        if any(marker in entry.name.lower() for marker in ("openapi", "swagger"))
    ]
    lines = [f"- **Framework:** {result.analysis.framework}"]
    if specs:
        lines.append("- API specifications: " + ", ".join(f"`{name}`" for name in specs))
    else:
        lines.append("- No OpenAPI/Swagger specification found at the root")
    if "api" in names:
        lines.append("- API sources live under `api/`")
    return "\n".join(lines)


# 순서가 매칭 우선순위다
SECTION_FORMATTERS: dict[str, SectionFormatter] = {
    "overview": format_overview,
    "technical details": format_technical_details,
    "architecture": format_architecture,
    "development setup": format_development_setup,
    "code quality": format_code_quality,
    "recommendations": format_recommendations,
    "ai guidelines": format_ai_guidelines,
    "coding rules": format_coding_rules,
    "best practices": format_best_practices,
    "development workflow": format_development_workflow,
    "productivity shortcuts": format_productivity_shortcuts,
    "project scaffolds": format_project_scaffolds,
    "languages": format_languages,
    "dependencies": format_dependencies,
    "structure": format_structure,
    "contributors": format_contributors,
    "statistics": format_statistics,
    "security": format_security,
    "performance": format_performance,
    "testing": format_testing,
    "deployment": format_deployment,
    "api": format_api,
}


def _contains_words(haystack: str, needle: str) -> bool:
    return re.search(rf"\b{re.escape(needle)}\b", haystack) is not None


def find_formatter(section: str) -> SectionFormatter | None:
    """섹션 이름에 맞는 본문 생성 함수를 찾는다.

    대소문자와 공백을 정규화한 뒤, 알려진 키와 단어 단위로 서로 포함되면 매칭한다.
    """
    normalized = " ".join(section.lower().split())
    if not normalized:
        return None
    for key, formatter in SECTION_FORMATTERS.items():
        if _contains_words(normalized, key) or _contains_words(key, normalized):
            return formatter
    return None


def placeholder(section: str) -> str:
    return (
        f"Custom section: {section}\n\n"
        "_No generator is registered for this section name; fill in the content manually._"
    )
