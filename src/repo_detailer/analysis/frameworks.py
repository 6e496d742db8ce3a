"""파일 이름 기반 프레임워크 추정 규칙."""

from typing import NamedTuple


class FrameworkRule(NamedTuple):
    """언어별 프레임워크 추정 규칙.

    requires가 비어 있지 않으면 그중 하나가 항목 이름에 있어야 규칙이 적용된다.
    markers는 순서대로 검사하고, 하나도 맞지 않으면 default를 반환한다.
    """

    languages: frozenset[str]
    requires: tuple[str, ...]
    markers: tuple[tuple[str, str], ...]
    default: str | None


FRAMEWORK_RULES: tuple[FrameworkRule, ...] = (
    FrameworkRule(
        languages=frozenset({"JavaScript", "TypeScript"}),
        requires=("package.json",),
        markers=(
            ("react", "React"),
            ("vue", "Vue.js"),
            ("angular", "Angular"),
            ("next.", "Next.js"),
            ("vite.", "Vite"),
            ("express", "Express.js"),
            ("nest", "NestJS"),
        ),
        default="Node.js",
    ),
    FrameworkRule(
        languages=frozenset({"Python"}),
        requires=("setup.py", "requirements.txt", "pyproject.toml"),
        markers=(
            ("django", "Django"),
            ("flask", "Flask"),
            ("fastapi", "FastAPI"),
        ),
        default="Python",
    ),
    FrameworkRule(
        languages=frozenset({"Ruby"}),
        requires=(),
        markers=(("rails", "Ruby on Rails"), ("sinatra", "Sinatra")),
        default="Ruby",
    ),
    FrameworkRule(
        languages=frozenset({"PHP"}),
        requires=(),
        markers=(("laravel", "Laravel"), ("symfony", "Symfony")),
        default="PHP",
    ),
    FrameworkRule(
        languages=frozenset({"Go"}),
        requires=(),
        markers=(("gin", "Gin"), ("echo", "Echo")),
        default="Go",
    ),
    FrameworkRule(
        languages=frozenset({"Java"}),
        requires=(),
        markers=(("spring", "Spring Boot"),),
        default="Java",
    ),
    FrameworkRule(
        languages=frozenset({"C#"}),
        requires=(),
        markers=(("asp.net", "ASP.NET"), ("dotnet", ".NET Core")),
        default="C#",
    ),
)


def detect_framework(names: list[str], language: str) -> str:
    """최상위 항목 이름과 주 언어로 프레임워크를 추정한다.

    Args:
        names: 소문자로 변환된 항목 이름 목록
        language: 주 언어 ("Unknown"일 수 있음)
    """
    for rule in FRAMEWORK_RULES:
        if language not in rule.languages:
            continue
        if rule.requires and not any(
            req in name for name in names for req in rule.requires
        ):
            continue
        for marker, framework in rule.markers:
            if any(marker in name for name in names):
                return framework
        if rule.default:
            return rule.default

    return language or "Unknown"
