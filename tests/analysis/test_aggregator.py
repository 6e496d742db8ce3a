"""분석 결과 집계 테스트."""

import random

import pytest

from repo_detailer.analysis import AnalysisAggregator
from repo_detailer.analysis.aggregator import primary_language
from repo_detailer.analysis.frameworks import detect_framework
from repo_detailer.analysis.metrics import (
    PlaceholderMetricsProvider,
    StaticMetricsProvider,
)
from repo_detailer.models import AnalysisResult, ContentEntry, RawRepoData


def _with_contents(raw: RawRepoData, *names: str) -> RawRepoData:
    return raw.model_copy(
        update={"contents": [ContentEntry(name=name) for name in names]}
    )


class TestPrimaryLanguage:
    """primary_language 테스트."""

    def test_largest_wins(self) -> None:
        assert primary_language({"CSS": 200, "JavaScript": 800}) == "JavaScript"

    def test_tie_breaks_by_name(self) -> None:
        assert primary_language({"Rust": 100, "Go": 100, "C": 50}) == "Go"

    def test_empty_is_unknown(self) -> None:
        assert primary_language({}) == "Unknown"


class TestAnalysisAggregator:
    """AnalysisAggregator 테스트."""

    def test_end_to_end(self, analysis_result: AnalysisResult) -> None:
        """package.json, README.md, .github 를 가진 JavaScript 저장소."""
        basic, analysis = analysis_result.basic, analysis_result.analysis

        assert basic.language == "JavaScript"
        assert basic.languages == {"JavaScript": 800, "CSS": 200}
        assert basic.issues == 3
        assert analysis.framework == "Node.js"
        assert analysis.architecture == "Standard"
        assert analysis.has_docs is True
        assert analysis.has_ci is True
        assert analysis.has_tests is False
        assert analysis.contributors == 2
        assert analysis.file_count == 3
        assert analysis.popularity_score == 73.0
        assert (analysis.complexity, analysis.security_score) == (50, 80)

    def test_nested_content_names(self, raw_repo: RawRepoData) -> None:
        """경로 형태의 항목 이름도 부분 문자열로 판별한다."""
        raw = _with_contents(raw_repo, "package.json", "README.md", ".github/workflows/ci.yml")
        analysis = AnalysisAggregator(metrics=StaticMetricsProvider()).aggregate(raw).analysis
        assert analysis.framework == "Node.js"
        assert (analysis.has_docs, analysis.has_ci, analysis.has_tests) == (True, True, False)

    def test_no_docs(self, raw_repo: RawRepoData) -> None:
        raw = _with_contents(raw_repo, "package.json", "src", "LICENSE")
        result = AnalysisAggregator(metrics=StaticMetricsProvider()).aggregate(raw)
        assert result.analysis.has_docs is False

    def test_empty_languages_falls_back_to_unknown(self, raw_repo: RawRepoData) -> None:
        raw = raw_repo.model_copy(
            update={
                "languages": {},
                "metadata": raw_repo.metadata.model_copy(update={"language": None}),
            }
        )
        result = AnalysisAggregator(metrics=StaticMetricsProvider()).aggregate(raw)
        assert result.basic.language == "Unknown"
        assert result.analysis.framework == "Unknown"

    def test_detects_tests_by_substring(self, raw_repo: RawRepoData) -> None:
        raw = _with_contents(raw_repo, "package.json", "__tests__", "docs")
        result = AnalysisAggregator(metrics=StaticMetricsProvider()).aggregate(raw)
        assert result.analysis.has_tests is True
        assert result.analysis.has_docs is True
        assert result.analysis.has_ci is False

    def test_empty_contents(self, raw_repo: RawRepoData) -> None:
        result = AnalysisAggregator(metrics=StaticMetricsProvider()).aggregate(
            _with_contents(raw_repo)
        )
        assert result.analysis.file_count == 0
        assert not (result.analysis.has_tests or result.analysis.has_ci)

    def test_custom_architecture(self, raw_repo: RawRepoData) -> None:
        aggregator = AnalysisAggregator(
            metrics=StaticMetricsProvider(), architecture="Monorepo"
        )
        assert aggregator.aggregate(raw_repo).analysis.architecture == "Monorepo"

    def test_placeholder_scores_in_range(self, raw_repo: RawRepoData) -> None:
        aggregator = AnalysisAggregator(
            metrics=PlaceholderMetricsProvider(random.Random(7))
        )
        for _ in range(20):
            analysis = aggregator.aggregate(raw_repo).analysis
            assert 20 <= analysis.complexity <= 100
            assert 60 <= analysis.security_score <= 100
            assert 60 <= analysis.performance_score <= 100


class TestDetectFramework:
    """detect_framework 테스트."""

    @pytest.mark.parametrize(
        ("names", "language", "expected"),
        [
            (["package.json", "next.config.js"], "JavaScript", "Next.js"),
            (["package.json", "vite.config.ts"], "TypeScript", "Vite"),
            (["package.json"], "TypeScript", "Node.js"),
            (["index.js"], "JavaScript", "JavaScript"),
            (["requirements.txt", "manage.py", "django_app"], "Python", "Django"),
            (["pyproject.toml"], "Python", "Python"),
            (["main.py"], "Python", "Python"),
            (["gemfile", "config.ru"], "Ruby", "Ruby"),
            (["pom.xml", "spring-app"], "Java", "Spring Boot"),
            (["cargo.toml"], "Rust", "Rust"),
            ([], "Unknown", "Unknown"),
        ],
    )
    def test_rules(self, names: list[str], language: str, expected: str) -> None:
        assert detect_framework(names, language) == expected
