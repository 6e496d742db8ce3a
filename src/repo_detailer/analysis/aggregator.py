"""원시 API 응답을 분석 결과로 집계하는 모듈."""

import logging

from repo_detailer.analysis.frameworks import detect_framework
from repo_detailer.analysis.metrics import MetricsProvider, PlaceholderMetricsProvider
from repo_detailer.models import AnalysisResult, DerivedMetrics, RawRepoData

logger = logging.getLogger(__name__)

UNKNOWN_LANGUAGE = "Unknown"
DEFAULT_ARCHITECTURE = "Standard"

TEST_MARKERS = ("test", "spec")
CI_MARKERS = (".github", "ci", "travis")
DOCS_MARKERS = ("readme", "docs")


def primary_language(languages: dict[str, int]) -> str:
    """바이트 수가 가장 많은 언어를 반환한다.

    동률이면 언어 이름의 사전순으로 앞선 것을 고른다.
    """
    if not languages:
        return UNKNOWN_LANGUAGE
    # max()는 동률일 때 먼저 나온 항목을 반환하므로 이름순으로 정렬해 둔다
    name, _ = max(sorted(languages.items()), key=lambda item: item[1])
    return name


def _contains_any(names: list[str], markers: tuple[str, ...]) -> bool:
    return any(marker in name for name in names for marker in markers)


class AnalysisAggregator:
    """RawRepoData를 AnalysisResult로 정규화한다.

    I/O도 내부 상태도 없다. 임시 점수만 MetricsProvider에 위임한다.
    """

    def __init__(
        self,
        metrics: MetricsProvider | None = None,
        architecture: str = DEFAULT_ARCHITECTURE,
    ) -> None:
        """
        Args:
            metrics: 연성 지표 제공자. None이면 무작위 임시값 사용.
            architecture: 아키텍처 레이블
        """
        self.metrics = metrics or PlaceholderMetricsProvider()
        self.architecture = architecture

    def aggregate(self, raw: RawRepoData) -> AnalysisResult:
        """원시 데이터를 분석 결과로 변환한다."""
        meta = raw.metadata
        language = primary_language(raw.languages)
        names = [entry.name.lower() for entry in raw.contents]
        soft = self.metrics.measure(raw)

        analysis = DerivedMetrics(
            framework=detect_framework(names, language),
            architecture=self.architecture,
            complexity=soft.complexity,
            security_score=soft.security_score,
            performance_score=soft.performance_score,
            popularity_score=round(meta.stars * 0.7 + meta.forks * 0.3, 1),
            contributors=len(raw.contributors),
            file_count=len(raw.contents),
            has_tests=_contains_any(names, TEST_MARKERS),
            has_ci=_contains_any(names, CI_MARKERS),
            has_docs=_contains_any(names, DOCS_MARKERS),
        )
        logger.debug(
            f"Aggregated {meta.full_name}: language={language}, "
            f"framework={analysis.framework}, files={analysis.file_count}"
        )

        return AnalysisResult(
            basic=meta.to_summary(language=language, languages=raw.languages),
            analysis=analysis,
            contributors=list(raw.contributors),
            contents=list(raw.contents),
        )
