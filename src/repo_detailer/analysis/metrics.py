"""연성 지표(soft metrics) 제공자 모듈.

복잡도, 보안, 성능 점수는 아직 실제 분석기가 없는 임시값이다.
실제 정적 분석기를 붙일 때는 MetricsProvider를 구현해 AnalysisAggregator에 넘기면 된다.
"""

import random
from typing import NamedTuple, Protocol

from repo_detailer.models import RawRepoData


class SoftMetrics(NamedTuple):
    """0-100 범위의 임시 점수 묶음."""

    complexity: int
    security_score: int
    performance_score: int


class MetricsProvider(Protocol):
    """연성 지표 제공자 프로토콜."""

    def measure(self, raw: RawRepoData) -> SoftMetrics:
        """원시 데이터로부터 점수를 계산한다."""
        ...


class PlaceholderMetricsProvider:
    """무작위 임시 점수를 반환한다."""

    def __init__(self, rng: random.Random | None = None) -> None:
        """
        Args:
            rng: 난수 생성기. 재현이 필요하면 시드를 고정한 인스턴스를 넘긴다.
        """
        self.rng = rng or random.Random()

    def measure(self, raw: RawRepoData) -> SoftMetrics:
        return SoftMetrics(
            complexity=self.rng.randint(20, 100),
            security_score=self.rng.randint(60, 100),
            performance_score=self.rng.randint(60, 100),
        )


class StaticMetricsProvider:
    """항상 같은 점수를 반환한다 (테스트용)."""

    def __init__(
        self,
        complexity: int = 50,
        security_score: int = 80,
        performance_score: int = 80,
    ) -> None:
        self.metrics = SoftMetrics(complexity, security_score, performance_score)

    def measure(self, raw: RawRepoData) -> SoftMetrics:
        return self.metrics
