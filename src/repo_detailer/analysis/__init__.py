"""저장소 분석 모듈."""

from repo_detailer.analysis.aggregator import AnalysisAggregator, primary_language
from repo_detailer.analysis.metrics import (
    MetricsProvider,
    PlaceholderMetricsProvider,
    SoftMetrics,
    StaticMetricsProvider,
)

__all__ = [
    "AnalysisAggregator",
    "MetricsProvider",
    "PlaceholderMetricsProvider",
    "SoftMetrics",
    "StaticMetricsProvider",
    "primary_language",
]
