"""저장소 분석 및 컨텍스트 문서 생성 파이프라인."""

__version__ = "0.1.0"
