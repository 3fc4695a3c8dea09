"""
App Services.

- analysis: 업로드 이미지 → Provider 호출 → 페이지 상태
"""

from .analysis import AnalysisService, format_failure_message

__all__ = [
    "AnalysisService",
    "format_failure_message",
]
