"""
AI Provider Abstraction.

엔드포인트/모델 교체 가능하게 설계.
모델명은 config만 SSOT.
"""

from .base import AnalysisError, AnalysisProvider, AnalysisResult, ProviderError
from .gemini import GeminiWasteAnalyzer

__all__ = [
    "AnalysisProvider",
    "AnalysisResult",
    "AnalysisError",
    "ProviderError",
    "GeminiWasteAnalyzer",
]
