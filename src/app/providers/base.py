"""
AI Provider 추상 인터페이스.

- Provider 추상화로 모델/엔드포인트 교체 가능
- model_requested + model_used, 시도 횟수 기록
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from src.domain.errors import AnalyzerError
from src.domain.schemas import InlineImage, WasteAnalysis

# =============================================================================
# Result Data Classes
# =============================================================================

@dataclass
class AnalysisResult:
    """
    이미지 분석 결과.

    필수 키:
    - model_requested: config에 설정된 모델
    - model_used: 실제 호출된 모델
    - attempts: 실제 전송한 요청 수 (최대 3)
    """
    success: bool
    analysis: WasteAnalysis | None = None

    # 모델 추적
    model_requested: str | None = None
    model_used: str | None = None
    attempts: int = 0

    analysis_id: str | None = None
    analyzed_at: str | None = None
    error_message: str | None = None
    error_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result = {
            "success": self.success,
            "analysis": self.analysis.to_dict() if self.analysis else None,
            "model_requested": self.model_requested,
            "model_used": self.model_used,
            "attempts": self.attempts,
            "analysis_id": self.analysis_id,
            "analyzed_at": self.analyzed_at,
            "error_message": self.error_message,
            "error_code": self.error_code,
        }
        # None 값 제거 (용량 절약)
        return {k: v for k, v in result.items() if v is not None}


# =============================================================================
# Provider Exceptions
# =============================================================================

class ProviderError(AnalyzerError):
    """Provider 관련 에러."""
    pass


class AnalysisError(ProviderError):
    """이미지 분석 API 관련 에러."""
    pass


# =============================================================================
# Abstract Providers
# =============================================================================

class AnalysisProvider(ABC):
    """
    이미지 분석 Provider 추상 인터페이스.

    역할: 이미지 → 품목 분류 + mock 대시보드 데이터
    """

    model: str

    @abstractmethod
    async def analyze_image(self, image: InlineImage) -> AnalysisResult:
        """
        이미지 분석.

        Args:
            image: base64 인코딩된 이미지 파트

        Returns:
            AnalysisResult (success=True)

        Raises:
            AnalysisError: 재시도 후에도 실패, 4xx, 응답 파싱 실패
        """
        ...
