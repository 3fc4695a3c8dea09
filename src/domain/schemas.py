"""
Data schemas for the analyzer.

규칙:
- 필드명 통일: Gemini responseSchema 키와 동일하게 사용
- 최상위 7개 키는 필수, 하위 속성은 없으면 기본값
- 검증은 "파싱 성공/실패"까지만 (항목 개수는 강제하지 않음)
"""

import math
from dataclasses import dataclass, field
from typing import Any

from src.domain.constants import REQUIRED_RESPONSE_FIELDS
from src.domain.errors import AnalysisParseError, ErrorCodes

Number = int | float


# =============================================================================
# Parsing helpers
# =============================================================================

def _as_str(value: Any, path: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise AnalysisParseError(
            ErrorCodes.INVALID_RESPONSE_SCHEMA,
            f"Expected string at '{path}'",
            path=path,
        )
    return value


def _as_number(value: Any, path: str) -> Number:
    if value is None:
        return 0
    # bool은 int의 서브클래스라 명시적으로 제외
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise AnalysisParseError(
            ErrorCodes.INVALID_RESPONSE_SCHEMA,
            f"Expected number at '{path}'",
            path=path,
        )
    # json.loads는 NaN/Infinity를 받아들이지만 JSON 응답으로 다시 직렬화할 수 없음
    if not math.isfinite(value):
        raise AnalysisParseError(
            ErrorCodes.INVALID_RESPONSE_SCHEMA,
            f"Expected finite number at '{path}'",
            path=path,
        )
    return value


def _as_object(value: Any, path: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise AnalysisParseError(
            ErrorCodes.INVALID_RESPONSE_SCHEMA,
            f"Expected object at '{path}'",
            path=path,
        )
    return value


def _as_list(value: Any, path: str) -> list[Any]:
    if not isinstance(value, list):
        raise AnalysisParseError(
            ErrorCodes.INVALID_RESPONSE_SCHEMA,
            f"Expected array at '{path}'",
            path=path,
        )
    return value


# =============================================================================
# Dashboard Schemas
# =============================================================================

@dataclass
class DashboardStats:
    """대시보드 통계 (mock)."""
    recycled_items_count: Number = 0
    carbon_saved_kg: str = ""        # 단위 포함 문자열 (예: "284 kg")
    average_score_percent: str = ""  # 예: "87%"

    @classmethod
    def from_dict(cls, data: Any, path: str = "stats") -> "DashboardStats":
        obj = _as_object(data, path)
        return cls(
            recycled_items_count=_as_number(
                obj.get("recycled_items_count"), f"{path}.recycled_items_count"
            ),
            carbon_saved_kg=_as_str(obj.get("carbon_saved_kg"), f"{path}.carbon_saved_kg"),
            average_score_percent=_as_str(
                obj.get("average_score_percent"), f"{path}.average_score_percent"
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "recycled_items_count": self.recycled_items_count,
            "carbon_saved_kg": self.carbon_saved_kg,
            "average_score_percent": self.average_score_percent,
        }


@dataclass
class CompositionSlice:
    """파이 차트 조각."""
    name: str
    value: Number
    color: str = ""  # hex (예: "#e78a53")

    @classmethod
    def from_dict(cls, data: Any, path: str) -> "CompositionSlice":
        obj = _as_object(data, path)
        return cls(
            name=_as_str(obj.get("name"), f"{path}.name"),
            value=_as_number(obj.get("value"), f"{path}.value"),
            color=_as_str(obj.get("color"), f"{path}.color"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value, "color": self.color}


@dataclass
class DisposalTrend:
    """월별 처리 추이."""
    month: str
    home: Number = 0
    industrial: Number = 0

    @classmethod
    def from_dict(cls, data: Any, path: str) -> "DisposalTrend":
        obj = _as_object(data, path)
        return cls(
            month=_as_str(obj.get("month"), f"{path}.month"),
            home=_as_number(obj.get("home"), f"{path}.home"),
            industrial=_as_number(obj.get("industrial"), f"{path}.industrial"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"month": self.month, "home": self.home, "industrial": self.industrial}


@dataclass
class RecyclingRate:
    """카테고리별 재활용률."""
    category: str
    rate: Number = 0

    @classmethod
    def from_dict(cls, data: Any, path: str) -> "RecyclingRate":
        obj = _as_object(data, path)
        return cls(
            category=_as_str(obj.get("category"), f"{path}.category"),
            rate=_as_number(obj.get("rate"), f"{path}.rate"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"category": self.category, "rate": self.rate}


# =============================================================================
# Analysis Payload
# =============================================================================

@dataclass
class WasteAnalysis:
    """
    Gemini 응답 payload.

    외부에서 정의된 JSON 형태 그대로. 다음 업로드 전까지만 페이지 상태로 유지.
    """
    # === 이미지 기반 ===
    waste_type: str
    home_treatment: str
    industry_treatment: str

    # === mock 대시보드 ===
    stats: DashboardStats = field(default_factory=DashboardStats)
    waste_composition: list[CompositionSlice] = field(default_factory=list)
    disposal_trends: list[DisposalTrend] = field(default_factory=list)
    recycling_rates: list[RecyclingRate] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "WasteAnalysis":
        """
        디코딩된 JSON 객체 → WasteAnalysis.

        Raises:
            AnalysisParseError: 필수 키 누락 또는 타입 불일치
        """
        obj = _as_object(data, "$")

        missing = [key for key in REQUIRED_RESPONSE_FIELDS if key not in obj]
        if missing:
            raise AnalysisParseError(
                ErrorCodes.INVALID_RESPONSE_SCHEMA,
                f"Missing required fields: {', '.join(missing)}",
                missing_fields=missing,
            )

        return cls(
            waste_type=_as_str(obj["waste_type"], "waste_type"),
            home_treatment=_as_str(obj["home_treatment"], "home_treatment"),
            industry_treatment=_as_str(obj["industry_treatment"], "industry_treatment"),
            stats=DashboardStats.from_dict(obj["stats"]),
            waste_composition=[
                CompositionSlice.from_dict(item, f"waste_composition[{i}]")
                for i, item in enumerate(_as_list(obj["waste_composition"], "waste_composition"))
            ],
            disposal_trends=[
                DisposalTrend.from_dict(item, f"disposal_trends[{i}]")
                for i, item in enumerate(_as_list(obj["disposal_trends"], "disposal_trends"))
            ],
            recycling_rates=[
                RecyclingRate.from_dict(item, f"recycling_rates[{i}]")
                for i, item in enumerate(_as_list(obj["recycling_rates"], "recycling_rates"))
            ],
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON 직렬화용 (wire 형태)."""
        return {
            "waste_type": self.waste_type,
            "home_treatment": self.home_treatment,
            "industry_treatment": self.industry_treatment,
            "stats": self.stats.to_dict(),
            "waste_composition": [s.to_dict() for s in self.waste_composition],
            "disposal_trends": [t.to_dict() for t in self.disposal_trends],
            "recycling_rates": [r.to_dict() for r in self.recycling_rates],
        }


# =============================================================================
# Request / Page State
# =============================================================================

@dataclass
class InlineImage:
    """Gemini inlineData 파트 (base64, data URL prefix 없음)."""
    data: str
    mime_type: str

    def to_part(self) -> dict[str, Any]:
        return {"inlineData": {"data": self.data, "mimeType": self.mime_type}}


@dataclass
class AnalysisPageState:
    """
    페이지 상태 (요청 1회 동안만 유지).

    loading / error / result 플래그가 전부. 저장하지 않음.
    """
    is_loading: bool = False
    error: str = ""
    result: WasteAnalysis | None = None
    image_preview: str = ""  # data URL
    filename: str | None = None

    @property
    def has_image(self) -> bool:
        return bool(self.image_preview)

    @property
    def can_analyze(self) -> bool:
        """분석 버튼 활성화 조건: 이미지가 있고 로딩 중이 아님."""
        return self.has_image and not self.is_loading

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_loading": self.is_loading,
            "error": self.error,
            "result": self.result.to_dict() if self.result else None,
            "filename": self.filename,
            "can_analyze": self.can_analyze,
        }
