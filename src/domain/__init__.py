"""Domain layer: errors, constants and schemas."""

from .errors import AnalysisParseError, AnalyzerError, ErrorCodes, UploadRejectError
from .schemas import (
    AnalysisPageState,
    CompositionSlice,
    DashboardStats,
    DisposalTrend,
    InlineImage,
    RecyclingRate,
    WasteAnalysis,
)

__all__ = [
    "AnalyzerError",
    "UploadRejectError",
    "AnalysisParseError",
    "ErrorCodes",
    "WasteAnalysis",
    "DashboardStats",
    "CompositionSlice",
    "DisposalTrend",
    "RecyclingRate",
    "InlineImage",
    "AnalysisPageState",
]
