"""
Error definitions for the analyzer.

규칙:
- 조용한 실패 금지 → 코드가 붙은 예외로 명시적 실패
- 재시도 가능(429/5xx/네트워크) vs 즉시 실패(그 외) 두 가지로만 구분
"""

from typing import Any


class AnalyzerError(Exception):
    """
    Analyzer 공통 에러.

    code는 ErrorCodes 상수, message는 사용자에게 그대로 보여줄 수 있는 문장.

    Usage:
        raise UploadRejectError(ErrorCodes.IMAGE_REQUIRED, "Please upload an image first.")
    """

    def __init__(self, code: str, message: str, **context: Any) -> None:
        self.code = code
        self.message = message
        self.context = context
        super().__init__(f"[{code}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            "message": self.message,
            **self.context,
        }


class UploadRejectError(AnalyzerError):
    """업로드 단계에서 거절 (네트워크 호출 전)."""
    pass


class AnalysisParseError(AnalyzerError):
    """응답 JSON이 기대한 형태가 아님."""
    pass


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Upload ===
    IMAGE_REQUIRED = "IMAGE_REQUIRED"
    UNSUPPORTED_IMAGE_TYPE = "UNSUPPORTED_IMAGE_TYPE"
    IMAGE_TOO_LARGE = "IMAGE_TOO_LARGE"
    INVALID_IMAGE_DATA = "INVALID_IMAGE_DATA"  # 재분석용 data URL 손상
    INVALID_UPLOAD = "INVALID_UPLOAD"          # multipart 폼 파싱 실패

    # === API call ===
    API_ERROR = "API_ERROR"                  # 4xx (재시도 안 함)
    RETRIES_EXHAUSTED = "RETRIES_EXHAUSTED"  # 429/5xx가 끝까지 계속됨
    NETWORK_ERROR = "NETWORK_ERROR"          # 연결 실패/타임아웃
    API_KEY_MISSING = "API_KEY_MISSING"

    # === Response parsing ===
    INVALID_RESPONSE_STRUCTURE = "INVALID_RESPONSE_STRUCTURE"
    INVALID_RESPONSE_JSON = "INVALID_RESPONSE_JSON"
    INVALID_RESPONSE_SCHEMA = "INVALID_RESPONSE_SCHEMA"
