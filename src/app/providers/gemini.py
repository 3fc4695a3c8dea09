"""
Google Gemini 이미지 분석 Provider.

generateContent REST 엔드포인트에 이미지 + 고정 responseSchema를 POST.

재시도 정책:
- RETRYABLE: 429, 5xx, 네트워크 실패 → 지수 백오프로 재시도 (총 3회)
- REJECT_IMMEDIATELY: 그 외 non-2xx → 즉시 에러
"""

import json
import logging
import os
from datetime import UTC, datetime
from typing import Any

import httpx

from src.core.ids import generate_analysis_id
from src.domain.constants import (
    DEFAULT_API_BASE,
    DEFAULT_INITIAL_DELAY,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_DELAY,
    DEFAULT_MODEL,
    DEFAULT_TIMEOUT_SECONDS,
    MSG_INVALID_STRUCTURE,
    RESPONSE_SCHEMA,
    RETRYABLE_STATUS_CODES,
    SERVER_ERROR_MIN_STATUS,
    SYSTEM_PROMPT,
    USER_QUERY,
)
from src.domain.errors import AnalysisParseError, ErrorCodes
from src.domain.schemas import InlineImage, WasteAnalysis
from src.utils.retry import RetryableError, retry_with_exponential_backoff

from .base import AnalysisError, AnalysisProvider, AnalysisResult

logger = logging.getLogger(__name__)


# =============================================================================
# Retry Classification
# =============================================================================

class RetryableStatusError(RetryableError):
    """429/5xx 응답."""

    def __init__(self, status_code: int, reason: str) -> None:
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"HTTP {status_code} {reason}")


class RetryableTransportError(RetryableError):
    """연결 실패/타임아웃."""

    def __init__(self, cause: httpx.TransportError) -> None:
        self.cause = cause
        super().__init__(f"{type(cause).__name__}: {cause}")


def is_retryable_status(status_code: int) -> bool:
    """429 또는 5xx면 재시도 대상."""
    return status_code in RETRYABLE_STATUS_CODES or status_code >= SERVER_ERROR_MIN_STATUS


def extract_candidate_text(body: Any) -> str | None:
    """응답에서 candidates[0].content.parts[0].text 추출 (없으면 None)."""
    if not isinstance(body, dict):
        return None

    candidates = body.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None

    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        return None

    text = parts[0].get("text")
    return text if isinstance(text, str) and text else None


class GeminiWasteAnalyzer(AnalysisProvider):
    """
    Gemini 폐기물 분석 Provider.

    Usage:
        provider = GeminiWasteAnalyzer(model="gemini-2.5-flash-preview-09-2025")
        result = await provider.analyze_image(encode_image(image_bytes, "image/png"))
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        initial_delay: float = DEFAULT_INITIAL_DELAY,
        max_delay: float = DEFAULT_MAX_DELAY,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Args:
            model: 모델 ID (config에서 주입)
            api_key: API 키 (환경변수 GOOGLE_API_KEY 사용 가능)
            api_base: REST API base URL
            timeout: 요청 타임아웃(초)
            max_attempts: 최대 시도 횟수
            initial_delay: 첫 재시도 전 대기(초), 이후 2배씩
            max_delay: 대기 상한(초)
            client: 외부 주입 httpx 클라이언트 (테스트용, 닫지 않음)
        """
        self.model = model
        self.api_key = api_key or os.environ.get("GOOGLE_API_KEY")
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self._client = client

    def endpoint_url(self) -> str:
        """generateContent URL (API 키 제외)."""
        return f"{self.api_base}/models/{self.model}:generateContent"

    def build_payload(self, image: InlineImage) -> dict[str, Any]:
        """요청 payload (고정 스키마)."""
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": USER_QUERY}, image.to_part()],
                }
            ],
            "systemInstruction": {
                "parts": [{"text": SYSTEM_PROMPT}],
            },
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

    async def analyze_image(self, image: InlineImage) -> AnalysisResult:
        """
        이미지 분석.

        재시도 정책:
        - 429/5xx/네트워크 → 최대 max_attempts회까지 재시도
        - 그 외 4xx → 즉시 에러
        """
        analysis_id = generate_analysis_id()

        if not self.api_key:
            raise AnalysisError(
                ErrorCodes.API_KEY_MISSING,
                "API key is not configured. Set GOOGLE_API_KEY",
                analysis_id=analysis_id,
            )

        payload = self.build_payload(image)
        attempts = 0

        async def _api_call(client: httpx.AsyncClient) -> httpx.Response:
            nonlocal attempts
            attempts += 1
            logger.info(
                f"[{analysis_id}] POST {self.endpoint_url()} "
                f"(attempt {attempts}/{self.max_attempts})"
            )

            try:
                response = await client.post(
                    self.endpoint_url(),
                    params={"key": self.api_key},
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
            except httpx.TransportError as e:
                raise RetryableTransportError(e) from e
            except httpx.RequestError as e:
                # 리다이렉트 초과/디코딩 실패는 다시 보내도 같은 결과
                raise AnalysisError(
                    ErrorCodes.NETWORK_ERROR,
                    f"Network error while contacting the analysis service: "
                    f"{type(e).__name__}: {e}",
                    attempts=attempts,
                    analysis_id=analysis_id,
                ) from e

            if response.is_success:
                return response

            if is_retryable_status(response.status_code):
                raise RetryableStatusError(response.status_code, response.reason_phrase)

            # 클라이언트 에러는 재시도하지 않음
            raise AnalysisError(
                ErrorCodes.API_ERROR,
                f"APIError: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                analysis_id=analysis_id,
            )

        try:
            response = await self._with_client(_api_call)

        except RetryableStatusError as e:
            raise AnalysisError(
                ErrorCodes.RETRIES_EXHAUSTED,
                f"Failed to analyze image after retries: {e.reason}",
                status_code=e.status_code,
                attempts=attempts,
                analysis_id=analysis_id,
            ) from e

        except RetryableTransportError as e:
            raise AnalysisError(
                ErrorCodes.NETWORK_ERROR,
                f"Network error while contacting the analysis service: {e}",
                attempts=attempts,
                analysis_id=analysis_id,
            ) from e

        analysis = self._parse_response(response, analysis_id)
        logger.info(f"[{analysis_id}] Analysis succeeded: {analysis.waste_type!r}")

        return AnalysisResult(
            success=True,
            analysis=analysis,
            model_requested=self.model,
            model_used=self.model,
            attempts=attempts,
            analysis_id=analysis_id,
            analyzed_at=datetime.now(UTC).isoformat(),
        )

    async def _with_client(self, api_call: Any) -> httpx.Response:
        """재시도 루프 실행 (주입된 클라이언트가 없으면 1회용 생성)."""

        async def _run(client: httpx.AsyncClient) -> httpx.Response:
            response: httpx.Response = await retry_with_exponential_backoff(
                api_call,
                client,
                max_attempts=self.max_attempts,
                initial_delay=self.initial_delay,
                max_delay=self.max_delay,
                exceptions=(RetryableError,),
            )
            return response

        if self._client is not None:
            return await _run(self._client)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await _run(client)

    def _parse_response(self, response: httpx.Response, analysis_id: str) -> WasteAnalysis:
        """응답 본문 → WasteAnalysis."""
        try:
            body = response.json()
        except ValueError as e:
            raise AnalysisError(
                ErrorCodes.INVALID_RESPONSE_JSON,
                "API returned a non-JSON body",
                analysis_id=analysis_id,
            ) from e

        text = extract_candidate_text(body)
        if text is None:
            logger.error(f"[{analysis_id}] Response has no candidate text")
            raise AnalysisError(
                ErrorCodes.INVALID_RESPONSE_STRUCTURE,
                MSG_INVALID_STRUCTURE,
                analysis_id=analysis_id,
            )

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.error(f"[{analysis_id}] Candidate text is not valid JSON: {e}")
            raise AnalysisError(
                ErrorCodes.INVALID_RESPONSE_JSON,
                f"Model returned malformed JSON ({e.msg})",
                analysis_id=analysis_id,
            ) from e

        try:
            return WasteAnalysis.from_dict(data)
        except AnalysisParseError as e:
            logger.error(f"[{analysis_id}] Response schema mismatch: {e}")
            raise AnalysisError(
                e.code,
                e.message,
                analysis_id=analysis_id,
                **e.context,
            ) from e
