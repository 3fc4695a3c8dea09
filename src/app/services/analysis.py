"""
Analysis Service: 업로드 이미지 → 분석 결과 페이지 상태.

흐름:
- (a) 파일 수신 → (b) base64 → (c)(d) Provider 호출 (재시도 포함)
- (e) 응답 → AnalysisPageState → (f) 라우트에서 렌더링
- 실패는 사용자에게 보여줄 메시지 1개로 정리
"""

import logging

from src.app.providers.base import AnalysisProvider, AnalysisResult
from src.app.providers.gemini import GeminiWasteAnalyzer
from src.core.images import encode_image, resolve_mime_type, to_data_url, validate_image
from src.domain.constants import (
    ALLOWED_IMAGE_MIME_TYPES,
    BASE64_SIZE_RATIO,
    DATA_URL_HEADER_MARGIN,
    DEFAULT_API_BASE,
    DEFAULT_INITIAL_DELAY,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_DELAY,
    DEFAULT_MODEL,
    DEFAULT_TIMEOUT_SECONDS,
    IMAGE_MAX_SIZE_MB,
    MSG_FAILURE_TEMPLATE,
)
from src.domain.errors import AnalyzerError, UploadRejectError
from src.domain.schemas import AnalysisPageState, InlineImage

logger = logging.getLogger(__name__)


def format_failure_message(message: str) -> str:
    """사용자에게 보여줄 실패 메시지."""
    return MSG_FAILURE_TEMPLATE.format(message=message.rstrip(". "))


class AnalysisService:
    """
    분석 서비스.

    요청마다 새 AnalysisPageState를 만들고 저장하지 않음.
    """

    def __init__(
        self,
        config: dict,
        provider: AnalysisProvider | None = None,
    ):
        """
        Args:
            config: 설정 (ai.analyzer, ai.retry, upload 포함)
            provider: 분석 Provider (None이면 config 기반 생성)
        """
        self.config = config

        upload_config = config.get("upload", {})
        self.max_size_mb = upload_config.get("max_size_mb", IMAGE_MAX_SIZE_MB)
        self.allowed_mime_types = tuple(
            upload_config.get("allowed_mime_types", ALLOWED_IMAGE_MIME_TYPES)
        )

        if provider is not None:
            self.provider = provider
        else:
            ai_config = config.get("ai", {})
            analyzer_config = ai_config.get("analyzer", {})
            retry_config = ai_config.get("retry", {})
            self.provider = GeminiWasteAnalyzer(
                model=analyzer_config.get("model", DEFAULT_MODEL),
                api_base=analyzer_config.get("api_base", DEFAULT_API_BASE),
                timeout=analyzer_config.get("timeout", DEFAULT_TIMEOUT_SECONDS),
                max_attempts=retry_config.get("max_attempts", DEFAULT_MAX_ATTEMPTS),
                initial_delay=retry_config.get("initial_delay", DEFAULT_INITIAL_DELAY),
                max_delay=retry_config.get("max_delay", DEFAULT_MAX_DELAY),
            )

    @property
    def max_form_part_size(self) -> int:
        """폼 필드(미리보기 data URL) 크기 상한 (bytes)."""
        max_bytes = self.max_size_mb * 1024 * 1024
        return int(max_bytes * BASE64_SIZE_RATIO) + DATA_URL_HEADER_MARGIN

    def prepare_image(
        self,
        file_bytes: bytes | None,
        filename: str | None,
        content_type: str | None,
    ) -> InlineImage:
        """
        업로드 검증 + 인코딩.

        Raises:
            UploadRejectError: 빈 파일, 지원하지 않는 형식, 용량 초과
        """
        mime_type = resolve_mime_type(content_type, filename)
        validate_image(
            file_bytes,
            mime_type,
            max_size_mb=self.max_size_mb,
            allowed_mime_types=self.allowed_mime_types,
        )
        return encode_image(file_bytes or b"", mime_type)

    async def analyze(
        self,
        file_bytes: bytes | None,
        filename: str | None,
        content_type: str | None,
    ) -> AnalysisPageState:
        """
        업로드 이미지 분석.

        Args:
            file_bytes: 업로드 바이트 (없으면 "Please upload an image first.")
            filename: 원본 파일명
            content_type: 브라우저가 보낸 MIME

        Returns:
            AnalysisPageState (result 또는 error)

        요청 진행 중 표시는 페이지의 submit 핸들러가 담당하므로
        서버가 렌더링하는 상태의 is_loading은 항상 False.
        """
        state = AnalysisPageState(filename=filename)

        try:
            image = self.prepare_image(file_bytes, filename, content_type)
        except UploadRejectError as e:
            logger.info(f"Upload rejected: {e.code}")
            state.error = e.message
            return state

        state.image_preview = to_data_url(image)

        try:
            result = await self.run(image)
            state.result = result.analysis

        except AnalyzerError as e:
            logger.error(f"Analysis failed: {e}")
            state.error = format_failure_message(e.message)

        return state

    async def run(self, image: InlineImage) -> AnalysisResult:
        """Provider 호출 (에러는 그대로 전파)."""
        return await self.provider.analyze_image(image)
