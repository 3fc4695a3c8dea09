"""
Analyzer Routes: 폐기물 이미지 분석 페이지.

- GET / → 분석 화면 (Jinja2)
- POST /analyze → 폼 업로드 → 결과/에러가 포함된 화면 다시 렌더링
- POST /api/analyze → 같은 흐름, JSON 응답

페이지 상태(loading/error/result)는 요청마다 새로 만들고 저장하지 않는다.
"""

import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException

from src.app.providers.base import AnalysisError
from src.app.services.analysis import AnalysisService
from src.core.images import from_data_url
from src.domain.constants import MSG_INVALID_UPLOAD
from src.domain.errors import ErrorCodes, UploadRejectError
from src.domain.schemas import AnalysisPageState, WasteAnalysis

logger = logging.getLogger(__name__)

# Jinja2 템플릿 설정
_templates_dir = Path(__file__).parent.parent / "templates"
jinja_templates = Jinja2Templates(directory=_templates_dir)

# Routers
router = APIRouter()  # HTML pages
api_router = APIRouter()  # API endpoints


# =============================================================================
# Helpers
# =============================================================================


def get_analysis_service(request: Request) -> AnalysisService:
    """app.state에 올려둔 AnalysisService."""
    service: AnalysisService = request.app.state.analysis_service
    return service


async def read_upload(
    file: UploadFile | None,
    image_data: str | None,
) -> tuple[bytes | None, str | None, str | None]:
    """
    업로드 파일 읽기.

    새 파일이 없으면 이전 미리보기(data URL)로 같은 이미지를 다시 분석.

    Returns:
        (file_bytes, filename, content_type)
    """
    if file is not None:
        file_bytes = await file.read()
        if file_bytes:
            return file_bytes, file.filename, file.content_type

    if image_data:
        file_bytes, mime_type = from_data_url(image_data)
        return file_bytes, None, mime_type

    return None, None, None


async def read_form(
    request: Request,
    service: AnalysisService,
) -> tuple[bytes | None, str | None, str | None]:
    """
    multipart 폼 (file, image_data) 읽기.

    image_data는 파일이 아닌 일반 필드라 Starlette 기본 상한(1MB)에 걸리므로
    upload.max_size_mb 기준 상한으로 직접 파싱한다.

    Raises:
        UploadRejectError: 폼 파싱 실패, 깨진 data URL
    """
    try:
        async with request.form(max_part_size=service.max_form_part_size) as form:
            file = form.get("file")
            image_data = form.get("image_data")
            return await read_upload(
                file if isinstance(file, UploadFile) else None,
                image_data if isinstance(image_data, str) else None,
            )
    except HTTPException as e:
        logger.info(f"Form parsing failed: {e.detail}")
        raise UploadRejectError(
            ErrorCodes.INVALID_UPLOAD,
            MSG_INVALID_UPLOAD,
            detail=e.detail,
        ) from e


def build_chart_context(analysis: WasteAnalysis | None) -> dict[str, Any]:
    """막대 길이 계산용 최댓값 (0 나눗셈 방지로 최소 1)."""
    if analysis is None:
        return {}

    trend_values = [
        value
        for trend in analysis.disposal_trends
        for value in (trend.home, trend.industrial)
    ]
    return {
        "trend_max": max(trend_values, default=0) or 1,
        "rate_max": max((r.rate for r in analysis.recycling_rates), default=0) or 100,
        "composition_total": sum(s.value for s in analysis.waste_composition) or 1,
    }


def render_page(
    request: Request,
    state: AnalysisPageState,
    status_code: int = 200,
) -> HTMLResponse:
    """분석 화면 렌더링."""
    return jinja_templates.TemplateResponse(
        request,
        "analyzer.html",
        {
            "state": state,
            "analysis": state.result,
            "chart": build_chart_context(state.result),
        },
        status_code=status_code,
    )


# =============================================================================
# Page Routes (HTML)
# =============================================================================


@router.get("/", response_class=HTMLResponse)
async def analyzer_page(request: Request) -> HTMLResponse:
    """
    분석 화면.

    이미지가 없으므로 분석 버튼은 비활성 상태로 렌더링.
    """
    return render_page(request, AnalysisPageState())


@router.post("/analyze", response_class=HTMLResponse)
async def analyze_page(request: Request) -> HTMLResponse:
    """
    폼 업로드 → 분석 → 화면 다시 렌더링.

    실패해도 200으로 화면을 돌려주고 에러 박스에 메시지를 표시.
    """
    service = get_analysis_service(request)

    try:
        file_bytes, filename, content_type = await read_form(request, service)
    except UploadRejectError as e:
        return render_page(request, AnalysisPageState(error=e.message))

    state = await service.analyze(file_bytes, filename, content_type)
    return render_page(request, state)


# =============================================================================
# API Routes
# =============================================================================


@api_router.post("/analyze")
async def analyze_api(request: Request) -> JSONResponse:
    """
    이미지 분석 API.

    폼 필드: file (이미지) 또는 image_data (data URL).

    Returns:
        200: {"analysis": ..., "meta": {...}}
        400: 업로드 거절 {"code", "message"}
        502: 분석 API 실패 {"code", "message", ...}
    """
    service = get_analysis_service(request)

    try:
        file_bytes, filename, content_type = await read_form(request, service)
        image = service.prepare_image(file_bytes, filename, content_type)
    except UploadRejectError as e:
        return JSONResponse(status_code=400, content=e.to_dict())

    try:
        result = await service.run(image)
    except AnalysisError as e:
        logger.error(f"Analysis API failed: {e}")
        return JSONResponse(status_code=502, content=e.to_dict())

    meta = result.to_dict()
    analysis = meta.pop("analysis", None)
    meta["filename"] = filename

    return JSONResponse(content={"analysis": analysis, "meta": meta})
