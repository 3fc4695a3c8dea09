"""
FastAPI 애플리케이션 진입점.

실행:
- 개발: uv run uvicorn src.app.main:app --reload
- 프로덕션: uv run uvicorn src.app.main:app
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

# Routes
from src.app.routes import analyzer
from src.app.services.analysis import AnalysisService

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent

# =============================================================================
# Configuration
# =============================================================================


def load_config(config_path: Path | None = None) -> dict:
    """설정 파일 로드."""
    if config_path is None:
        # 프로젝트 루트의 default.yaml
        config_path = PROJECT_ROOT / "default.yaml"

    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data: dict[Any, Any] = yaml.safe_load(f) or {}
        return data


def configure_logging(config: dict) -> None:
    """logging 레벨/포맷 설정."""
    level_name = str(config.get("logging", {}).get("level", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # httpx는 요청 URL(쿼리의 API 키 포함)을 INFO로 찍으므로 WARNING으로 올림
    logging.getLogger("httpx").setLevel(logging.WARNING)


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    애플리케이션 생명주기 관리.

    시작 시: .env/설정 로드, 서비스 생성
    종료 시: 리소스 정리 (없음)
    """
    # Startup
    load_dotenv()
    config = load_config()
    configure_logging(config)

    app.state.config = config
    # 테스트에서 미리 주입한 서비스가 있으면 유지
    if getattr(app.state, "analysis_service", None) is None:
        app.state.analysis_service = AnalysisService(config)

    logger.info(f"Analyzer ready (model={app.state.analysis_service.provider.model})")

    yield

    # Shutdown


# =============================================================================
# App Instance
# =============================================================================

app = FastAPI(
    title="Waste Analyzer",
    description="폐기물 이미지 → 분류 + 처리 방법 + 대시보드 통계",
    version="0.1.0",
    lifespan=lifespan,
)

# Static files (CSS)
static_dir = Path(__file__).parent / "static"
if static_dir.exists():
    app.mount("/static", StaticFiles(directory=static_dir), name="static")


# =============================================================================
# Routes
# =============================================================================

# 페이지 라우트 (HTML)
app.include_router(analyzer.router, prefix="", tags=["Analyzer"])

# API 라우트
app.include_router(analyzer.api_router, prefix="/api", tags=["Analyzer API"])


# =============================================================================
# Root Endpoints
# =============================================================================


@app.get("/health")
async def health() -> dict[str, str]:
    """헬스 체크."""
    return {"status": "ok"}


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
