"""
Pytest fixtures for the analyzer tests.

테스트 구성:
- 정상 응답, 재시도 대상(429/5xx), 즉시 실패(4xx), 깨진 응답 케이스 분리
- HTTP 경계는 httpx.MockTransport로 대체 (실제 네트워크 호출 없음)
"""

import json
import threading
import time
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import httpx
import pytest
import uvicorn
import yaml

# 1x1 투명 PNG
PNG_1X1 = bytes.fromhex(
    "89504e470d0a1a0a0000000d49484452000000010000000108060000001f15c489"
    "0000000d49444154789c6360000002000154a24f5d0000000049454e44ae426082"
)

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def project_root() -> Path:
    """프로젝트 루트 경로."""
    return Path(__file__).parent.parent


@pytest.fixture
def default_config_path(project_root: Path) -> Path:
    """default.yaml 경로."""
    return project_root / "default.yaml"


@pytest.fixture
def default_config(default_config_path: Path) -> dict:
    """기본 설정 로드."""
    with open(default_config_path, encoding="utf-8") as f:
        return yaml.safe_load(f)


# =============================================================================
# Image Fixtures
# =============================================================================


@pytest.fixture
def png_bytes() -> bytes:
    """유효한 1x1 PNG 바이트."""
    return PNG_1X1


# =============================================================================
# Response Fixtures
# =============================================================================


@pytest.fixture
def sample_analysis() -> dict:
    """정상 케이스 분석 payload."""
    return {
        "waste_type": "Plastic Water Bottle",
        "home_treatment": "Empty, rinse and place in the recycling bin with the cap on.",
        "industry_treatment": "Sorted, shredded into flakes and pelletised for new PET products.",
        "stats": {
            "recycled_items_count": 2847,
            "carbon_saved_kg": "284 kg",
            "average_score_percent": "87%",
        },
        "waste_composition": [
            {"name": "Plastic", "value": 35, "color": "#e78a53"},
            {"name": "Paper", "value": 25, "color": "#5eead4"},
            {"name": "Organic", "value": 20, "color": "#a3e635"},
            {"name": "Glass", "value": 12, "color": "#60a5fa"},
            {"name": "Metal", "value": 8, "color": "#f472b6"},
        ],
        "disposal_trends": [
            {"month": "Jan", "home": 40, "industrial": 24},
            {"month": "Feb", "home": 30, "industrial": 13},
            {"month": "Mar", "home": 20, "industrial": 38},
            {"month": "Apr", "home": 27, "industrial": 39},
            {"month": "May", "home": 18, "industrial": 48},
            {"month": "Jun", "home": 23, "industrial": 38},
        ],
        "recycling_rates": [
            {"category": "Plastic", "rate": 68},
            {"category": "Paper", "rate": 82},
            {"category": "Glass", "rate": 75},
            {"category": "Metal", "rate": 90},
            {"category": "Organic", "rate": 55},
        ],
    }


@pytest.fixture
def sample_analysis_missing_field(sample_analysis: dict) -> dict:
    """필수 필드(recycling_rates) 누락 payload."""
    data = dict(sample_analysis)
    del data["recycling_rates"]
    return data


def gemini_body(text: str) -> dict[str, Any]:
    """generateContent 응답 본문."""
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": text}]},
                "finishReason": "STOP",
            }
        ]
    }


@pytest.fixture
def make_gemini_body() -> Callable[[str], dict[str, Any]]:
    """generateContent 응답 본문 팩토리."""
    return gemini_body


@pytest.fixture
def gemini_success_body(sample_analysis: dict) -> dict:
    """정상 generateContent 응답."""
    return gemini_body(json.dumps(sample_analysis))


# =============================================================================
# HTTP Mock Fixtures
# =============================================================================


class RecordingTransport(httpx.MockTransport):
    """요청을 기록하고 응답을 순서대로 돌려주는 MockTransport."""

    def __init__(self, responses: list[httpx.Response | Exception]) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        # 마지막 응답은 이후 요청에도 반복
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        # 같은 Response 인스턴스를 재사용하지 않도록 복사
        return httpx.Response(item.status_code, headers=item.headers, content=item.content)


@pytest.fixture
def make_transport() -> Callable[..., RecordingTransport]:
    """RecordingTransport 팩토리."""

    def _make(*responses: httpx.Response | Exception) -> RecordingTransport:
        return RecordingTransport(list(responses))

    return _make


@pytest.fixture
def no_sleep(monkeypatch) -> list[float]:
    """재시도 대기를 건너뛰고 대기 시간만 기록."""
    delays: list[float] = []

    async def _fake_sleep(delay: float) -> None:
        delays.append(delay)

    monkeypatch.setattr("src.utils.retry.asyncio.sleep", _fake_sleep)
    return delays


# =============================================================================
# Browser Test Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def live_server() -> Generator[str, None, None]:
    """
    FastAPI 앱을 백그라운드에서 실행하는 fixture.

    Returns:
        서버 URL (예: "http://localhost:8765")
    """
    from src.app.main import app

    # 테스트용 포트
    port = 8765
    host = "127.0.0.1"

    # 별도 스레드에서 서버 실행
    config = uvicorn.Config(app, host=host, port=port, log_level="error")
    server = uvicorn.Server(config)

    def run_server() -> None:
        import asyncio
        asyncio.run(server.serve())

    thread = threading.Thread(target=run_server, daemon=True)
    thread.start()

    # 서버가 준비될 때까지 대기
    base_url = f"http://{host}:{port}"
    max_attempts = 30
    for _ in range(max_attempts):
        try:
            response = httpx.get(f"{base_url}/health", timeout=1.0)
            if response.status_code == 200:
                break
        except httpx.HTTPError:
            time.sleep(0.1)
    else:
        raise RuntimeError("Failed to start test server")

    yield base_url

    # 서버 종료
    server.should_exit = True
