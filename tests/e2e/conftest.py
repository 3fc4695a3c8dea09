"""
E2E 테스트용 Playwright 설정.

설정 항목:
- 뷰포트: 1280x720, 기본 타임아웃 15초
- 실패 시 스크린샷 + HTML 덤프 저장 (API 키 마스킹)

브라우저 테스트는 RUN_BROWSER_TESTS=1 일 때만 실행한다.
TestClient 기반 API 테스트는 Playwright 없이 항상 실행된다.
"""

import os
import re
from collections.abc import Generator
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

# Playwright는 선택적 의존성 - 설치되어 있을 때만 import
try:
    from playwright.sync_api import BrowserContext, Page

    PLAYWRIGHT_AVAILABLE = True
except ImportError:
    PLAYWRIGHT_AVAILABLE = False

if TYPE_CHECKING:
    from playwright.sync_api import BrowserContext, Page

ARTIFACTS_DIR = Path(__file__).parent / "artifacts"
RUN_BROWSER_TESTS = os.getenv("RUN_BROWSER_TESTS") == "1"

# =============================================================================
# 민감 정보 마스킹
# =============================================================================

SENSITIVE_PATTERNS = [
    # Google API 키
    (r"AIza[0-9A-Za-z_-]{20,}", "[MASKED_API_KEY]"),
    # 쿼리 파라미터 key=...
    (r"([?&]key=)[^&\"'\s]+", r"\1[MASKED]"),
    # 업로드 이미지 (data URL 본문은 길기만 하고 디버깅에 불필요)
    (r"(data:image/[a-z]+;base64,)[A-Za-z0-9+/=]{64,}", r"\1[TRUNCATED]"),
]


def mask_sensitive_data(content: str) -> str:
    """민감 정보를 마스킹한 문자열 반환."""
    masked = content
    for pattern, replacement in SENSITIVE_PATTERNS:
        masked = re.sub(pattern, replacement, masked)
    return masked


# =============================================================================
# Playwright 기본 설정
# =============================================================================

if PLAYWRIGHT_AVAILABLE:

    @pytest.fixture(scope="session")
    def browser_context_args(browser_context_args: dict) -> dict:
        """브라우저 컨텍스트 설정."""
        return {**browser_context_args, "viewport": {"width": 1280, "height": 720}}

    @pytest.fixture
    def page(context: "BrowserContext") -> "Generator[Page, None, None]":
        """페이지 fixture with 타임아웃 + 콘솔 로그 수집."""
        page = context.new_page()
        page.set_default_timeout(15000)

        console_logs: list[str] = []
        page.on("console", lambda msg: console_logs.append(f"[{msg.type}] {msg.text}"))
        page.on("pageerror", lambda err: console_logs.append(f"[PAGE_ERROR] {err}"))
        page._console_logs = console_logs  # type: ignore[attr-defined]

        yield page

        page.close()


def pytest_collection_modifyitems(config, items):
    """RUN_BROWSER_TESTS 없으면 browser 마커 테스트 skip."""
    if RUN_BROWSER_TESTS and PLAYWRIGHT_AVAILABLE:
        return

    reason = (
        "playwright not installed"
        if not PLAYWRIGHT_AVAILABLE
        else "set RUN_BROWSER_TESTS=1 to run browser tests"
    )
    skip_browser = pytest.mark.skip(reason=reason)
    for item in items:
        if "browser" in item.keywords:
            item.add_marker(skip_browser)


# =============================================================================
# 실패 시 디버깅 정보 저장
# =============================================================================


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """브라우저 테스트 실패 시 스크린샷/HTML 저장."""
    outcome = yield
    rep = outcome.get_result()

    if rep.when != "call" or not rep.failed:
        return

    page = item.funcargs.get("page")
    if page is None:
        return

    ARTIFACTS_DIR.mkdir(exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    base_name = f"{item.name.split('[')[0]}_{timestamp}"

    try:
        page.screenshot(path=str(ARTIFACTS_DIR / f"{base_name}.png"), full_page=True)
        html = mask_sensitive_data(page.content())
        (ARTIFACTS_DIR / f"{base_name}.html").write_text(html, encoding="utf-8")

        console_logs = getattr(page, "_console_logs", [])
        if console_logs:
            logs = mask_sensitive_data("\n".join(console_logs))
            (ARTIFACTS_DIR / f"{base_name}.log").write_text(logs, encoding="utf-8")
    except Exception as e:
        print(f"\n⚠️ Artifact capture failed: {e}")
